from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import List, Optional

import typer

from tools.pollctl.cancel import background, handle_signals, with_timeout
from tools.pollctl.command import command_succeeds, path_exists, url_responds
from tools.pollctl.config import ConfigError, PollConfig, load_config
from tools.pollctl.logs import configure_logging
from tools.pollctl.poll import Aborted, CheckFn, Poller

EXIT_NOT_READY = 1
EXIT_BAD_CONFIG = 2
EXIT_ABORTED = 130

app = typer.Typer(no_args_is_help=True)


@app.callback()
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(None, "--config", help="YAML file with poll settings"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="log level"),
    poll_interval: Optional[float] = typer.Option(
        None, "--poll-interval", help="seconds between checks"
    ),
    request_timeout: Optional[float] = typer.Option(
        None, "--request-timeout", help="seconds before giving up"
    ),
) -> None:
    try:
        cfg = load_config(config) if config is not None else PollConfig()
        if log_level is not None:
            cfg = replace(cfg, log_level=log_level)
        if poll_interval is not None:
            cfg = replace(cfg, interval_seconds=poll_interval)
        if request_timeout is not None:
            cfg = replace(cfg, request_timeout_seconds=request_timeout)
        cfg = cfg.validated()
        configure_logging(cfg.log_level)
    except ConfigError as e:
        print(f"ERROR: {e}")
        raise typer.Exit(code=EXIT_BAD_CONFIG)
    ctx.obj = cfg


def _wait(cfg: PollConfig, title: str, check: CheckFn) -> None:
    print(f"  → Waiting for {title}...")

    root = background()
    with handle_signals(root):
        poller = Poller(root, cfg.interval_seconds)
        with with_timeout(root, cfg.request_timeout_seconds) as op:
            outcome = poller.poll(op, check)

    if outcome.ok:
        print(f"  → {title} (OK after {outcome.elapsed:.1f}s, {outcome.checks} checks)")
        raise typer.Exit(code=0)

    if isinstance(outcome.error, Aborted):
        print(f"ABORTED: {title} after {outcome.elapsed:.1f}s")
        raise typer.Exit(code=EXIT_ABORTED)

    print(f"ERROR: {title} not ready after {outcome.elapsed:.1f}s: {outcome.error}")
    if outcome.last_check_error is not None:
        print(f"  last check error: {outcome.last_check_error}")
    raise typer.Exit(code=EXIT_NOT_READY)


@app.command("wait-cmd")
def wait_cmd(
    ctx: typer.Context,
    command: List[str] = typer.Argument(..., help="command to run until it exits 0"),
) -> None:
    cfg: PollConfig = ctx.obj
    _wait(cfg, " ".join(command), command_succeeds(command, timeout=cfg.request_timeout_seconds))


@app.command("wait-file")
def wait_file(ctx: typer.Context, path: Path) -> None:
    _wait(ctx.obj, str(path), path_exists(path))


@app.command("wait-url")
def wait_url(
    ctx: typer.Context,
    url: str,
    status: int = typer.Option(200, "--status", help="expected HTTP status"),
) -> None:
    _wait(ctx.obj, url, url_responds(url, status=status))


if __name__ == "__main__":
    app()
