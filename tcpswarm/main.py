"""
tcpswarm command line.

    tcpswarm run [ADDRESS] -n 100 --interval 0.01
    tcpswarm echo --port 8090 --mode echo
"""

import asyncio
import logging
import os
import signal
import sys
from dataclasses import replace
from typing import Optional

import click
from dotenv import load_dotenv

from tcpswarm.config.provider import EnvConfigProvider, PacingConfig, SessionConfig
from tcpswarm.logging_config import configure_logging
from tcpswarm.modules.echo import EchoMode, EchoServer
from tcpswarm.modules.launcher import Launcher
from tcpswarm.modules.session import SessionDriver, format_address, parse_address

load_dotenv()

logger = logging.getLogger(__name__)

STOP_SIGNALS = (signal.SIGINT, signal.SIGTERM)


async def run_load(
    driver: SessionDriver,
    address: str,
    count: int,
    interval: float,
    duration: Optional[float] = None,
) -> None:
    """Launch sessions; SIGINT, SIGTERM or duration seconds stop them."""
    loop = asyncio.get_running_loop()
    launcher = Launcher(driver)

    installed = []
    for signum in STOP_SIGNALS:
        try:
            loop.add_signal_handler(signum, launcher.stop)
        except NotImplementedError:
            # Event loops on Windows have no signal handlers; Ctrl-C falls back to KeyboardInterrupt
            continue
        installed.append(signum)

    if duration is not None:
        loop.call_later(duration, launcher.stop)

    try:
        await launcher.launch(address, count, interval)
    finally:
        for signum in installed:
            loop.remove_signal_handler(signum)


async def run_echo(host: str, port: int, mode: str) -> None:
    server = EchoServer(host=host, port=port, mode=mode)
    try:
        await server.serve_forever()
    finally:
        await server.stop()


@click.group()
@click.option(
    "--log-level",
    default=lambda: os.environ.get("LOG_LEVEL", "INFO"),
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Log level (defaults to $LOG_LEVEL or INFO).",
)
@click.pass_context
def cli(ctx: click.Context, log_level: str):
    """TCP heartbeat load generator."""
    ctx.obj = {"log_level": log_level}


@cli.command()
@click.argument("address", required=False)
@click.option("-n", "--sessions", "count", type=click.IntRange(min=0), help="Number of sessions.")
@click.option("--interval", type=click.FloatRange(min=0), help="Seconds between session launches.")
@click.option("--warmup", type=click.FloatRange(min=0), help="Seconds before the first heartbeat.")
@click.option("--heartbeat", type=click.FloatRange(min=0), help="Seconds between heartbeats.")
@click.option("--payload", help="Heartbeat payload text.")
@click.option("--buffer-size", type=click.IntRange(min=1), help="Max bytes per read.")
@click.option("--duration", type=click.FloatRange(min=0), help="Stop all sessions after this many seconds.")
@click.option("--quiet", is_flag=True, help="Do not print received data.")
@click.pass_context
def run(
    ctx: click.Context,
    address: Optional[str],
    count: Optional[int],
    interval: Optional[float],
    warmup: Optional[float],
    heartbeat: Optional[float],
    payload: Optional[str],
    buffer_size: Optional[int],
    duration: Optional[float],
    quiet: bool,
):
    """Open sessions against ADDRESS (host:port or a bare port)."""
    provider = EnvConfigProvider()
    try:
        target = provider.get_target_config()
        pacing: PacingConfig = provider.get_pacing_config()
        session_config: SessionConfig = provider.get_session_config()

        if address is None:
            address = target.address
        else:
            address = format_address(*parse_address(address))

        if interval is not None:
            pacing = replace(pacing, launch_interval=interval)
        if warmup is not None:
            pacing = replace(pacing, warmup_delay=warmup)
        if heartbeat is not None:
            pacing = replace(pacing, heartbeat_interval=heartbeat)
        if count is not None:
            session_config = replace(session_config, count=count)
        if payload is not None:
            session_config = replace(session_config, payload=payload.encode("utf-8"))
        if buffer_size is not None:
            session_config = replace(session_config, read_buffer_size=buffer_size)

        driver = SessionDriver.from_config(session_config, pacing)
    except ValueError as e:
        raise click.UsageError(str(e)) from e

    configure_logging(ctx.obj["log_level"], show_received=not quiet)

    try:
        asyncio.run(
            run_load(driver, address, session_config.count, pacing.launch_interval, duration)
        )
    except KeyboardInterrupt:
        logger.info("Load run stopped by user")
        sys.exit(0)


@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=8090, type=click.IntRange(0, 65535), show_default=True)
@click.option(
    "--mode",
    default=EchoMode.ECHO.value,
    type=click.Choice([mode.value for mode in EchoMode]),
    show_default=True,
)
@click.pass_context
def echo(ctx: click.Context, host: str, port: int, mode: str):
    """Run a local TCP listener to point sessions at."""
    configure_logging(ctx.obj["log_level"])

    try:
        asyncio.run(run_echo(host, port, mode))
    except KeyboardInterrupt:
        logger.info("Echo server stopped by user")
        sys.exit(0)


if __name__ == "__main__":
    cli()
