"""Typer-based developer CLI for inspecting the resilience settings."""

from __future__ import annotations

import asyncio
from datetime import timedelta
from pathlib import Path
from typing import Optional

import typer
from mcp.client.session import ClientSession
from mcp.client.streamable_http import streamablehttp_client
from rich.console import Console
from rich.table import Table

from browsermcp_resilience.config import ResilienceConfig, load_config
from browsermcp_resilience.connection import (
    ConnectionController,
    classify_error,
    compute_delay,
)
from browsermcp_resilience.domain.types import ReconnectResult, StatusSnapshot
from browsermcp_resilience.invokers import MCPToolInvoker
from browsermcp_resilience.logger import get_logger, setup_logger
from browsermcp_resilience.utils import format_time_hhmmss

logger = get_logger("cli")
app = typer.Typer(help="Connection resilience tools for Browser MCP.")
console = Console()

ConfigOption = typer.Option(None, "--config", "-c", help="Path to a JSON configuration file")


class EchoNotifier:
    """Prints notifications to the terminal."""

    def notify(self, message: str) -> None:
        typer.echo(message)


def _load(config_path: Optional[Path]) -> ResilienceConfig:
    try:
        return load_config(config_path)
    except Exception as exc:
        typer.echo(f"❌ Invalid configuration: {exc}")
        raise typer.Exit(code=1)


def build_schedule_table(config: ResilienceConfig) -> Table:
    """Table of the delay before every reconnection attempt."""
    policy = config.retry
    title = f"Backoff schedule (max {policy.max_retries} attempts)"
    # Keep the title on one line above the narrow columns
    table = Table(title=title, min_width=len(title) + 4)
    table.add_column("Attempt", justify="right")
    table.add_column("Delay", justify="right")
    table.add_column("Elapsed", justify="right")

    elapsed = 0.0
    for retry_count in range(policy.max_retries):
        delay = compute_delay(policy, retry_count)
        elapsed += delay
        table.add_row(f"{retry_count + 1}", f"{delay / 1000:.1f}s", f"{elapsed / 1000:.1f}s")
    return table


def build_status_table(snapshot: StatusSnapshot) -> Table:
    table = Table(title="Connection status", show_header=False)
    table.add_column("Field")
    table.add_column("Value")
    table.add_row("Phase", snapshot.phase.value)
    table.add_row("Connected", "yes" if snapshot.connected else "no")
    table.add_row("Attempts", f"{snapshot.retry_count}/{snapshot.max_retries}")
    table.add_row("Last attempt", format_time_hhmmss(snapshot.last_attempt_timestamp))
    table.add_row("Last error", snapshot.last_error.message if snapshot.last_error else "-")
    return table


@app.command()
def schedule(config_path: Optional[Path] = ConfigOption) -> None:
    """Show the reconnection delays produced by the configured policy."""
    console.print(build_schedule_table(_load(config_path)))


@app.command()
def classify(message: str = typer.Argument(..., help="Error text returned by a tool")) -> None:
    """Tell whether an error message would trigger a reconnection."""
    if classify_error(message):
        typer.echo("connection error: a reconnection cycle would start")
    else:
        typer.echo("task error: reported to the caller unchanged")


async def _run_probe(url: str, config: ResilienceConfig) -> StatusSnapshot:
    async with streamablehttp_client(url=url, timeout=timedelta(seconds=60)) as (read_stream, write_stream, _):
        async with ClientSession(read_stream, write_stream) as session:
            await session.initialize()
            logger.info(f"Session initialization completed for {url}")

            invoker = MCPToolInvoker(lambda: session, strip_prefix=config.tool_prefix)
            controller = ConnectionController(invoker, EchoNotifier(), config, session_id="cli")
            try:
                result: Optional[ReconnectResult] = ReconnectResult.RECOVERED
                while result in (ReconnectResult.RECOVERED, ReconnectResult.RETRIES_REMAINING):
                    outcome = await invoker.invoke(config.probe_tool, dict(config.probe_arguments))
                    result = await controller.record_outcome(config.probe_tool, outcome)
                return controller.status()
            finally:
                await controller.close()


@app.command()
def probe(
    url: str = typer.Argument(..., help="Streamable HTTP endpoint of the MCP server"),
    config_path: Optional[Path] = ConfigOption,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log to the console"),
) -> None:
    """Call the probe tool against a live server, reconnecting as configured."""
    if verbose:
        setup_logger(log_level="DEBUG", console_output=True)
    config = _load(config_path)

    try:
        snapshot = asyncio.run(_run_probe(url, config))
    except Exception as exc:
        typer.echo(f"❌ Error: {exc}")
        logger.exception("Probe failed")
        raise typer.Exit(code=1)

    console.print(build_status_table(snapshot))
    if not snapshot.connected:
        raise typer.Exit(code=2)


def main() -> None:
    setup_logger()
    app()
