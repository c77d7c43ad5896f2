"""updatestream CLI — Typer + Rich terminal interface.

Commands: replay, fetch, config.
"""

from __future__ import annotations

import asyncio
import logging
import signal
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from updatestream import __version__
from updatestream.client import ConversationClient, MessageUpdateRequest
from updatestream.display import UpdateRenderer
from updatestream.schemas.config import StreamingConfig
from updatestream.settings import load_streaming_config
from updatestream.streaming.abort import AbortController
from updatestream.streaming.pipeline import UpdateStream, UpdateStreamError
from updatestream.streaming.reader import ReplayReader

console = Console()

app = typer.Typer(
    name="updatestream",
    help="Decode, coalesce and pace streamed message updates.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Callbacks ────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"updatestream {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v",
        help="Log pipeline diagnostics.",
    ),
) -> None:
    """updatestream — smooth rendering for streamed model output."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )


# ── Helpers ──────────────────────────────────────────────────────


def _load_config() -> StreamingConfig:
    """Load streaming config, exit on error."""
    try:
        return load_streaming_config()
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error loading config:[/red] {e}")
        raise typer.Exit(1) from None


def _install_interrupt(abort: AbortController) -> None:
    """Route Ctrl+C to the abort signal where the loop supports it."""
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, abort.abort, "interrupted")
    except (NotImplementedError, RuntimeError):
        pass  # Windows: KeyboardInterrupt cancels the run instead


async def _render(stream: UpdateStream, renderer: UpdateRenderer) -> None:
    async with stream:
        async for update in stream:
            renderer.render(update)
    renderer.finish()


# ── Commands ─────────────────────────────────────────────────────


@app.command()
def replay(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="NDJSON body to replay"),
    smooth: bool = typer.Option(
        None, "--smooth/--no-smooth", help="Override smooth rendering from config",
    ),
    chunk_size: int = typer.Option(
        64, "--chunk-size", "-c", min=1, help="Bytes per simulated network chunk",
    ),
    delay_ms: float = typer.Option(
        0.0, "--delay", min=0.0, help="Delay between chunks in milliseconds",
    ),
) -> None:
    """Replay a captured update stream through the pipeline."""
    config = _load_config()
    use_smooth = config.smooth_updates if smooth is None else smooth
    reader = ReplayReader.from_bytes(path.read_bytes(), chunk_size, delay=delay_ms / 1000)
    renderer = UpdateRenderer(console)

    async def _run() -> UpdateStream:
        abort = AbortController()
        _install_interrupt(abort)
        stream = UpdateStream(reader, abort, smooth=use_smooth, config=config)
        await _render(stream, renderer)
        return stream

    stream = asyncio.run(_run())
    console.print(
        f"[dim]{renderer.fragments} fragments, {renderer.events} events, "
        f"{stream.stats.dropped} malformed lines dropped[/dim]"
    )


@app.command()
def fetch(
    conversation_id: str = typer.Argument(..., help="Conversation to post to"),
    inputs: str = typer.Option(..., "--input", "-i", help="Message text"),
    base: str = typer.Option(None, "--base", help="API base URL (default from config)"),
    smooth: bool = typer.Option(
        None, "--smooth/--no-smooth", help="Override smooth rendering from config",
    ),
) -> None:
    """Post a message and render its live update stream."""
    config = _load_config()
    if base:
        config = config.model_copy(update={"base_url": base})
    renderer = UpdateRenderer(console)

    async def _run() -> None:
        abort = AbortController()
        _install_interrupt(abort)
        async with ConversationClient(config) as client:
            stream = await client.fetch_message_updates(
                conversation_id, MessageUpdateRequest(inputs=inputs), abort, smooth=smooth,
            )
            await _render(stream, renderer)
        if abort.aborted:
            console.print("[yellow]Stream cancelled[/yellow]")

    try:
        asyncio.run(_run())
    except UpdateStreamError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from None


@app.command("config")
def config_show() -> None:
    """Show the effective streaming configuration."""
    config = _load_config()

    table = Table(title="Streaming Configuration", show_header=True)
    table.add_column("Setting", style="bold")
    table.add_column("Value")
    for name, value in config.model_dump().items():
        table.add_row(name, str(value))

    console.print(table)
