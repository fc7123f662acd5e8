"""CLI — Run the scheduler against a stream of JSON lines on stdin.

Each input line is one observed value::

    {"path": "switches.deck", "value": 1}
    {"path": "notifications.engine.temp", "value": {"state": "alarm"}}

Output calls (writes, notifications) are printed to stdout; logs go to stderr.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import IO, TYPE_CHECKING, Annotated

import typer
from rich.console import Console

from process_scheduler.logging import get_logger

if TYPE_CHECKING:
    from process_scheduler.ports import MemorySignalBus

app = typer.Typer(help="Run scheduled tasks.")
console = Console()
log = get_logger(__name__)


@app.callback()
def daemon_callback() -> None:
    pass


async def feed_signals(bus: "MemorySignalBus", stream: IO[str]) -> int:
    """Publish every JSON line of *stream* to *bus* until EOF.

    Returns the number of values published.  Malformed lines are logged and
    skipped.
    """
    published = 0
    while True:
        line = await asyncio.to_thread(stream.readline)
        if not line:
            return published
        line = line.strip()
        if not line:
            continue
        try:
            message = json.loads(line)
        except json.JSONDecodeError as exc:
            log.warning("input_line_invalid", line=line, error=str(exc))
            continue
        if not isinstance(message, dict) or not isinstance(message.get("path"), str):
            log.warning("input_line_invalid", line=line, error="expected {'path': str, 'value': ...}")
            continue
        bus.publish(message["path"], message.get("value"))
        published += 1
        await asyncio.sleep(0)


async def serve(
    raw_tasks: list,
    stream: IO[str],
    linger_seconds: float = 0.0,
    on_message: str = "Scheduler ON event",
    off_message: str = "Scheduler OFF event",
) -> str:
    """Normalize *raw_tasks*, run them until *stream* ends, then stop.

    Returns the final status line.
    """
    from process_scheduler.ports import ConsoleOutput, LogStatusSink, MemorySignalBus
    from process_scheduler.tasks.controller import TaskController
    from process_scheduler.tasks.normalizer import normalize_tasks

    status = LogStatusSink()
    tasks = normalize_tasks(raw_tasks, diagnostics=status.report_diagnostic)
    bus = MemorySignalBus()
    controller = TaskController(
        tasks,
        source=bus,
        output=ConsoleOutput(console),
        status=status,
        on_message=on_message,
        off_message=off_message,
    )
    await controller.start()
    try:
        published = await feed_signals(bus, stream)
        log.debug("input_closed", published=published)
        if linger_seconds > 0:
            await asyncio.sleep(linger_seconds)
    finally:
        await controller.stop()
    return status.status


@app.command("run")
def run(
    config_file: Annotated[Path, typer.Argument(help="Path to config.yaml.")],
    linger: Annotated[
        float | None,
        typer.Option("--linger", help="Seconds to keep running after stdin closes."),
    ] = None,
    log_level: str | None = typer.Option(None, help="Log level (overrides config)."),
) -> None:
    """Run the tasks in CONFIG_FILE, reading observed values from stdin."""
    from process_scheduler.config import Settings
    from process_scheduler.logging import configure_logging

    if not config_file.exists():
        console.print(f"[red]Config file not found: {config_file}[/red]")
        raise typer.Exit(1)

    settings = Settings.load(config_file=config_file)
    configure_logging(
        level=log_level or settings.logging.level,
        format=settings.logging.format,
        log_file=str(settings.logging.file) if settings.logging.file else None,
    )

    linger_seconds = settings.scheduler.linger_seconds if linger is None else linger
    try:
        final_status = asyncio.run(
            serve(
                settings.tasks,
                typer.get_text_stream("stdin"),
                linger_seconds=linger_seconds,
                on_message=settings.scheduler.on_message,
                off_message=settings.scheduler.off_message,
            )
        )
    except KeyboardInterrupt:
        console.print("[yellow]Interrupted.[/yellow]")
        raise typer.Exit(130)
    console.print(f"[bold]{final_status}[/bold]")
