"""CLI — Configuration validation and schema export."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

app = typer.Typer(help="Validate task configuration and export its schema.")
console = Console()


@app.command("validate")
def validate(
    config_file: Annotated[Path, typer.Argument(help="Path to config.yaml.")],
) -> None:
    """Normalize the tasks in CONFIG_FILE and show what would be scheduled."""
    from process_scheduler.config import Settings
    from process_scheduler.tasks.normalizer import normalize_tasks
    from process_scheduler.tasks.paths import format_activity_path

    if not config_file.exists():
        console.print(f"[red]Config file not found: {config_file}[/red]")
        raise typer.Exit(1)

    settings = Settings.load(config_file=config_file)
    dropped: list[str] = []
    tasks = normalize_tasks(settings.tasks, diagnostics=dropped.append)

    table = Table(title="Scheduled Tasks")
    table.add_column("Task", style="cyan")
    table.add_column("Trigger")
    table.add_column("Activity")
    table.add_column("Output")
    table.add_column("Delay", justify="right")
    table.add_column("Duration", justify="right")
    table.add_column("Repeat", justify="right")

    for task in tasks:
        trigger = f"{task.trigger.kind.value} {task.trigger.path}"
        if task.trigger.on_value is not None:
            trigger += f" == {task.trigger.on_value}"
        for position, activity in enumerate(task.activities):
            table.add_row(
                escape(task.name) if position == 0 else "",
                escape(trigger) if position == 0 else "",
                escape(activity.name),
                escape(format_activity_path(activity)),
                f"{activity.delay:g}s",
                f"{activity.duration:g}s",
                "forever" if activity.repeat == 0 else str(activity.repeat),
            )

    if tasks:
        console.print(table)
    for message in dropped:
        console.print(f"[yellow]{escape(message)}[/yellow]")

    if not tasks:
        console.print("[red]Configuration includes no valid tasks.[/red]")
        raise typer.Exit(1)
    console.print(f"[green]{len(tasks)} valid task(s), {len(dropped)} dropped.[/green]")


@app.command("schema")
def schema(
    output: str | None = typer.Option(None, "--output", "-o", help="Output file path."),
) -> None:
    """Dump the task configuration JSONSchema to stdout or a file."""
    from process_scheduler.tasks.schema import ScheduleConfig

    json_str = json.dumps(ScheduleConfig.model_json_schema(by_alias=True), indent=2)

    if output:
        Path(output).write_text(json_str)
        console.print(f"[green]Schema written to {output}[/green]")
    else:
        console.print(Syntax(json_str, "json"))
