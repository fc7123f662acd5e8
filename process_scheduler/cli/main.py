"""process-scheduler CLI — Entry point.

Usage:
    process-scheduler config validate <config.yaml>
    process-scheduler config schema [-o schema.json]
    process-scheduler daemon run <config.yaml> [--linger 10]
"""

from __future__ import annotations

import typer
from rich.console import Console

from process_scheduler.cli.commands import config, daemon

app = typer.Typer(
    name="process-scheduler",
    help="process-scheduler — Run timed activity sequences when control paths switch on.",
    no_args_is_help=True,
    pretty_exceptions_enable=False,
)

console = Console()

app.add_typer(config.app, name="config")
app.add_typer(daemon.app, name="daemon")


@app.callback()
def main_callback() -> None:
    pass


if __name__ == "__main__":
    app()
