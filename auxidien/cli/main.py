"""Main entry point for the auxidien command line interface."""

from __future__ import annotations

from pathlib import Path

import typer

from auxidien.core.logging import configure_logging

from .serve import register as register_serve_command
from .watcher import register as register_watcher_commands
from .weights import register as register_weights_command

_LOG_LEVELS = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}


def create_app() -> typer.Typer:
    """Create a Typer application instance for auxidien."""

    app = typer.Typer(add_completion=False, help="Precious-metal index watcher and price record")

    @app.callback()
    def main(
        ctx: typer.Context,
        log_level: str = typer.Option(
            "INFO",
            "--log-level",
            envvar="AUXIDIEN_LOG_LEVEL",
            help="Logging level.",
            show_default=True,
        ),
        json_logs: bool = typer.Option(
            False,
            "--json-logs",
            envvar="AUXIDIEN_LOG_JSON",
            help="Emit JSON log lines instead of text.",
        ),
        log_file: Path | None = typer.Option(
            None,
            "--log-file",
            envvar="AUXIDIEN_LOG_FILE",
            help="Also append JSON log lines to this file.",
        ),
    ) -> None:
        ctx.ensure_object(dict)
        level = log_level.strip().upper()
        if level not in _LOG_LEVELS:
            raise typer.BadParameter(f"unknown log level {log_level!r}", param_hint="--log-level")

        ctx.obj.update({"log_level": level, "json_logs": json_logs, "log_file": log_file})
        configure_logging(
            level,
            serialize=json_logs,
            file_output=log_file is not None,
            file_path=str(log_file) if log_file is not None else None,
        )

    register_watcher_commands(app)
    register_weights_command(app)
    register_serve_command(app)
    return app


app = create_app()
