"""Record web service command."""

from __future__ import annotations

import typer
import uvicorn

from auxidien.core.config import RecordServiceSettings
from auxidien.web import create_app

from .constants import CONFIGURATION_EXIT_CODE
from .utils import emit_error


def register(app: typer.Typer) -> None:
    app.command("serve")(serve_command)


def serve_command(
    host: str | None = typer.Option(None, "--host", help="Bind host (default from AUXIDIEN_RECORD_HOST)."),
    port: int | None = typer.Option(None, "--port", help="Bind port (default from AUXIDIEN_RECORD_PORT)."),
) -> None:
    """Serve the price record over HTTP."""

    try:
        settings = RecordServiceSettings()
    except ValueError as error:
        emit_error(f"invalid record service settings: {error}", "CONFIGURATION_ERROR")
        raise typer.Exit(code=CONFIGURATION_EXIT_CODE) from error

    uvicorn.run(
        create_app(settings),
        host=host or settings.host,
        port=port or settings.port,
        log_level="info",
    )


__all__ = ["register", "serve_command"]
