"""Main Typer application for the webhook connector.

Entry point: ``webhook-connector`` (configured via pyproject.toml
``[project.scripts]``).

Commands: serve, validate-sink, gen-key.
"""

from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel

from webhook_connector.config import settings
from webhook_connector.core.hasher import create_key_hash, generate_key
from webhook_connector.errors import SinkValidationError
from webhook_connector.models.sinks import SUPPORTED_SINK_TYPES, validate_sink

console = Console()

app = typer.Typer(
    name="webhook-connector",
    help="Webhook connector: receive webhooks and forward them to per-configuration sinks.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


def configure_logging(level: str) -> None:
    """Route all module loggers through a Rich handler at *level*."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
        force=True,
    )


def _parse_params(params: list[str]) -> dict[str, str]:
    parsed: dict[str, str] = {}
    for item in params:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"expected key=value, got '{item}'")
        parsed[key] = value
    return parsed


@app.command(name="serve", help="Run the HTTP server.")
def serve_cmd(
    host: str = typer.Option(settings.host, help="Interface to bind."),
    port: int = typer.Option(settings.port, help="Port to listen on."),
    log_level: str = typer.Option(settings.log_level, help="Logging level."),
) -> None:
    """Start the connector's HTTP API under uvicorn."""
    import uvicorn

    from webhook_connector.api.app import create_app

    configure_logging(log_level)
    uvicorn.run(create_app(settings), host=host, port=port, log_config=None)


@app.command(name="validate-sink", help="Validate a sink descriptor.")
def validate_sink_cmd(
    sink_type: str = typer.Argument(
        ..., help=f"Sink type ({', '.join(SUPPORTED_SINK_TYPES)})."
    ),
    param: list[str] = typer.Option(
        [], "--param", "-p", help="Sink parameter as key=value (repeatable)."
    ),
) -> None:
    """Check a sink type and its parameters without creating anything."""
    try:
        descriptor = validate_sink(sink_type, _parse_params(param))
    except SinkValidationError as exc:
        console.print(f"[red]Invalid sink:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    console.print(
        Panel(
            descriptor.model_dump_json(indent=2),
            title=f"[bold]{descriptor.type} sink[/bold]",
            border_style="green",
        )
    )


@app.command(name="gen-key", help="Generate a webhook key and its salted hash.")
def gen_key_cmd(
    config_id: str = typer.Argument(..., help="Configuration id used as the salt."),
    length: int = typer.Option(settings.key_length, help="Key length in characters."),
) -> None:
    """Print a fresh webhook key and the hash to store for it."""
    key = generate_key(length)
    console.print(f"[bold]Key:[/bold]  {key}")
    console.print(f"[bold]Hash:[/bold] {create_key_hash(config_id, key)}")


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
