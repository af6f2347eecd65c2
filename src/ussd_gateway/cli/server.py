"""CLI command for starting the gateway server"""

import logging
import os
from pathlib import Path

import typer
import uvicorn

from ussd_gateway.config.settings import GatewaySettings
from ussd_gateway.core.errors import ConfigError
from ussd_gateway.observability.logging import setup_logging
from ussd_gateway.runtime import load_graph

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="server",
    help="Start the USSD gateway API server",
    add_completion=False,
)


@app.callback(invoke_without_command=True)
def start(
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Automaton definition (JSON or YAML); the packaged dialog is used when omitted",
    ),
    host: str = typer.Option(
        "0.0.0.0",
        "--host",
        "-h",
        help="Host to bind the server to",
    ),
    port: int = typer.Option(
        8000,
        "--port",
        "-p",
        help="Port to bind the server to",
    ),
    reload: bool = typer.Option(
        False,
        "--reload",
        help="Enable auto-reload (development only)",
    ),
) -> None:
    """
    Start the USSD gateway API server.

    This command:
    1. Validates the automaton definition
    2. Exports its path for the FastAPI app
    3. Starts uvicorn with the FastAPI app
    """
    if port < 1 or port > 65535:
        typer.echo(f"Error: Port must be between 1 and 65535, got {port}", err=True)
        raise typer.Exit(1)

    from dotenv import load_dotenv

    load_dotenv()

    try:
        settings = GatewaySettings.from_env()
        if config is not None:
            settings = settings.model_copy(update={"automaton_path": str(config.absolute())})
        graph = load_graph(settings)
    except FileNotFoundError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e
    except ConfigError as e:
        typer.echo(f"Error: Invalid configuration: {e}", err=True)
        raise typer.Exit(1) from e

    setup_logging(settings.log_level, settings.log_file)
    typer.echo(f"✓ Automaton loaded: {graph.name} v{graph.version}")

    if settings.automaton_path:
        os.environ["USSD_AUTOMATON_PATH"] = settings.automaton_path

    typer.echo("\n🚀 Starting USSD gateway...")
    typer.echo(f"   Host: {host}")
    typer.echo(f"   Port: {port}")
    typer.echo(f"   Sessions: {settings.persistence.backend}")
    typer.echo("\n💬 Endpoints:")
    typer.echo(f"   Callback: http://{host}:{port}/ussd/callback")
    typer.echo(f"   Health: http://{host}:{port}/health")
    typer.echo("\n")

    try:
        uvicorn.run(
            "ussd_gateway.server.api:app",
            host=host,
            port=port,
            reload=reload,
            log_level=settings.log_level.lower(),
        )
    except KeyboardInterrupt:
        typer.echo("\n\n👋 Shutting down USSD gateway...")
    except Exception as e:
        typer.echo(f"\n❌ Error starting server: {e}", err=True)
        raise typer.Exit(1) from e
