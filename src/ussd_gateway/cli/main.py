"""Main CLI entry point for the USSD gateway"""

import typer

from ussd_gateway.__version__ import __version__
from ussd_gateway.cli import server as server_module
from ussd_gateway.cli import simulate as simulate_module
from ussd_gateway.cli import validate as validate_module

app = typer.Typer(
    name="ussd-gateway",
    help="USSD Gateway - automaton-driven USSD dialogs",
    add_completion=False,
)

# Register subcommands
app.add_typer(server_module.app, name="server", help="Start the USSD gateway API server")
app.add_typer(validate_module.app, name="validate", help="Validate an automaton definition")
app.add_typer(simulate_module.app, name="simulate", help="Run a dialog in the terminal")


def version_callback(value: bool) -> None:
    """Print version and exit"""
    if value:
        typer.echo(f"USSD Gateway version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """USSD Gateway - automaton-driven USSD dialogs"""
    pass


def cli() -> None:
    """Entry point for CLI"""
    app()


if __name__ == "__main__":
    cli()
