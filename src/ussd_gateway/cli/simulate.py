"""Simulate command for terminal dialogs."""

import asyncio
from pathlib import Path

import typer

app = typer.Typer(help="Run a dialog in the terminal")


@app.callback(invoke_without_command=True)
def run_simulate(
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Automaton definition; the packaged dialog when omitted"
    ),
    phone: str = typer.Option("+237600000000", "--phone", "-p", help="Caller phone number"),
    registered: bool = typer.Option(
        False, "--registered", help="Treat the caller as a registered user"
    ),
    inputs: list[str] | None = typer.Option(
        None, "--input", "-i", help="Scripted answer (repeatable); prompts when omitted"
    ),
    debug: bool = typer.Option(False, "--debug", help="Debug mode"),
) -> None:
    """Dial the gateway from the terminal."""
    from ussd_gateway.cli.simulator import SimulatorConfig, run_simulation

    simulator_config = SimulatorConfig(
        config_path=config,
        phone_number=phone,
        registered=registered,
        inputs=list(inputs or []),
        debug=debug,
    )

    try:
        asyncio.run(run_simulation(simulator_config))
    except KeyboardInterrupt:
        pass
    except Exception as e:
        if debug:
            raise
        typer.echo(f"Fatal error: {e}", err=True)
        raise typer.Exit(1) from e
