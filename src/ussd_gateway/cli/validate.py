"""CLI command for validating automaton definitions"""

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from ussd_gateway.automaton.graph import AutomatonGraph
from ussd_gateway.config.loader import ConfigLoader
from ussd_gateway.core.errors import ConfigError, GraphLoadError
from ussd_gateway.validation import ValidatorRegistry

app = typer.Typer(help="Validate an automaton definition")

console = Console()


@app.callback(invoke_without_command=True)
def validate(
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Automaton definition; the packaged dialog when omitted"
    ),
    strict: bool = typer.Option(
        False, "--strict", help="Reject validation types with no registered validator"
    ),
) -> None:
    """Load an automaton and report every structural problem found."""
    try:
        definition = ConfigLoader.load(config) if config else ConfigLoader.load_default()
        known = ValidatorRegistry.list_validators() if strict else None
        graph = AutomatonGraph.from_config(definition, known)
    except FileNotFoundError as e:
        console.print(f"[red]{e}[/]")
        raise typer.Exit(1) from e
    except GraphLoadError as e:
        console.print(f"[red]✗ Invalid automaton ({len(e.errors)} error(s)):[/]")
        for error in e.errors:
            console.print(f"  [red]-[/] {error}")
        raise typer.Exit(1) from e
    except ConfigError as e:
        console.print(f"[red]✗ {e}[/]")
        raise typer.Exit(1) from e

    console.print(f"[green]✓ {graph.name} v{graph.version} is valid[/]")

    table = Table(title="Automaton statistics")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    for key, value in graph.statistics().items():
        table.add_row(key, str(value))
    console.print(table)
