"""Interactive handset simulator for the gateway CLI."""

from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt

from ussd_gateway.config.settings import GatewaySettings, PersistenceConfig
from ussd_gateway.dialog.models import DialogDirective, DialogRequest
from ussd_gateway.hooks.collaborators import InMemoryUserDirectory, UserRecord
from ussd_gateway.observability.logging import setup_logging
from ussd_gateway.runtime import GatewayRuntime
from ussd_gateway.session.store import new_session_id

DEFAULT_PHONE = "+237600000000"


@dataclass
class SimulatorConfig:
    """Configuration for the simulator."""

    config_path: Path | None = None
    phone_number: str = DEFAULT_PHONE
    registered: bool = False
    inputs: list[str] = field(default_factory=list)
    debug: bool = False


class UssdSimulator:
    """Plays a USSD dialog in the terminal.

    Runs against an in-memory session store. With scripted ``inputs`` the
    dialog is replayed without prompting; otherwise the user types each step.
    """

    def __init__(self, config: SimulatorConfig, console: Console | None = None):
        self.config = config
        self.console = console or Console()
        self.runtime: GatewayRuntime | None = None
        self.session_id = new_session_id()
        self.transcript: list[DialogDirective] = []

    async def setup(self) -> None:
        """Build the runtime.

        Raises:
            ConfigError: If the automaton is invalid
        """
        from dotenv import load_dotenv

        load_dotenv()

        if self.config.debug:
            setup_logging("DEBUG")

        settings = GatewaySettings.from_env().model_copy(
            update={"persistence": PersistenceConfig(backend="memory")}
        )
        if self.config.config_path is not None:
            settings = settings.model_copy(
                update={"automaton_path": str(self.config.config_path)}
            )

        users = InMemoryUserDirectory()
        if self.config.registered:
            users.add(UserRecord(user_id="SIM-USER", phone_number=self.config.phone_number))

        self.runtime = GatewayRuntime.build(settings, users=users, run_sweeper=False)
        await self.runtime.start()

    async def send(self, raw_input: str) -> DialogDirective:
        if self.runtime is None:
            raise RuntimeError("Simulator not initialized. Use 'async with' context.")
        directive = await self.runtime.orchestrator.handle(
            DialogRequest(
                session_id=self.session_id,
                phone_number=self.config.phone_number,
                raw_input=raw_input,
            )
        )
        self.transcript.append(directive)
        self._show(directive)
        return directive

    async def run(self) -> None:
        """Dial in and keep answering until the dialog ends."""
        if self.runtime is None:
            await self.setup()

        self.console.print(f"Dialing as [green]{self.config.phone_number}[/]")
        self.console.print(f"Session ID: [green]{self.session_id}[/]\n")

        directive = await self.send("")
        answers = self._answers()
        while not directive.is_end:
            try:
                user_input = next(answers)
            except StopIteration:
                break
            if self._is_exit_command(user_input):
                self.console.print("\n[yellow]Goodbye![/]")
                break
            directive = await self.send(user_input)

    def _answers(self) -> Iterator[str]:
        if self.config.inputs:
            for value in self.config.inputs:
                self.console.print(f"[bold green]You[/]: {value}")
                yield value
            return
        while True:
            yield Prompt.ask("[bold green]You[/]", console=self.console, default="")

    def _show(self, directive: DialogDirective) -> None:
        style = "red" if directive.is_end else "blue"
        title = "END" if directive.is_end else "CON"
        self.console.print(Panel(directive.message, title=title, border_style=style, expand=False))

    def _is_exit_command(self, user_input: str) -> bool:
        return user_input.strip().lower() in ("quit", "exit", "/quit", "/exit")

    async def cleanup(self) -> None:
        if self.runtime is not None:
            await self.runtime.stop()
            self.runtime = None

    async def __aenter__(self) -> "UssdSimulator":
        await self.setup()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.cleanup()


async def run_simulation(config: SimulatorConfig, console: Console | None = None) -> list[DialogDirective]:
    """Run a full simulated dialog.

    Returns:
        Every directive received, in order
    """
    async with UssdSimulator(config, console) as simulator:
        await simulator.run()
        return simulator.transcript
