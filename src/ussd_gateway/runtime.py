"""Gateway runtime: wires settings, graph, store, hooks and orchestrator."""

import logging
from typing import Any

from ussd_gateway.automaton.graph import AutomatonGraph, GraphHolder
from ussd_gateway.config.loader import ConfigLoader
from ussd_gateway.config.settings import GatewaySettings
from ussd_gateway.dialog.orchestrator import DialogOrchestrator
from ussd_gateway.hooks.collaborators import (
    InMemoryShipmentRepository,
    InMemoryUserDirectory,
    ShipmentRepository,
    UserDirectory,
)
from ussd_gateway.hooks.delivery import register_delivery_hooks
from ussd_gateway.hooks.registry import HookRegistry
from ussd_gateway.session.models import utcnow
from ussd_gateway.session.store import Clock, SessionStore, create_session_store
from ussd_gateway.session.sweeper import ExpirySweeper
from ussd_gateway.validation import ValidatorRegistry

logger = logging.getLogger(__name__)


def load_graph(settings: GatewaySettings) -> AutomatonGraph:
    """Load and validate the configured automaton.

    Raises:
        FileNotFoundError: If ``automaton_path`` points nowhere
        ConfigError: If the file cannot be parsed
        GraphLoadError: If the graph violates a structural invariant
    """
    if settings.automaton_path:
        logger.info(f"Loading automaton from {settings.automaton_path}")
        config = ConfigLoader.load(settings.automaton_path)
    else:
        logger.info("Loading packaged delivery automaton")
        config = ConfigLoader.load_default()
    return AutomatonGraph.from_config(config, known_validation_tags(settings))


def known_validation_tags(settings: GatewaySettings) -> list[str] | None:
    """Registered tags when strict checking is on, None otherwise."""
    return ValidatorRegistry.list_validators() if settings.strict_validation_tags else None


class GatewayRuntime:
    """Everything one gateway process needs to serve dialogs.

    Usage:
        async with GatewayRuntime.build(settings) as runtime:
            directive = await runtime.orchestrator.handle(request)
    """

    def __init__(
        self,
        settings: GatewaySettings,
        graphs: GraphHolder,
        store: SessionStore,
        hooks: HookRegistry,
        users: UserDirectory,
        shipments: ShipmentRepository,
        run_sweeper: bool = True,
    ) -> None:
        self.settings = settings
        self.graphs = graphs
        self.store = store
        self.hooks = hooks
        self.users = users
        self.shipments = shipments
        self.orchestrator = DialogOrchestrator(
            graphs=graphs,
            store=store,
            validators=ValidatorRegistry,
            hooks=hooks,
            users=users,
            settings=settings,
        )
        self.sweeper = (
            ExpirySweeper(store, settings.sweep_interval_seconds) if run_sweeper else None
        )

    @classmethod
    def build(
        cls,
        settings: GatewaySettings | None = None,
        users: UserDirectory | None = None,
        shipments: ShipmentRepository | None = None,
        hooks: HookRegistry | None = None,
        clock: Clock = utcnow,
        run_sweeper: bool = True,
    ) -> "GatewayRuntime":
        """Create a runtime from settings, failing fast on an invalid automaton.

        Custom hooks go in through ``hooks``; the delivery hooks are added to it.
        """
        settings = settings or GatewaySettings()
        graph = load_graph(settings)
        graphs = GraphHolder(graph, known_validation_tags(settings))
        store = create_session_store(settings, clock=clock)
        shipments = shipments or InMemoryShipmentRepository()
        hooks = register_delivery_hooks(hooks or HookRegistry(), shipments)
        return cls(
            settings=settings,
            graphs=graphs,
            store=store,
            hooks=hooks,
            users=users or InMemoryUserDirectory(),
            shipments=shipments,
            run_sweeper=run_sweeper,
        )

    def reload_automaton(self) -> AutomatonGraph:
        """Re-read the configured automaton and publish it."""
        return self.graphs.reload_from(self.settings.automaton_path)

    async def start(self) -> None:
        if self.sweeper is not None:
            self.sweeper.start()

    async def stop(self) -> None:
        if self.sweeper is not None:
            await self.sweeper.stop()
        await self.store.close()

    async def __aenter__(self) -> "GatewayRuntime":
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        await self.stop()
