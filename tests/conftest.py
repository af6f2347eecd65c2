"""Shared fixtures for gateway tests.

Everything runs in memory with a controllable clock, so tests are
deterministic and never touch the network or the wall clock.
"""

from collections.abc import Awaitable, Callable
from datetime import date, datetime, timedelta, timezone
from typing import Any

import pytest

from ussd_gateway.automaton.graph import AutomatonGraph, GraphHolder
from ussd_gateway.config.loader import ConfigLoader
from ussd_gateway.config.settings import GatewaySettings
from ussd_gateway.dialog.models import DialogDirective, DialogRequest
from ussd_gateway.dialog.orchestrator import DialogOrchestrator
from ussd_gateway.hooks.collaborators import (
    InMemoryShipmentRepository,
    InMemoryUserDirectory,
    UserRecord,
)
from ussd_gateway.hooks.delivery import register_delivery_hooks
from ussd_gateway.hooks.registry import HookRegistry
from ussd_gateway.session.store import InMemorySessionStore

CALLER = "+237670000999"
REGISTERED_CALLER = "+237670000001"
TODAY = date(2025, 1, 15)


class MutableClock:
    """Clock whose time only moves when a test says so."""

    def __init__(self, start: datetime | None = None):
        self.current = start or datetime(2025, 1, 15, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += timedelta(seconds=seconds)


def build_definition(**overrides: Any) -> dict[str, Any]:
    """Small three-state automaton: a menu, a validated prompt and a final state."""
    definition: dict[str, Any] = {
        "automatonId": "mini",
        "name": "Mini dialog",
        "version": "1.0",
        "initialStateId": "MENU",
        "states": [
            {
                "stateId": "MENU",
                "stateType": "INITIAL",
                "displayMessage": "Main menu",
                "menuOptions": [
                    {"optionKey": "1", "optionText": "Register", "transitionTrigger": "1"},
                    {"optionKey": "0", "optionText": "Exit", "transitionTrigger": "0"},
                ],
            },
            {
                "stateId": "ASK_NAME",
                "displayMessage": "Your name?",
                "validationType": "NAME",
                "contextStorageKey": "name",
            },
            {"stateId": "DONE", "stateType": "FINAL", "displayMessage": "Thanks {name}"},
            {"stateId": "FAILED", "stateType": "FINAL", "displayMessage": "Too many errors"},
        ],
        "transitions": [
            {"fromStateId": "MENU", "toStateId": "ASK_NAME", "trigger": "1"},
            {"fromStateId": "MENU", "toStateId": "DONE", "trigger": "0"},
            {
                "fromStateId": "ASK_NAME",
                "toStateId": "DONE",
                "requiresValidation": True,
                "validationType": "NAME",
                "maxRetries": 2,
            },
            {"fromStateId": "ASK_NAME", "toStateId": "FAILED", "isErrorTransition": True},
        ],
        "finalStateIds": ["DONE", "FAILED"],
    }
    definition.update(overrides)
    return definition


@pytest.fixture
def clock() -> MutableClock:
    return MutableClock()


@pytest.fixture
def memory_store(clock: MutableClock) -> InMemorySessionStore:
    return InMemorySessionStore(timeout_seconds=600, clock=clock)


@pytest.fixture
def mini_definition() -> dict[str, Any]:
    return build_definition()


@pytest.fixture
def make_definition() -> Callable[..., dict[str, Any]]:
    """Factory for variations of the mini automaton."""
    return build_definition


@pytest.fixture
def delivery_graph() -> AutomatonGraph:
    """The packaged package-delivery automaton."""
    return AutomatonGraph.from_config(ConfigLoader.load_default())


@pytest.fixture
def shipments() -> InMemoryShipmentRepository:
    return InMemoryShipmentRepository(today=TODAY)


@pytest.fixture
def users() -> InMemoryUserDirectory:
    return InMemoryUserDirectory(
        [UserRecord(user_id="USR-001", phone_number=REGISTERED_CALLER, name="Alice", city="Douala")]
    )


@pytest.fixture
def hooks(shipments: InMemoryShipmentRepository) -> HookRegistry:
    return register_delivery_hooks(HookRegistry(), shipments)


@pytest.fixture
def orchestrator(
    delivery_graph: AutomatonGraph,
    memory_store: InMemorySessionStore,
    hooks: HookRegistry,
    users: InMemoryUserDirectory,
) -> DialogOrchestrator:
    return DialogOrchestrator(
        graphs=GraphHolder(delivery_graph),
        store=memory_store,
        hooks=hooks,
        users=users,
        settings=GatewaySettings(),
    )


Dial = Callable[..., Awaitable[list[DialogDirective]]]


@pytest.fixture
def dial(orchestrator: DialogOrchestrator) -> Dial:
    """Send a sequence of inputs on one session and collect every directive.

    Unless ``dial_in`` is False, an empty input is sent first, as the
    aggregator does when the user dials the service code.
    """

    async def _dial(
        *inputs: str,
        session_id: str = "AT-session-1",
        phone_number: str = CALLER,
        dial_in: bool = True,
    ) -> list[DialogDirective]:
        directives = []
        for raw_input in (("",) if dial_in else ()) + inputs:
            directives.append(
                await orchestrator.handle(
                    DialogRequest(
                        session_id=session_id, phone_number=phone_number, raw_input=raw_input
                    )
                )
            )
        return directives

    return _dial
