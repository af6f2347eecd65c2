"""USSD Gateway - automaton-driven USSD dialogs for package delivery.

Quick start:
    from ussd_gateway import DialogRequest, GatewayRuntime

    async with GatewayRuntime.build() as runtime:
        directive = await runtime.orchestrator.handle(
            DialogRequest(session_id="s1", phone_number="+237600000000", raw_input="")
        )
        print(directive.format())
"""

from ussd_gateway.__version__ import __version__
from ussd_gateway.automaton import AutomatonGraph, GraphHolder, TransitionResolver
from ussd_gateway.config import GatewaySettings
from ussd_gateway.core.errors import (
    BusinessHookError,
    ConfigError,
    GatewayError,
    GraphLoadError,
    SessionExpiredError,
    SessionNotFoundError,
    StoreUnavailableError,
)
from ussd_gateway.dialog import DialogDirective, DialogOrchestrator, DialogRequest, DirectiveKind
from ussd_gateway.runtime import GatewayRuntime

__all__ = [
    "__version__",
    "AutomatonGraph",
    "GraphHolder",
    "TransitionResolver",
    "GatewaySettings",
    "GatewayRuntime",
    "DialogOrchestrator",
    "DialogRequest",
    "DialogDirective",
    "DirectiveKind",
    "GatewayError",
    "ConfigError",
    "GraphLoadError",
    "SessionNotFoundError",
    "SessionExpiredError",
    "BusinessHookError",
    "StoreUnavailableError",
]
