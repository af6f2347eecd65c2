"""Dialog automaton: model, graph and transition resolution."""

from ussd_gateway.automaton.graph import AutomatonGraph, GraphHolder
from ussd_gateway.automaton.models import (
    Action,
    LogEvent,
    MenuOption,
    State,
    StateKind,
    StoreInSession,
    Transition,
    parse_action,
)
from ussd_gateway.automaton.resolver import TransitionResolver

__all__ = [
    "Action",
    "AutomatonGraph",
    "GraphHolder",
    "LogEvent",
    "MenuOption",
    "State",
    "StateKind",
    "StoreInSession",
    "Transition",
    "TransitionResolver",
    "parse_action",
]
