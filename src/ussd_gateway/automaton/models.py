"""Immutable dialog model: states, transitions and transition actions.

Everything in here is built once when the graph is loaded and never mutated
afterwards. Per-request data lives in the session context.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ussd_gateway.core.expression import render_template


class StateKind(str, Enum):
    """Role of a state in the dialog."""

    INITIAL = "INITIAL"
    NORMAL = "NORMAL"
    FINAL = "FINAL"


@dataclass(frozen=True)
class MenuOption:
    """One numbered line of a menu state."""

    key: str
    label: str
    trigger: str

    def render(self) -> str:
        return f"{self.key}. {self.label}"


@dataclass(frozen=True)
class State:
    """A node of the dialog graph."""

    state_id: str
    display_message: str
    kind: StateKind = StateKind.NORMAL
    label: str = ""
    validation_type: str | None = None
    business_hook: str | None = None
    storage_key: str | None = None
    terminates_session: bool = False
    menu_options: tuple[MenuOption, ...] = ()

    @property
    def is_initial(self) -> bool:
        return self.kind is StateKind.INITIAL

    @property
    def is_final(self) -> bool:
        return self.kind is StateKind.FINAL

    @property
    def is_menu(self) -> bool:
        return bool(self.menu_options)

    @property
    def ends_dialog(self) -> bool:
        """True when landing here closes the USSD session."""
        return self.is_final or self.terminates_session

    def render(self, answers: dict[str, Any] | None = None) -> str:
        """Render the display message followed by one line per menu option.

        Args:
            answers: Values substituted into ``{key}`` placeholders

        Returns:
            Plain text ready to be sent to the handset.
        """
        message = render_template(self.display_message, answers or {})
        if not self.is_menu:
            return message
        lines = [message, *(option.render() for option in self.menu_options)]
        return "\n".join(lines)


@dataclass(frozen=True)
class StoreInSession:
    """Merge ``key=value`` into the session answers when the transition fires."""

    key: str
    value: str

    def resolve_value(self, raw_input: str, answers: dict[str, Any]) -> str:
        return render_template(self.value, {**answers, "input": raw_input.strip()})


@dataclass(frozen=True)
class LogEvent:
    """Emit a named operational log event when the transition fires."""

    name: str


Action = StoreInSession | LogEvent

ACTION_STORE_IN_SESSION = "storeInSession"
ACTION_LOG_EVENT = "logEvent"


def parse_action(directive: str) -> Action:
    """Parse a ``verb:payload`` directive into a typed action.

    Args:
        directive: e.g. ``"storeInSession:transportMode=TRUCK"`` or ``"logEvent:shipment_confirmed"``

    Returns:
        The parsed action.

    Raises:
        ValueError: If the directive is malformed or the verb is unknown
    """
    verb, sep, payload = directive.partition(":")
    verb = verb.strip()
    if not sep or not payload.strip():
        raise ValueError(f"Invalid action format: {directive!r} (expected 'verb:payload')")

    if verb == ACTION_STORE_IN_SESSION:
        key, eq, value = payload.partition("=")
        if not eq or not key.strip():
            raise ValueError(f"Invalid storeInSession payload: {payload!r} (expected 'key=value')")
        return StoreInSession(key=key.strip(), value=value)

    if verb == ACTION_LOG_EVENT:
        return LogEvent(name=payload.strip())

    raise ValueError(f"Unknown action type: {verb!r}")


@dataclass(frozen=True)
class Transition:
    """A directed edge between two states.

    ``order`` is the declaration index in the configuration; it breaks ties
    between transitions of equal priority.
    """

    from_state_id: str
    to_state_id: str
    trigger: str = ""
    priority: int = 0
    requires_validation: bool = False
    validation_type: str | None = None
    guards: tuple[str, ...] = ()
    actions: tuple[Action, ...] = ()
    is_error: bool = False
    is_fallback: bool = False
    error_message: str | None = None
    max_retries: int = 3
    order: int = field(default=0, compare=False)

    @property
    def is_epsilon(self) -> bool:
        return self.trigger == ""

    def matches(self, raw_input: str | None) -> bool:
        """Check the trigger against the user input.

        Empty trigger matches unconditionally, ``*`` matches any non-empty
        input, anything else is a case-insensitive exact match.
        """
        if self.is_epsilon:
            return True

        text = (raw_input or "").strip()
        if self.trigger == "*":
            return bool(text)

        return self.trigger.strip().casefold() == text.casefold()

    def __str__(self) -> str:
        validation = self.validation_type if self.requires_validation else "none"
        return (
            f"Transition{{{self.from_state_id} -[{self.trigger}]-> {self.to_state_id}, "
            f"priority={self.priority}, validation={validation}}}"
        )
