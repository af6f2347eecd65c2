"""Tests for dialog model types and expression helpers"""

import pytest

from ussd_gateway.automaton.models import (
    LogEvent,
    MenuOption,
    State,
    StoreInSession,
    Transition,
    parse_action,
)
from ussd_gateway.core.expression import evaluate_expression, render_template


class TestStateRender:
    def test_menu_state_renders_one_line_per_option(self):
        # Arrange
        state = State(
            state_id="MENU",
            display_message="Welcome",
            menu_options=(MenuOption("1", "Send", "1"), MenuOption("0", "Exit", "0")),
        )

        # Act & Assert
        assert state.render() == "Welcome\n1. Send\n0. Exit"

    def test_placeholders_are_substituted(self):
        state = State(state_id="S", display_message="Hello {name}, price {quote}")
        assert state.render({"name": "Ada"}) == "Hello Ada, price {quote}"


class TestParseAction:
    def test_store_in_session(self):
        assert parse_action("storeInSession:mode=TRUCK") == StoreInSession("mode", "TRUCK")

    def test_log_event(self):
        assert parse_action("logEvent:started") == LogEvent("started")

    @pytest.mark.parametrize(
        "directive",
        ["storeInSession", "storeInSession:noequals", "logEvent:", "teleport:home"],
    )
    def test_malformed_directives_raise(self, directive):
        with pytest.raises(ValueError):
            parse_action(directive)

    def test_store_value_can_reference_input(self):
        action = StoreInSession("echo", "got {input}")
        assert action.resolve_value(" 42 ", {}) == "got 42"


class TestTransition:
    def test_trigger_kinds(self):
        assert Transition("A", "B", trigger="").matches(None)
        assert Transition("A", "B", trigger="*").matches("anything")
        assert not Transition("A", "B", trigger="*").matches("  ")
        assert Transition("A", "B", trigger="Yes").matches(" yes ")
        assert not Transition("A", "B", trigger="1").matches("11")


class TestExpressions:
    @pytest.mark.parametrize(
        ("expr", "context", "expected"),
        [
            ("has userId", {"userId": "U1"}, True),
            ("not has userId", {}, True),
            ("weight > 10 AND mode == 'TRUCK'", {"weight": "12", "mode": "TRUCK"}, True),
            ("weight > 10 OR mode == 'TRUCK'", {"weight": "2", "mode": "CAR"}, False),
            ("authenticated", {"authenticated": True}, True),
            ("", {}, True),
        ],
    )
    def test_evaluate(self, expr, context, expected):
        assert evaluate_expression(expr, context) is expected

    def test_render_template_leaves_unknown_fields(self):
        assert render_template("{a}-{b}", {"a": 1}) == "1-{b}"
