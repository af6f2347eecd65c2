"""Tests for GatewayRuntime wiring"""

import json

import pytest

from ussd_gateway.config.settings import GatewaySettings, PersistenceConfig
from ussd_gateway.core.errors import GraphLoadError
from ussd_gateway.dialog.models import DialogRequest
from ussd_gateway.hooks.registry import HookRegistry
from ussd_gateway.runtime import GatewayRuntime, load_graph
from ussd_gateway.session.store import SqliteSessionStore


def test_load_graph_defaults_to_packaged_dialog():
    assert load_graph(GatewaySettings()).automaton_id == "package-delivery"


def test_strict_settings_reject_unknown_tags(tmp_path, make_definition):
    # Arrange
    definition = make_definition()
    definition["states"][1]["validationType"] = "SHOE_SIZE"
    path = tmp_path / "automaton.json"
    path.write_text(json.dumps(definition), encoding="utf-8")

    # Act & Assert
    load_graph(GatewaySettings(automaton_path=str(path)))
    with pytest.raises(GraphLoadError, match="SHOE_SIZE"):
        load_graph(GatewaySettings(automaton_path=str(path), strict_validation_tags=True))


@pytest.mark.asyncio
async def test_runtime_lifecycle_with_sqlite(tmp_path):
    """The sweeper runs while the runtime is active and the store is closed afterwards"""
    # Arrange
    settings = GatewaySettings(
        persistence=PersistenceConfig(backend="sqlite", path=str(tmp_path / "sessions.db"))
    )

    # Act
    async with GatewayRuntime.build(settings) as runtime:
        assert runtime.sweeper.running
        directive = await runtime.orchestrator.handle(
            DialogRequest(session_id="AT-1", phone_number="+237670000999")
        )
        persisted = await runtime.store.exists("AT-1")

    # Assert
    assert isinstance(runtime.store, SqliteSessionStore)
    assert directive.format().startswith("CON Welcome to PackDelivery")
    assert persisted
    assert not runtime.sweeper.running


def test_reload_automaton_uses_configured_path(tmp_path, make_definition):
    path = tmp_path / "automaton.json"
    path.write_text(json.dumps(make_definition()), encoding="utf-8")
    runtime = GatewayRuntime.build(GatewaySettings(automaton_path=str(path)), run_sweeper=False)

    path.write_text(json.dumps(make_definition(version="3.1")), encoding="utf-8")

    assert runtime.reload_automaton().version == "3.1"
    assert runtime.graphs.current.version == "3.1"


@pytest.mark.asyncio
async def test_custom_hooks_reach_the_orchestrator(tmp_path, make_definition):
    # Arrange
    definition = make_definition()
    definition["states"][2]["businessServiceMethod"] = "greet"
    definition["states"][2]["displayMessage"] = "Thanks {name}, {greeting}"
    path = tmp_path / "automaton.json"
    path.write_text(json.dumps(definition), encoding="utf-8")
    hooks = HookRegistry()
    hooks.register_handler("greet", lambda values: {"greeting": "welcome aboard"})

    runtime = GatewayRuntime.build(
        GatewaySettings(automaton_path=str(path)), hooks=hooks, run_sweeper=False
    )

    # Act
    for raw_input in ("", "1"):
        await runtime.orchestrator.handle(
            DialogRequest(session_id="AT-2", phone_number="+237670000999", raw_input=raw_input)
        )
    directive = await runtime.orchestrator.handle(
        DialogRequest(session_id="AT-2", phone_number="+237670000999", raw_input="John Doe")
    )

    # Assert
    assert runtime.hooks is hooks
    assert "computeQuote" in runtime.hooks
    assert directive.format() == "END Thanks John Doe, welcome aboard"
