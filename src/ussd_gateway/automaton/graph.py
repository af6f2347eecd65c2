"""Automaton graph: immutable dialog definition plus structural queries."""

import logging
import threading
from collections import deque
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from ussd_gateway.automaton.models import (
    MenuOption,
    State,
    StateKind,
    Transition,
    parse_action,
)
from ussd_gateway.config.loader import ConfigLoader
from ussd_gateway.config.models import AutomatonConfig, StateConfig, TransitionConfig
from ussd_gateway.core.errors import GraphLoadError, StateNotFoundError

logger = logging.getLogger(__name__)


class AutomatonGraph:
    """Read-only dialog graph.

    Built once from configuration. ``transitions_from`` is precomputed so the
    resolver never sorts on the request path.
    """

    def __init__(
        self,
        automaton_id: str,
        name: str,
        version: str,
        states: Mapping[str, State],
        transitions: Iterable[Transition],
        initial_state_id: str,
        final_state_ids: Iterable[str] = (),
        description: str | None = None,
        metadata: Mapping[str, str] | None = None,
    ) -> None:
        self.automaton_id = automaton_id
        self.name = name
        self.version = version
        self.description = description
        self.metadata = dict(metadata or {})
        self.initial_state_id = initial_state_id
        self._states = dict(states)
        self._transitions = tuple(transitions)

        finals = set(final_state_ids)
        finals.update(sid for sid, state in self._states.items() if state.is_final)
        self._final_state_ids = frozenset(finals)

        outgoing: dict[str, list[Transition]] = {}
        for transition in self._transitions:
            outgoing.setdefault(transition.from_state_id, []).append(transition)
        # sorted() is stable, so equal priorities keep declaration order
        self._outgoing = {
            state_id: tuple(sorted(items, key=lambda t: (-t.priority, t.order)))
            for state_id, items in outgoing.items()
        }

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def load(
        cls,
        definition: Mapping[str, Any] | AutomatonConfig,
        known_validation_tags: Iterable[str] | None = None,
    ) -> "AutomatonGraph":
        """Build and validate a graph from a definition.

        Args:
            definition: Decoded JSON/YAML mapping or an AutomatonConfig
            known_validation_tags: When given, tags outside this set are
                reported as violations (strict mode)

        Returns:
            A validated graph

        Raises:
            ConfigError: If the definition does not match the schema
            GraphLoadError: If any structural invariant is violated
        """
        return cls.from_config(ConfigLoader.parse(definition), known_validation_tags)

    @classmethod
    def from_config(
        cls,
        config: AutomatonConfig,
        known_validation_tags: Iterable[str] | None = None,
    ) -> "AutomatonGraph":
        """Build and validate a graph from a parsed AutomatonConfig."""
        errors: list[str] = []

        states: dict[str, State] = {}
        for state_cfg in config.states:
            if state_cfg.state_id in states:
                errors.append(f"Duplicate state id: {state_cfg.state_id}")
                continue
            states[state_cfg.state_id] = _build_state(state_cfg)

        transitions: list[Transition] = []
        for index, transition_cfg in enumerate(config.transitions):
            transition, action_errors = _build_transition(transition_cfg, index)
            errors.extend(action_errors)
            transitions.append(transition)

        graph = cls(
            automaton_id=config.automaton_id,
            name=config.name,
            version=config.version,
            description=config.description,
            metadata=config.metadata,
            states=states,
            transitions=transitions,
            initial_state_id=config.initial_state_id,
            final_state_ids=config.final_state_ids,
        )

        errors.extend(graph.validate())

        if known_validation_tags is not None:
            known = {tag.lower() for tag in known_validation_tags}
            for tag in sorted(graph.validation_tags()):
                if tag.lower() not in known:
                    errors.append(f"Unregistered validation type: {tag}")

        if errors:
            logger.error(
                f"Automaton '{config.automaton_id}' failed validation with {len(errors)} error(s)",
                extra={"automaton_id": config.automaton_id, "errors": errors},
            )
            raise GraphLoadError(errors)

        logger.info(
            f"Automaton loaded: {graph}",
            extra={"automaton_id": graph.automaton_id, "statistics": graph.statistics()},
        )
        return graph

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self) -> list[str]:
        """Check the structural invariants of the graph.

        Returns:
            Every violation found; empty when the graph is valid.
        """
        errors: list[str] = []

        if not self.initial_state_id or self.initial_state_id not in self._states:
            errors.append(f"Initial state not defined or not found: {self.initial_state_id}")
        elif not self._states[self.initial_state_id].is_initial:
            errors.append(f"Initial state {self.initial_state_id} is not of type INITIAL")

        initial_kinds = sorted(sid for sid, s in self._states.items() if s.is_initial)
        if len(initial_kinds) > 1:
            errors.append(f"More than one INITIAL state: {', '.join(initial_kinds)}")

        for final_id in sorted(self._final_state_ids):
            if final_id not in self._states:
                errors.append(f"Final state not found: {final_id}")

        for transition in self._transitions:
            edge = f"{transition.from_state_id} -> {transition.to_state_id}"
            if transition.from_state_id not in self._states:
                errors.append(
                    f"Transition {edge} references non-existent source state: "
                    f"{transition.from_state_id}"
                )
            if transition.to_state_id not in self._states:
                errors.append(
                    f"Transition {edge} references non-existent target state: "
                    f"{transition.to_state_id}"
                )

        if self.initial_state_id in self._states:
            reachable = self._reachable_from(self.initial_state_id)
            for state_id in self._states:
                if state_id not in reachable:
                    errors.append(f"State is unreachable: {state_id}")

        return errors

    def _reachable_from(self, start: str) -> set[str]:
        """Breadth-first traversal over every transition, error edges included."""
        reachable = {start}
        queue = deque([start])
        while queue:
            current = queue.popleft()
            for transition in self._outgoing.get(current, ()):
                target = transition.to_state_id
                if target not in reachable:
                    reachable.add(target)
                    queue.append(target)
        return reachable

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def states(self) -> Mapping[str, State]:
        return dict(self._states)

    @property
    def transitions(self) -> tuple[Transition, ...]:
        return self._transitions

    @property
    def final_state_ids(self) -> frozenset[str]:
        return self._final_state_ids

    @property
    def initial_state(self) -> State:
        return self.get_state(self.initial_state_id)

    def has_state(self, state_id: str) -> bool:
        return state_id in self._states

    def get_state(self, state_id: str) -> State:
        """Get a state by id.

        Raises:
            StateNotFoundError: If the id is not part of this graph
        """
        try:
            return self._states[state_id]
        except KeyError:
            raise StateNotFoundError(state_id) from None

    def is_final(self, state_id: str) -> bool:
        return state_id in self._final_state_ids

    def transitions_from(self, state_id: str) -> tuple[Transition, ...]:
        """Outgoing transitions, highest priority first, stable on declaration order."""
        return self._outgoing.get(state_id, ())

    def validation_tags(self) -> set[str]:
        """All validation tags referenced by states and transitions."""
        tags = {s.validation_type for s in self._states.values() if s.validation_type}
        tags.update(t.validation_type for t in self._transitions if t.validation_type)
        return tags

    def business_hooks(self) -> set[str]:
        return {s.business_hook for s in self._states.values() if s.business_hook}

    def statistics(self) -> dict[str, Any]:
        states = self._states.values()
        return {
            "automatonId": self.automaton_id,
            "version": self.version,
            "totalStates": len(self._states),
            "totalTransitions": len(self._transitions),
            "initialState": self.initial_state_id,
            "finalStates": len(self._final_state_ids),
            "menuStates": sum(1 for s in states if s.is_menu),
            "validationStates": sum(1 for s in states if s.validation_type),
            "hookStates": sum(1 for s in states if s.business_hook),
        }

    def __repr__(self) -> str:
        return (
            f"AutomatonGraph(id={self.automaton_id!r}, name={self.name!r}, "
            f"version={self.version!r}, states={len(self._states)}, "
            f"transitions={len(self._transitions)})"
        )


def _build_state(cfg: StateConfig) -> State:
    return State(
        state_id=cfg.state_id,
        label=cfg.label,
        kind=StateKind(cfg.state_type),
        display_message=cfg.display_message,
        validation_type=cfg.validation_type or None,
        business_hook=cfg.business_service_method or None,
        storage_key=cfg.context_storage_key or None,
        terminates_session=cfg.terminates_session,
        menu_options=tuple(
            MenuOption(key=o.option_key, label=o.option_text, trigger=o.transition_trigger)
            for o in cfg.menu_options
        ),
    )


def _build_transition(cfg: TransitionConfig, order: int) -> tuple[Transition, list[str]]:
    errors: list[str] = []
    actions = []
    for directive in cfg.actions:
        try:
            actions.append(parse_action(directive))
        except ValueError as e:
            errors.append(f"Transition {cfg.from_state_id} -> {cfg.to_state_id}: {e}")

    transition = Transition(
        from_state_id=cfg.from_state_id,
        to_state_id=cfg.to_state_id,
        trigger=cfg.trigger,
        priority=cfg.priority,
        requires_validation=cfg.requires_validation,
        validation_type=cfg.validation_type or None,
        guards=tuple(g for g in cfg.guard_conditions if g.strip()),
        actions=tuple(actions),
        is_error=cfg.is_error_transition,
        is_fallback=cfg.is_fallback_transition,
        error_message=cfg.error_message,
        max_retries=cfg.max_retries,
        order=order,
    )
    return transition, errors


class GraphHolder:
    """Process-wide reference to the active graph.

    ``reload`` builds the replacement completely before publishing it, so
    readers see either the old or the new graph, never a partial one.
    Callers take ``current`` once per request and keep that snapshot.
    """

    def __init__(
        self,
        graph: AutomatonGraph,
        known_validation_tags: Iterable[str] | None = None,
    ) -> None:
        self._graph = graph
        self._known_validation_tags = (
            None if known_validation_tags is None else tuple(known_validation_tags)
        )
        self._write_lock = threading.Lock()

    @property
    def current(self) -> AutomatonGraph:
        return self._graph

    def reload(self, definition: Mapping[str, Any] | AutomatonConfig) -> AutomatonGraph:
        """Rebuild from a definition and swap the shared reference.

        Raises:
            GraphLoadError: The new definition is invalid; the old graph stays active
        """
        with self._write_lock:
            graph = AutomatonGraph.load(definition, self._known_validation_tags)
            previous = self._graph
            self._graph = graph
        logger.info(
            f"Automaton reloaded: {previous.version} -> {graph.version}",
            extra={"automaton_id": graph.automaton_id},
        )
        return graph

    def reload_from(self, path: Path | str | None = None) -> AutomatonGraph:
        """Reload from a file, or from the packaged default when path is None."""
        config = ConfigLoader.load(path) if path else ConfigLoader.load_default()
        return self.reload(config)
