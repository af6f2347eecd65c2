"""Transition resolution: pick the edge to follow for a given input."""

import logging
from collections.abc import Mapping
from typing import Any

from ussd_gateway.automaton.graph import AutomatonGraph
from ussd_gateway.automaton.guards import guards_pass
from ussd_gateway.automaton.models import Transition
from ussd_gateway.session.models import SessionContext

logger = logging.getLogger(__name__)


class TransitionResolver:
    """Deterministic two-pass transition selection.

    Pass 1 scans regular transitions in priority order and returns the first
    whose trigger matches and whose guards hold. Pass 2 only runs when pass 1
    found nothing and returns the first fallback transition whose guards
    hold, regardless of trigger. Error transitions are never selected here;
    they are reserved for the retry-exceeded policy (see ``error_transition``).
    """

    def __init__(self, graph: AutomatonGraph) -> None:
        self.graph = graph

    def resolve(
        self,
        state_id: str,
        raw_input: str | None,
        session: SessionContext | Mapping[str, Any] | None = None,
    ) -> Transition | None:
        """Select the transition to follow.

        Args:
            state_id: Current state id
            raw_input: Latest user input token
            session: Session context (or an already flattened mapping) for guards

        Returns:
            The selected transition, or None when nothing matches.
        """
        context = _flatten(session)
        candidates = self.graph.transitions_from(state_id)

        for transition in candidates:
            if transition.is_fallback or transition.is_error:
                continue
            if transition.matches(raw_input) and guards_pass(transition, context):
                logger.debug(
                    f"Matched {transition}",
                    extra={"state_id": state_id},
                )
                return transition

        fallback = self.fallback_transition(state_id, context)
        if fallback is not None:
            logger.debug(f"Using fallback {fallback}", extra={"state_id": state_id})
            return fallback

        logger.debug(
            f"No transition from {state_id} for input {raw_input!r} "
            f"({len(candidates)} candidate(s))",
            extra={"state_id": state_id},
        )
        return None

    def fallback_transition(
        self,
        state_id: str,
        session: SessionContext | Mapping[str, Any] | None = None,
    ) -> Transition | None:
        """First fallback transition out of a state whose guards hold."""
        context = _flatten(session)
        for transition in self.graph.transitions_from(state_id):
            if transition.is_fallback and guards_pass(transition, context):
                return transition
        return None

    def error_transition(
        self,
        state_id: str,
        session: SessionContext | Mapping[str, Any] | None = None,
    ) -> Transition | None:
        """First error transition out of a state whose guards hold."""
        context = _flatten(session)
        for transition in self.graph.transitions_from(state_id):
            if transition.is_error and guards_pass(transition, context):
                return transition
        return None


def _flatten(session: SessionContext | Mapping[str, Any] | None) -> dict[str, Any]:
    if session is None:
        return {}
    if isinstance(session, SessionContext):
        return session.guard_context()
    return dict(session)
