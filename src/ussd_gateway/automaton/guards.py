"""Guard condition evaluation for transitions."""

import logging
from typing import Any

from ussd_gateway.automaton.models import Transition
from ussd_gateway.core.expression import evaluate_expression

logger = logging.getLogger(__name__)


def guards_pass(transition: Transition, context: dict[str, Any]) -> bool:
    """Return True when every guard of the transition holds.

    A guard that cannot be evaluated counts as false, so a broken expression
    disables its transition instead of failing the request.
    """
    for guard in transition.guards:
        try:
            if not evaluate_expression(guard, context):
                return False
        except (TypeError, ValueError) as e:
            logger.warning(
                f"Guard {guard!r} on {transition} could not be evaluated: {e}",
                extra={"state_id": transition.from_state_id},
            )
            return False
    return True
