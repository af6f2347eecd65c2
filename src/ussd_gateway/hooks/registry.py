"""Business hook registry."""

import inspect
import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from ussd_gateway.core.errors import BusinessHookError

logger = logging.getLogger(__name__)

# A hook receives the session values and returns answers to merge back.
HookHandler = Callable[[dict[str, Any]], dict[str, Any] | Awaitable[dict[str, Any]]]


class HookRegistry:
    """Registry for business hooks run when the dialog lands on a state.

    Hooks may be sync or async. Whatever mapping they return is merged into
    the session answers by the caller.

    Usage:
        registry = HookRegistry()

        async def compute_quote(values):
            return {"quote": "3,500 XAF"}

        registry.register_handler("computeQuote", compute_quote)
        result = await registry.execute("computeQuote", {"packageWeight": "5"})
    """

    def __init__(self) -> None:
        self._handlers: dict[str, HookHandler] = {}

    def register_handler(self, name: str, handler: HookHandler) -> None:
        if name in self._handlers:
            logger.warning(f"Hook '{name}' already registered, overwriting", extra={"hook": name})
        self._handlers[name] = handler

    async def execute(self, name: str, values: Mapping[str, Any]) -> dict[str, str]:
        """Run a hook.

        Args:
            name: Registered hook name
            values: Session answers plus caller details (phone number, user id)

        Returns:
            Answers produced by the hook, stringified

        Raises:
            BusinessHookError: If the hook is unknown, raises, or returns a non-mapping
        """
        handler = self._handlers.get(name)
        if handler is None:
            raise BusinessHookError(f"Unknown business hook: {name}", hook=name)

        try:
            result = handler(dict(values))
            if inspect.isawaitable(result):
                result = await result
        except BusinessHookError:
            raise
        except Exception as e:
            raise BusinessHookError(f"Business hook '{name}' failed: {e}", hook=name) from e

        if result is None:
            return {}
        if not isinstance(result, Mapping):
            raise BusinessHookError(
                f"Business hook '{name}' returned {type(result).__name__}, expected a mapping",
                hook=name,
            )
        return {key: "" if value is None else str(value) for key, value in result.items()}

    def list_hooks(self) -> list[str]:
        return list(self._handlers)

    def __contains__(self, name: str) -> bool:
        return name in self._handlers
