"""Thread-safe registry for input validators"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from threading import Lock

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one piece of user input."""

    ok: bool
    reason: str | None = None

    @classmethod
    def success(cls) -> "ValidationResult":
        return cls(ok=True)

    @classmethod
    def failed(cls, reason: str) -> "ValidationResult":
        return cls(ok=False, reason=reason)


Validator = Callable[[str], ValidationResult]

_validators: dict[str, Validator] = {}
_validators_lock = Lock()


def _key(tag: str) -> str:
    return tag.strip().upper()


class ValidatorRegistry:
    """
    Thread-safe registry mapping validation tags to validator functions.

    Tags are case-insensitive: ``NAME``, ``name`` and ``Name`` resolve to
    the same validator. All mutations are protected by a lock.
    """

    @classmethod
    def register(cls, tag: str) -> Callable[[Validator], Validator]:
        """
        Register a validator function.

        Usage:
            @ValidatorRegistry.register("CITY")
            def validate_city(value: str) -> ValidationResult:
                ...

        Args:
            tag: Validation tag referenced by transitions

        Returns:
            Decorator function
        """

        def decorator(func: Validator) -> Validator:
            key = _key(tag)
            with _validators_lock:
                if key in _validators:
                    logger.warning(
                        f"Validator '{key}' already registered, overwriting",
                        extra={"validator_name": key},
                    )
                _validators[key] = func
                logger.debug(
                    f"Registered validator '{key}'",
                    extra={"validator_name": key},
                )
            return func

        return decorator

    @classmethod
    def validate(cls, tag: str | None, value: str) -> ValidationResult:
        """
        Validate a value against a tag.

        A missing tag, or a tag with no registered validator, accepts the
        input. Strict deployments reject unknown tags when the automaton is
        loaded instead (see ``GatewaySettings.strict_validation_tags``).

        Args:
            tag: Validation tag, may be None or empty
            value: Raw user input

        Returns:
            ValidationResult
        """
        if not tag or not tag.strip():
            return ValidationResult.success()
        key = _key(tag)
        with _validators_lock:
            validator = _validators.get(key)
        if validator is None:
            logger.debug(
                f"No validator for '{key}', accepting input",
                extra={"validator_name": key},
            )
            return ValidationResult.success()
        return validator(value)

    @classmethod
    def list_validators(cls) -> list[str]:
        with _validators_lock:
            return list(_validators.keys())
