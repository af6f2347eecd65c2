"""Core primitives shared across the gateway."""

from ussd_gateway.core.errors import (
    BusinessHookError,
    ConfigError,
    GatewayError,
    GraphLoadError,
    NoMatchingTransitionError,
    SessionError,
    SessionExpiredError,
    SessionNotFoundError,
    StateNotFoundError,
    StoreUnavailableError,
    ValidationFailedError,
    create_error_reference,
)

__all__ = [
    "GatewayError",
    "ConfigError",
    "GraphLoadError",
    "StateNotFoundError",
    "SessionError",
    "SessionNotFoundError",
    "SessionExpiredError",
    "ValidationFailedError",
    "NoMatchingTransitionError",
    "BusinessHookError",
    "StoreUnavailableError",
    "create_error_reference",
]
