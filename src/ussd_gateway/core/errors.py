"""Gateway error taxonomy."""

import uuid


class GatewayError(Exception):
    """Base class for all gateway errors."""

    pass


class ConfigError(GatewayError):
    """Raised when settings or a configuration file are invalid."""


class GraphLoadError(ConfigError):
    """Raised when an automaton definition fails structural validation.

    Every violation found is collected so a broken configuration can be
    fixed in a single pass.
    """

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        summary = "; ".join(self.errors) if self.errors else "unknown error"
        super().__init__(f"Invalid automaton configuration ({len(self.errors)} error(s)): {summary}")


class StateNotFoundError(GatewayError):
    """Raised when a state id is not part of the loaded graph."""

    def __init__(self, state_id: str) -> None:
        super().__init__(f"State not found: {state_id}")
        self.state_id = state_id


class SessionError(GatewayError):
    """Raised when session operations fail."""

    def __init__(self, message: str, session_id: str) -> None:
        super().__init__(message)
        self.session_id = session_id


class SessionNotFoundError(SessionError):
    """No session is stored under the given id."""

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session not found: {session_id}", session_id)


class SessionExpiredError(SessionError):
    """The session existed but was idle for longer than the timeout."""

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session has expired: {session_id}", session_id)


class ValidationFailedError(GatewayError):
    """Raised when user input does not satisfy a validation tag."""

    def __init__(self, reason: str, tag: str | None = None, max_retries: int = 3) -> None:
        super().__init__(reason)
        self.reason = reason
        self.tag = tag
        self.max_retries = max_retries


class NoMatchingTransitionError(GatewayError):
    """Raised when neither a regular nor a fallback transition matches."""

    def __init__(self, state_id: str, raw_input: str) -> None:
        super().__init__(f"No transition from {state_id} for input {raw_input!r}")
        self.state_id = state_id
        self.raw_input = raw_input


class BusinessHookError(GatewayError):
    """Raised when a business hook is unknown or fails."""

    def __init__(self, message: str, hook: str) -> None:
        super().__init__(message)
        self.hook = hook


class StoreUnavailableError(GatewayError):
    """Transient I/O failure from the session store."""

    pass


def create_error_reference() -> str:
    """Generate unique error reference for client/server correlation."""
    return f"ERR-{uuid.uuid4().hex[:8].upper()}"
