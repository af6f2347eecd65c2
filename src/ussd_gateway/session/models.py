"""Session context: the per-conversation mutable data."""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field

from ussd_gateway.core.constants import DEFAULT_LANGUAGE


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionContext(BaseModel):
    """Everything the gateway remembers between two USSD callbacks.

    Graph states are immutable; the current position, collected answers and
    retry bookkeeping all live here.
    """

    session_id: str
    phone_number: str
    current_state_id: str | None = None
    user_id: str | None = None
    answers: dict[str, str] = Field(default_factory=dict)
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utcnow)
    last_activity: datetime = Field(default_factory=utcnow)
    retry_count: int = 0
    authenticated: bool = False
    language: str = DEFAULT_LANGUAGE

    def store_answer(self, key: str, value: str) -> None:
        """Record an answer; a stored answer always clears the retry counter."""
        self.answers[key] = value
        self.retry_count = 0

    def merge_answers(self, values: dict[str, Any]) -> None:
        for key, value in values.items():
            self.answers[key] = "" if value is None else str(value)

    def register_failure(self) -> int:
        self.retry_count += 1
        return self.retry_count

    def reset_retries(self) -> None:
        self.retry_count = 0

    def move_to(self, state_id: str) -> None:
        self.current_state_id = state_id

    def touch(self, now: datetime) -> None:
        self.last_activity = now

    def idle_seconds(self, now: datetime) -> float:
        return (now - self.last_activity).total_seconds()

    def is_expired(self, now: datetime, timeout_seconds: float) -> bool:
        return self.idle_seconds(now) > timeout_seconds

    def guard_context(self) -> dict[str, Any]:
        """Flat view used by guard expressions and message templates."""
        context: dict[str, Any] = {**self.metadata, **self.answers}
        context["authenticated"] = self.authenticated
        context["phoneNumber"] = self.phone_number
        context["language"] = self.language
        if self.user_id is not None:
            context["userId"] = self.user_id
        return context
