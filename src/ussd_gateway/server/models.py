"""API Models - Pydantic models for FastAPI endpoints.

Defines the JSON request and response schemas. The aggregator callback
itself is form-encoded and answered in plain text.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class UssdTestRequest(BaseModel):
    """JSON twin of the aggregator callback, for manual testing."""

    model_config = ConfigDict(populate_by_name=True)

    session_id: str | None = Field(
        default=None, alias="sessionId", description="Omit to start a new session"
    )
    phone_number: str = Field(alias="phoneNumber", min_length=1)
    service_code: str | None = Field(default=None, alias="serviceCode")
    text: str = Field(default="", description="Cumulative '*'-separated input")


class CancelResponse(BaseModel):
    success: bool
    message: str


class HealthResponse(BaseModel):
    """Liveness response."""

    status: Literal["healthy", "starting"]
    version: str
    timestamp: str = Field(default_factory=lambda: datetime.now().isoformat())


class ReadinessResponse(BaseModel):
    """Readiness check response."""

    ready: bool
    message: str
    checks: dict[str, bool] | None = None


class VersionResponse(BaseModel):
    """Response model for version endpoint."""

    version: str
    major: int
    minor: int
    patch: str


class AutomatonInfoResponse(BaseModel):
    automaton_id: str
    name: str
    version: str
    description: str | None = None
    statistics: dict[str, Any]


class ReloadResponse(BaseModel):
    success: bool
    version: str | None = None
    errors: list[str] = Field(default_factory=list)
