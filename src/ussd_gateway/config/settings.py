"""Runtime settings.

Global settings for session handling, persistence and logging. Values come
from ``USSD_*`` environment variables (``.env`` files are honoured by the
entry points through python-dotenv).
"""

import os
from collections.abc import Mapping
from typing import Literal

from pydantic import BaseModel, Field, ValidationError

from ussd_gateway.core.constants import (
    DEFAULT_MAX_RETRIES,
    DEFAULT_SESSION_TIMEOUT_SECONDS,
    DEFAULT_SWEEP_INTERVAL_SECONDS,
)
from ussd_gateway.core.errors import ConfigError

StoreBackend = Literal["memory", "sqlite"]

ENV_PREFIX = "USSD_"


class PersistenceConfig(BaseModel):
    """Session store configuration."""

    backend: StoreBackend = Field(default="memory", description="Backend type: memory, sqlite")
    path: str = Field(default="ussd_sessions.db", description="Database path for sqlite")


class GatewaySettings(BaseModel):
    """Global gateway settings."""

    automaton_path: str | None = Field(
        default=None,
        description="Automaton definition file; the packaged delivery dialog is used when unset",
    )
    session_timeout_seconds: float = Field(default=DEFAULT_SESSION_TIMEOUT_SECONDS, gt=0)
    sweep_interval_seconds: float = Field(default=DEFAULT_SWEEP_INTERVAL_SECONDS, gt=0)
    max_retries: int = Field(
        default=DEFAULT_MAX_RETRIES,
        ge=1,
        description="Failed attempts on a state before its error transition is taken",
    )
    persistence: PersistenceConfig = Field(default_factory=PersistenceConfig)
    log_level: str = Field(default="INFO")
    log_file: str | None = Field(default=None, description="Optional JSON log file")
    strict_validation_tags: bool = Field(
        default=False,
        description="Reject automatons that reference unregistered validation tags",
    )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "GatewaySettings":
        """Build settings from ``USSD_*`` environment variables.

        Args:
            environ: Mapping to read from, defaults to ``os.environ``

        Returns:
            Validated settings

        Raises:
            ConfigError: If a variable holds an invalid value
        """
        env = os.environ if environ is None else environ

        def _get(name: str) -> str | None:
            value = env.get(f"{ENV_PREFIX}{name}")
            return value if value not in (None, "") else None

        data: dict[str, object] = {}
        for field_name in (
            "automaton_path",
            "session_timeout_seconds",
            "sweep_interval_seconds",
            "max_retries",
            "log_level",
            "log_file",
        ):
            value = _get(field_name.upper())
            if value is not None:
                data[field_name] = value

        strict = _get("STRICT_VALIDATION_TAGS")
        if strict is not None:
            data["strict_validation_tags"] = strict.strip().lower() in ("1", "true", "yes", "on")

        persistence: dict[str, str] = {}
        backend = _get("PERSISTENCE_BACKEND")
        if backend is not None:
            persistence["backend"] = backend.lower()
        path = _get("PERSISTENCE_PATH")
        if path is not None:
            persistence["path"] = path
        if persistence:
            data["persistence"] = persistence

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid gateway settings: {e}") from e
