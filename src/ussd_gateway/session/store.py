"""Session context stores.

Supports two backends:
- memory: process-local dictionary (development/testing)
- sqlite: aiosqlite file-backed table (survives restarts)
"""

import logging
import uuid
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from contextlib import AbstractAsyncContextManager, contextmanager
from datetime import datetime, timedelta
from pathlib import Path

import aiosqlite

from ussd_gateway.config.settings import GatewaySettings
from ussd_gateway.core.constants import DEFAULT_SESSION_TIMEOUT_SECONDS, SESSION_ID_PREFIX
from ussd_gateway.core.errors import (
    ConfigError,
    SessionExpiredError,
    SessionNotFoundError,
    StoreUnavailableError,
)
from ussd_gateway.session.locks import SessionLockRegistry
from ussd_gateway.session.models import SessionContext, utcnow

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def new_session_id() -> str:
    return f"{SESSION_ID_PREFIX}{uuid.uuid4()}"


class SessionStore(ABC):
    """Keyed storage of session contexts with idle expiry.

    Subclasses provide raw read/write/remove primitives; expiry, touch on read
    and id generation are shared here so every backend behaves identically.
    """

    def __init__(
        self,
        timeout_seconds: float = DEFAULT_SESSION_TIMEOUT_SECONDS,
        clock: Clock = utcnow,
        locks: SessionLockRegistry | None = None,
    ) -> None:
        self.timeout_seconds = timeout_seconds
        self._clock = clock
        self._locks = locks or SessionLockRegistry(ttl_seconds=max(timeout_seconds, 60.0))

    def now(self) -> datetime:
        return self._clock()

    async def create(self, phone_number: str, session_id: str | None = None) -> str:
        """Create and persist a fresh context.

        Args:
            phone_number: Caller MSISDN
            session_id: Aggregator-supplied id; generated when omitted

        Returns:
            The id the context was stored under
        """
        now = self.now()
        context = SessionContext(
            session_id=session_id or new_session_id(),
            phone_number=phone_number,
            created_at=now,
            last_activity=now,
        )
        await self._write(context)
        logger.debug("Created session", extra={"session_id": context.session_id})
        return context.session_id

    async def get(self, session_id: str) -> SessionContext:
        """Load a context and refresh its activity timestamp.

        Raises:
            SessionNotFoundError: Nothing is stored under the id
            SessionExpiredError: The context was idle too long (it is removed)
        """
        context = await self._read(session_id)
        if context is None:
            raise SessionNotFoundError(session_id)

        now = self.now()
        if context.is_expired(now, self.timeout_seconds):
            await self._remove(session_id)
            logger.info("Session expired", extra={"session_id": session_id})
            raise SessionExpiredError(session_id)

        context.touch(now)
        await self._write(context)
        return context

    async def save(self, context: SessionContext) -> None:
        await self._write(context)

    async def delete(self, session_id: str) -> None:
        await self._remove(session_id)

    async def exists(self, session_id: str) -> bool:
        context = await self._read(session_id)
        if context is None:
            return False
        if context.is_expired(self.now(), self.timeout_seconds):
            await self._remove(session_id)
            return False
        return True

    async def sweep_expired(self) -> int:
        """Remove every context idle for longer than the timeout.

        Returns:
            Number of contexts removed
        """
        cutoff = self.now() - timedelta(seconds=self.timeout_seconds)
        removed = await self._remove_idle_before(cutoff)
        if removed:
            logger.info(f"Swept {removed} expired session(s)")
        return removed

    def lock(self, session_id: str) -> AbstractAsyncContextManager[None]:
        """Serialize work on one session id."""
        return self._locks.hold(session_id)

    async def close(self) -> None:
        return None

    @abstractmethod
    async def _read(self, session_id: str) -> SessionContext | None: ...

    @abstractmethod
    async def _write(self, context: SessionContext) -> None: ...

    @abstractmethod
    async def _remove(self, session_id: str) -> None: ...

    @abstractmethod
    async def _remove_idle_before(self, cutoff: datetime) -> int: ...


class InMemorySessionStore(SessionStore):
    """Process-local store. Contexts are copied in and out so callers never
    share mutable state with the store."""

    def __init__(
        self,
        timeout_seconds: float = DEFAULT_SESSION_TIMEOUT_SECONDS,
        clock: Clock = utcnow,
        locks: SessionLockRegistry | None = None,
    ) -> None:
        super().__init__(timeout_seconds, clock, locks)
        self._sessions: dict[str, SessionContext] = {}

    async def _read(self, session_id: str) -> SessionContext | None:
        context = self._sessions.get(session_id)
        return context.model_copy(deep=True) if context is not None else None

    async def _write(self, context: SessionContext) -> None:
        self._sessions[context.session_id] = context.model_copy(deep=True)

    async def _remove(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    async def _remove_idle_before(self, cutoff: datetime) -> int:
        stale = [sid for sid, ctx in self._sessions.items() if ctx.last_activity < cutoff]
        for session_id in stale:
            del self._sessions[session_id]
        return len(stale)

    def __len__(self) -> int:
        return len(self._sessions)


_CREATE_TABLE = """
CREATE TABLE IF NOT EXISTS ussd_sessions (
    session_id TEXT PRIMARY KEY,
    payload TEXT NOT NULL,
    last_activity REAL NOT NULL
)
"""

_UPSERT = """
INSERT INTO ussd_sessions (session_id, payload, last_activity)
VALUES (?, ?, ?)
ON CONFLICT(session_id) DO UPDATE SET
    payload = excluded.payload,
    last_activity = excluded.last_activity
"""


class SqliteSessionStore(SessionStore):
    """Durable store on a single SQLite table via aiosqlite.

    The connection is opened lazily on first use. Payloads are the JSON dump
    of the context; ``last_activity`` is duplicated as an epoch column so the
    sweep can run as one DELETE.
    """

    def __init__(
        self,
        path: str | Path,
        timeout_seconds: float = DEFAULT_SESSION_TIMEOUT_SECONDS,
        clock: Clock = utcnow,
        locks: SessionLockRegistry | None = None,
    ) -> None:
        super().__init__(timeout_seconds, clock, locks)
        self.path = Path(path)
        self._db: aiosqlite.Connection | None = None

    async def _connection(self) -> aiosqlite.Connection:
        if self._db is None:
            with _wrap_io_errors(self.path):
                if str(self.path) != ":memory:":
                    self.path.parent.mkdir(parents=True, exist_ok=True)
                self._db = await aiosqlite.connect(str(self.path))
                await self._db.execute(_CREATE_TABLE)
                await self._db.commit()
            logger.info(f"Opened SQLite session store at {self.path}")
        return self._db

    async def _read(self, session_id: str) -> SessionContext | None:
        db = await self._connection()
        with _wrap_io_errors(self.path):
            async with db.execute(
                "SELECT payload FROM ussd_sessions WHERE session_id = ?", (session_id,)
            ) as cursor:
                row = await cursor.fetchone()
        if row is None:
            return None
        return SessionContext.model_validate_json(row[0])

    async def _write(self, context: SessionContext) -> None:
        db = await self._connection()
        with _wrap_io_errors(self.path):
            await db.execute(
                _UPSERT,
                (
                    context.session_id,
                    context.model_dump_json(),
                    context.last_activity.timestamp(),
                ),
            )
            await db.commit()

    async def _remove(self, session_id: str) -> None:
        db = await self._connection()
        with _wrap_io_errors(self.path):
            await db.execute("DELETE FROM ussd_sessions WHERE session_id = ?", (session_id,))
            await db.commit()

    async def _remove_idle_before(self, cutoff: datetime) -> int:
        db = await self._connection()
        with _wrap_io_errors(self.path):
            cursor = await db.execute(
                "DELETE FROM ussd_sessions WHERE last_activity < ?", (cutoff.timestamp(),)
            )
            await db.commit()
            return cursor.rowcount

    async def close(self) -> None:
        if self._db is not None:
            await self._db.close()
            self._db = None


@contextmanager
def _wrap_io_errors(path: Path) -> Iterator[None]:
    try:
        yield
    except (aiosqlite.Error, OSError) as e:
        raise StoreUnavailableError(f"Session store at {path} is unavailable: {e}") from e


def create_session_store(
    settings: GatewaySettings,
    clock: Clock = utcnow,
) -> SessionStore:
    """Create a session store for the configured backend.

    Args:
        settings: Gateway settings (timeout and persistence section)
        clock: Time source, injectable for tests

    Returns:
        SessionStore instance

    Raises:
        ConfigError: If the backend is unknown
    """
    backend = settings.persistence.backend
    timeout = settings.session_timeout_seconds

    if backend == "memory":
        logger.debug("Creating in-memory session store")
        return InMemorySessionStore(timeout_seconds=timeout, clock=clock)

    if backend == "sqlite":
        logger.info(f"Creating SQLite session store at {settings.persistence.path}")
        return SqliteSessionStore(settings.persistence.path, timeout_seconds=timeout, clock=clock)

    raise ConfigError(f"Unknown session store backend: {backend}")
