"""Session contexts, their stores and expiry."""

from ussd_gateway.session.locks import SessionLockRegistry
from ussd_gateway.session.models import SessionContext, utcnow
from ussd_gateway.session.store import (
    InMemorySessionStore,
    SessionStore,
    SqliteSessionStore,
    create_session_store,
    new_session_id,
)
from ussd_gateway.session.sweeper import ExpirySweeper

__all__ = [
    "ExpirySweeper",
    "InMemorySessionStore",
    "SessionContext",
    "SessionLockRegistry",
    "SessionStore",
    "SqliteSessionStore",
    "create_session_store",
    "new_session_id",
    "utcnow",
]
