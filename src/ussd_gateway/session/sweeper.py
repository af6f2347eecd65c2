"""Background removal of idle sessions."""

import asyncio
import contextlib
import logging

from ussd_gateway.session.store import SessionStore

logger = logging.getLogger(__name__)


class ExpirySweeper:
    """Periodically calls ``store.sweep_expired()``.

    Sweeping is best-effort: expiry is also enforced on every read, so a
    failed sweep only delays reclaiming storage.
    """

    def __init__(self, store: SessionStore, interval_seconds: float) -> None:
        self.store = store
        self.interval_seconds = interval_seconds
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="ussd-session-sweeper")
        logger.debug(f"Session sweeper started (every {self.interval_seconds}s)")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.debug("Session sweeper stopped")

    async def sweep_once(self) -> int:
        try:
            return await self.store.sweep_expired()
        except Exception as e:
            logger.warning(f"Session sweep failed: {e}", exc_info=True)
            return 0

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            await self.sweep_once()
