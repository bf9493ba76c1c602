"""Recurring goal expiry.

Every interval, all goals with ``end <= now`` that are still active are
flipped to ``active = false`` in one bulk update. ``pass`` is never
touched. The first run happens as soon as the scheduler starts.

A failed run is logged and skipped; the next tick retries the same
predicate, so an expired goal stays eligible until some run succeeds.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Callable

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.goals.clock import utcnow
from app.goals.repository import GoalRepository

logger = logging.getLogger(__name__)


class GoalExpiryScheduler:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        interval_seconds: float = 3600.0,
        clock: Callable[[], datetime] = utcnow,
    ):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.session_factory = session_factory
        self.interval_seconds = interval_seconds
        self.clock = clock
        self._task: asyncio.Task[None] | None = None
        self._stopping = asyncio.Event()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> int:
        """Deactivate every expired active goal. Returns the number modified."""
        now = self.clock()
        async with self.session_factory() as session:
            modified = await GoalRepository(session).deactivate_expired(now)
        logger.info("Goal expiry run", extra={"modified": modified, "now": now.isoformat()})
        return modified

    async def _tick(self) -> None:
        try:
            await self.run_once()
        except Exception:
            # Any failure (store down, driver error) skips this run only.
            logger.exception("Goal expiry run failed; retrying next interval")

    async def _loop(self) -> None:
        while not self._stopping.is_set():
            await self._tick()
            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                pass

    def start(self) -> None:
        if self.running:
            return
        self._stopping = asyncio.Event()
        self._task = asyncio.create_task(self._loop(), name="goal-expiry")
        logger.info("Goal expiry scheduler started (every %ss)", self.interval_seconds)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._stopping.set()
        task, self._task = self._task, None
        try:
            await asyncio.wait_for(task, timeout=5)
        except asyncio.TimeoutError:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        logger.info("Goal expiry scheduler stopped")
