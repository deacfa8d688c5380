"""
Periodic hard-delete of expired admin sessions.

Started and stopped explicitly from the application lifespan; never started
when the application runs in test mode.
"""

import asyncio
import logging
from typing import Callable, Optional

from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.session_registry import SessionRegistry

logger = logging.getLogger(__name__)


class SessionSweeper:
    def __init__(self, session_factory: Callable, interval_seconds: int):
        self.session_factory = session_factory
        self.interval_seconds = interval_seconds
        self._stop_event = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._task = asyncio.create_task(self._run(), name="admin-session-sweeper")
        logger.info("Session sweeper started (every %ss)", self.interval_seconds)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._stop_event.set()
        await self._task
        self._task = None
        logger.info("Session sweeper stopped")

    async def sweep_once(self) -> int:
        async with self.session_factory() as session:
            async with SqlAlchemyUnitOfWork(session) as uow:
                deleted = await SessionRegistry(uow).sweep_expired()
                await uow.commit()
        if deleted:
            logger.info("Removed %d expired admin sessions", deleted)
        return deleted

    async def _run(self) -> None:
        while not self._stop_event.is_set():
            try:
                await self.sweep_once()
            except Exception:
                # Keep the loop alive; the next tick retries
                logger.exception("Admin session sweep failed")
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                pass
