"""Periodic resolution runner, owned by the FastAPI lifespan.

One asyncio task runs a sweep, sleeps RESOLUTION_INTERVAL_SECONDS, repeats.
A failed sweep is logged and the loop carries on. stop() cancels the task;
each sweep commits per market, so whatever was logged before the
cancellation stays logged.
"""

import asyncio
import contextlib
import logging
from collections.abc import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.dg_common.database import async_session_factory
from src.dg_resolution.application.service import ResolutionService

logger = logging.getLogger(__name__)


class ResolutionScheduler:
    def __init__(
        self,
        service_factory: Callable[[], ResolutionService] = ResolutionService,
        session_factory: Callable[[], AsyncSession] = async_session_factory,
        interval_seconds: float | None = None,
    ) -> None:
        self._service_factory = service_factory
        self._session_factory = session_factory
        self._interval = interval_seconds or settings.RESOLUTION_INTERVAL_SECONDS
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop(), name="resolution-scheduler")
        logger.info("Resolution scheduler started (every %ss)", self._interval)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("Resolution scheduler stopped")

    async def run_once(self) -> dict[str, int]:
        service = self._service_factory()
        async with self._session_factory() as db:
            result = await service.run_sweep(db)
        return result.counts()

    async def _loop(self) -> None:
        while True:
            try:
                await self.run_once()
            except Exception:
                logger.exception("Resolution sweep failed")
            await asyncio.sleep(self._interval)
