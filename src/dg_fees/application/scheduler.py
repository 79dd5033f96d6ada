"""Periodic creation fee refresh, owned by the FastAPI lifespan.

Same shape as the resolution scheduler: one task, run, sleep, repeat.
A failed run (price feed down, ledger error) is logged and retried on
the next tick.
"""

import asyncio
import contextlib
import logging
from collections.abc import Callable

from config.settings import settings
from src.dg_fees.application.service import FeeUpdaterService
from src.dg_fees.domain.models import FeeUpdateResult

logger = logging.getLogger(__name__)


class FeeUpdateScheduler:
    def __init__(
        self,
        service_factory: Callable[[], FeeUpdaterService] = FeeUpdaterService,
        interval_seconds: float | None = None,
    ) -> None:
        self._service_factory = service_factory
        self._interval = interval_seconds or settings.FEE_UPDATE_INTERVAL_SECONDS
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop(), name="fee-update-scheduler")
        logger.info("Fee update scheduler started (every %ss)", self._interval)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("Fee update scheduler stopped")

    async def run_once(self) -> FeeUpdateResult:
        return await self._service_factory().update_creation_fee()

    async def _loop(self) -> None:
        while True:
            try:
                await self.run_once()
            except Exception:
                logger.exception("Creation fee update failed")
            await asyncio.sleep(self._interval)
