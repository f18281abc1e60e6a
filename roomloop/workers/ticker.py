"""In-process lifecycle loop for single-process deployments without an ARQ worker."""

import asyncio

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from roomloop.workers.tasks import run_lifecycle_tick

logger = structlog.get_logger(__name__)


class LifecycleTicker:
    """Runs a lifecycle tick every `interval_seconds` on the event loop."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], interval_seconds: float):
        self.session_factory = session_factory
        self.interval_seconds = interval_seconds
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="room-lifecycle-ticker")
        logger.info("lifecycle_ticker_started", interval_seconds=self.interval_seconds)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("lifecycle_ticker_stopped")

    async def _run(self) -> None:
        while True:
            try:
                await run_lifecycle_tick(self.session_factory)
            except Exception:
                # already logged by the lifecycle service; keep ticking
                logger.warning("lifecycle_tick_skipped")
            await asyncio.sleep(self.interval_seconds)
