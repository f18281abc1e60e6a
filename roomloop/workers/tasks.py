"""ARQ task functions for the room lifecycle."""

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from roomloop.core.clock import utc_now
from roomloop.repositories.room_repository import RoomRepository
from roomloop.services.room_lifecycle import LifecycleTick, RoomLifecycleService

logger = structlog.get_logger(__name__)


async def run_lifecycle_tick(session_factory: async_sessionmaker[AsyncSession]) -> LifecycleTick:
    """
    Advance room statuses once in a fresh session.
    :param session_factory: Session maker bound to the application engine
    :return: Counts of rooms opened and closed
    """
    async with session_factory() as session:
        service = RoomLifecycleService(room_repo=RoomRepository(session))
        return await service.advance(utc_now())


async def advance_room_lifecycle(ctx: dict) -> dict:
    """
    ARQ cron task: open due scheduled rooms and close due live rooms.

    Failures are logged and reported in the job result; the next run retries
    naturally since every tick re-derives status from the clock.

    Args:
        ctx: ARQ context holding "session_factory"

    Returns:
        Dict with opened/closed counts, or error on failure
    """
    session_factory: async_sessionmaker[AsyncSession] = ctx["session_factory"]

    try:
        tick = await run_lifecycle_tick(session_factory)
    except Exception as e:
        logger.exception("lifecycle_task_failed", error=str(e))
        return {"error": str(e)}

    return {
        "opened": tick.opened,
        "closed": tick.closed,
        "evaluated_at": tick.evaluated_at.isoformat(),
    }
