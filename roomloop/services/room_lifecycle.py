"""
Room lifecycle engine.

Keeps rooms.status consistent with wall-clock time. The status of a room is
derived from (now, start_time, end_time) but never moves backwards, so a
closed room stays closed even if the clock is skewed.
"""

from dataclasses import dataclass
from datetime import datetime

import structlog

from roomloop.core.clock import as_utc
from roomloop.models.room import RoomStatus
from roomloop.repositories.room_repository import IRoomRepository

logger = structlog.get_logger(__name__)


def derive_status(now: datetime, start_time: datetime, end_time: datetime) -> RoomStatus:
    """Status a room should have at `now`, ignoring its history."""
    now, start_time, end_time = as_utc(now), as_utc(start_time), as_utc(end_time)
    if now >= end_time:
        return RoomStatus.CLOSED
    if now >= start_time:
        return RoomStatus.LIVE
    return RoomStatus.SCHEDULED


def resolve_status(
    now: datetime,
    start_time: datetime,
    end_time: datetime,
    current_status: RoomStatus | None = None,
) -> RoomStatus:
    """
    Next status for a room: the later of its current and derived status.
    :param now: Evaluation time
    :param start_time: Room window start
    :param end_time: Room window end
    :param current_status: Status currently stored, None for a new room
    :return: Resolved status, never earlier than current_status
    """
    derived = derive_status(now, start_time, end_time)
    if current_status is None or derived.rank >= current_status.rank:
        return derived
    return current_status


@dataclass(frozen=True)
class LifecycleTick:
    """Outcome of one advance() pass."""

    evaluated_at: datetime
    opened: int
    closed: int


class RoomLifecycleService:
    """Applies resolve_status to every room in the store, set-wise."""

    def __init__(self, room_repo: IRoomRepository):
        self.room_repo = room_repo

    async def advance(self, now: datetime) -> LifecycleTick:
        """
        Open due scheduled rooms, then close due live rooms, in one transaction.

        Both updates are guarded on the current status, so re-running with the
        same `now` is a no-op. Opening first lets a room whose whole window fits
        inside one tick reach closed in that tick.
        :param now: Evaluation time
        :return: Counts of rooms opened and closed
        """
        now = as_utc(now)
        try:
            opened = await self.room_repo.open_due_rooms(now)
            closed = await self.room_repo.close_due_rooms(now)
            await self.room_repo.commit()
        except Exception:
            await self.room_repo.rollback()
            logger.exception("room_lifecycle_tick_failed", evaluated_at=now.isoformat())
            raise

        if opened or closed:
            logger.info("room_lifecycle_advanced", opened=opened, closed=closed, evaluated_at=now.isoformat())
        else:
            logger.debug("room_lifecycle_idle", evaluated_at=now.isoformat())

        return LifecycleTick(evaluated_at=now, opened=opened, closed=closed)
