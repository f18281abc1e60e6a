from abc import abstractmethod
from datetime import datetime

from sqlalchemy import and_, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from roomloop.models.room import Room, RoomStatus, RoomType
from roomloop.repositories.base_repository import BaseRepository


class IRoomRepository(BaseRepository[Room]):
    """Abstract interface for Room repository."""

    @abstractmethod
    async def get_by_access_code(self, access_code: str) -> Room | None:
        """Get room by its access code."""
        pass

    @abstractmethod
    async def get_by_id_for_update(self, room_id: int) -> Room | None:
        """Re-read room with a row lock held until commit/rollback."""
        pass

    @abstractmethod
    async def access_code_exists(self, access_code: str) -> bool:
        """Check if access code is already assigned."""
        pass

    @abstractmethod
    async def list_public(
        self,
        topic: str | None,
        include_live: bool,
        starting_between: tuple[datetime, datetime] | None,
    ) -> list[Room]:
        """List public rooms that are live and/or start inside a window."""
        pass

    @abstractmethod
    async def open_due_rooms(self, now: datetime) -> int:
        """Flip scheduled rooms whose start_time has passed to live."""
        pass

    @abstractmethod
    async def close_due_rooms(self, now: datetime) -> int:
        """Flip live rooms whose end_time has passed to closed."""
        pass


class RoomRepository(IRoomRepository):
    """SQLAlchemy implementation of Room repository."""

    def __init__(self, db: AsyncSession):
        """
        Initialize with database session.
        :param db: SQLAlchemy async database session
        """
        super().__init__(db)

    async def get_by_id(self, id: int) -> Room | None:
        """Get room by ID."""
        query = select(Room).where(Room.id == id)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_by_access_code(self, access_code: str) -> Room | None:
        """Get room by access code."""
        query = select(Room).where(Room.access_code == access_code)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_by_id_for_update(self, room_id: int) -> Room | None:
        """Re-read room with SELECT ... FOR UPDATE, refreshing the identity map."""
        query = (
            select(Room)
            .where(Room.id == room_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def access_code_exists(self, access_code: str) -> bool:
        """Check if access code is already assigned."""
        query = select(Room.id).where(Room.access_code == access_code)
        result = await self.db.execute(query)
        return result.first() is not None

    async def create(self, room: Room) -> Room:
        """Create new room."""
        self.db.add(room)
        await self.db.commit()
        await self.db.refresh(room)
        return room

    async def list_public(
        self,
        topic: str | None,
        include_live: bool,
        starting_between: tuple[datetime, datetime] | None,
    ) -> list[Room]:
        """List public rooms matching the status predicates, soonest first."""
        status_conditions = []
        if include_live:
            status_conditions.append(Room.status == RoomStatus.LIVE)
        if starting_between:
            window_start, window_end = starting_between
            status_conditions.append(
                and_(
                    Room.status == RoomStatus.SCHEDULED,
                    Room.start_time > window_start,
                    Room.start_time <= window_end,
                )
            )
        if not status_conditions:
            return []

        query = select(Room).where(Room.type == RoomType.PUBLIC, or_(*status_conditions))
        if topic:
            query = query.where(Room.topic.icontains(topic, autoescape=True))

        result = await self.db.execute(query.order_by(Room.start_time, Room.id))
        return list(result.scalars().all())

    async def open_due_rooms(self, now: datetime) -> int:
        """Set status=live where status=scheduled and start_time <= now."""
        statement = (
            update(Room)
            .where(Room.status == RoomStatus.SCHEDULED, Room.start_time <= now)
            .values(status=RoomStatus.LIVE)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(statement)
        return result.rowcount or 0

    async def close_due_rooms(self, now: datetime) -> int:
        """Set status=closed where status=live and end_time <= now."""
        statement = (
            update(Room)
            .where(Room.status == RoomStatus.LIVE, Room.end_time <= now)
            .values(status=RoomStatus.CLOSED)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(statement)
        return result.rowcount or 0
