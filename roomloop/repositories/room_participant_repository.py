from abc import abstractmethod
from datetime import datetime

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from roomloop.models.room_participant import RoomParticipant
from roomloop.models.user import User
from roomloop.repositories.base_repository import BaseRepository


class IRoomParticipantRepository(BaseRepository[RoomParticipant]):
    """Abstract interface for the room membership ledger."""

    @abstractmethod
    async def count_active(self, room_id: int) -> int:
        """Count active memberships (left_at IS NULL) in a room."""
        pass

    @abstractmethod
    async def get_active(self, room_id: int, user_id: int) -> RoomParticipant | None:
        """Get the active membership of a user in a room."""
        pass

    @abstractmethod
    async def add(self, room_id: int, user_id: int, joined_at: datetime) -> RoomParticipant:
        """Insert an active membership. Flushes; caller commits."""
        pass

    @abstractmethod
    async def mark_left(self, participant: RoomParticipant, left_at: datetime) -> RoomParticipant:
        """Terminate a membership. Flushes; caller commits."""
        pass

    @abstractmethod
    async def get_roster(self, room_id: int) -> list[User]:
        """Get users holding an active membership in a room."""
        pass


class RoomParticipantRepository(IRoomParticipantRepository):
    """SQLAlchemy implementation of the membership ledger."""

    def __init__(self, db: AsyncSession):
        super().__init__(db)

    async def get_by_id(self, id: int) -> RoomParticipant | None:
        """Get membership row by ID."""
        query = select(RoomParticipant).where(RoomParticipant.id == id)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def create(self, participant: RoomParticipant) -> RoomParticipant:
        """Create membership row and commit."""
        self.db.add(participant)
        await self.db.commit()
        await self.db.refresh(participant)
        return participant

    async def count_active(self, room_id: int) -> int:
        """Count active memberships in room."""
        query = select(func.count(RoomParticipant.id)).where(
            and_(
                RoomParticipant.room_id == room_id,
                RoomParticipant.left_at.is_(None),
            )
        )
        result = await self.db.execute(query)
        return result.scalar() or 0

    async def get_active(self, room_id: int, user_id: int) -> RoomParticipant | None:
        """Get active membership for (room, user)."""
        query = select(RoomParticipant).where(
            and_(
                RoomParticipant.room_id == room_id,
                RoomParticipant.user_id == user_id,
                RoomParticipant.left_at.is_(None),
            )
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def add(self, room_id: int, user_id: int, joined_at: datetime) -> RoomParticipant:
        """Insert active membership."""
        participant = RoomParticipant(room_id=room_id, user_id=user_id, joined_at=joined_at)
        self.db.add(participant)
        await self.db.flush()
        return participant

    async def mark_left(self, participant: RoomParticipant, left_at: datetime) -> RoomParticipant:
        """Set left_at on membership."""
        participant.left_at = left_at
        await self.db.flush()
        return participant

    async def get_roster(self, room_id: int) -> list[User]:
        """Get active participants in join order."""
        query = (
            select(User)
            .join(
                RoomParticipant,
                and_(
                    RoomParticipant.user_id == User.id,
                    RoomParticipant.room_id == room_id,
                    RoomParticipant.left_at.is_(None),
                ),
            )
            .order_by(RoomParticipant.joined_at, RoomParticipant.id)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())
