from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from roomloop.core.database import Base


class RoomParticipant(Base):
    """
    Membership ledger row for a user in a room.

    Business Rules:
    - Active membership = row with left_at NULL
    - At most one active membership per (room, user), enforced by a partial unique index
    - Leaving sets left_at; rejoining inserts a new row
    """

    __tablename__ = "room_participants"

    id = Column(Integer, primary_key=True)
    room_id = Column(Integer, ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    joined_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    left_at = Column(DateTime(timezone=True), nullable=True)

    room = relationship("Room", back_populates="participants", lazy="raise")
    user = relationship("User", back_populates="room_participations", lazy="raise")

    __table_args__ = (
        Index(
            "uq_room_participant_active",
            "room_id",
            "user_id",
            unique=True,
            postgresql_where=text("left_at IS NULL"),
            sqlite_where=text("left_at IS NULL"),
        ),
        Index("idx_room_participants_active", "room_id", "left_at"),
        Index("idx_user_participation_history", "user_id", "joined_at"),
    )

    @property
    def is_active(self) -> bool:
        return self.left_at is None

    def __repr__(self):
        return f"<RoomParticipant(room={self.room_id}, user={self.user_id}, active={self.is_active})>"
