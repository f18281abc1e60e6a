import enum

from sqlalchemy import CheckConstraint, Column, DateTime, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from roomloop.core.database import Base


class RoomType(str, enum.Enum):
    """Room visibility"""

    PUBLIC = "public"
    PRIVATE = "private"


class RoomStatus(str, enum.Enum):
    """
    Room lifecycle state.

    Transitions only move forward: scheduled -> live -> closed.
    """

    SCHEDULED = "scheduled"
    LIVE = "live"
    CLOSED = "closed"

    @property
    def rank(self) -> int:
        return _STATUS_ORDER.index(self)


_STATUS_ORDER = [RoomStatus.SCHEDULED, RoomStatus.LIVE, RoomStatus.CLOSED]


def _enum_values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


class Room(Base):
    """Room model"""

    __tablename__ = "rooms"

    id = Column(Integer, primary_key=True)
    host_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String(100), nullable=False)
    topic = Column(String(100), nullable=True)
    description = Column(Text, nullable=True)
    type = Column(
        Enum(RoomType, name="room_type", values_callable=_enum_values),
        nullable=False,
        default=RoomType.PUBLIC,
    )
    max_participants = Column(Integer, nullable=True)

    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=False)

    access_code = Column(String(6), unique=True, nullable=True, index=True)
    status = Column(
        Enum(RoomStatus, name="room_status", values_callable=_enum_values),
        nullable=False,
        default=RoomStatus.SCHEDULED,
        index=True,
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    host = relationship("User", back_populates="hosted_rooms", lazy="raise")
    participants = relationship("RoomParticipant", back_populates="room", lazy="raise")

    __table_args__ = (
        CheckConstraint("start_time < end_time", name="room_window_ordered"),
        CheckConstraint(
            "max_participants IS NULL OR max_participants >= 1",
            name="room_capacity_positive",
        ),
    )

    def __repr__(self):
        return f"<Room(id={self.id}, name='{self.name}', status={self.status})>"
