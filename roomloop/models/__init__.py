from roomloop.core.database import Base
from .user import User
from .room import Room, RoomStatus, RoomType
from .room_participant import RoomParticipant

__all__ = [
    "Base",
    "User",
    "Room",
    "RoomParticipant",
    "RoomStatus",
    "RoomType",
]
