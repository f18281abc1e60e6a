import enum
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from roomloop.core.constants import (
    MAX_ROOM_DESCRIPTION_LENGTH,
    MAX_ROOM_NAME_LENGTH,
    MAX_ROOM_TOPIC_LENGTH,
)
from roomloop.core.validators import SanitizedOptionalString, SanitizedString
from roomloop.models.room import RoomStatus, RoomType


class PublicRoomFilter(str, enum.Enum):
    """Status filter accepted by public room discovery."""

    LIVE = "live"
    STARTING_SOON = "starting_soon"
    ALL = "all"


class RoomCreate(BaseModel):
    """
    Schema for creating a new room.
    Input validation for POST requests; time-window checks happen in RoomService.
    """

    name: SanitizedString = Field(min_length=1, max_length=MAX_ROOM_NAME_LENGTH)
    type: RoomType = Field(description="'public' or 'private'")
    start_time: datetime = Field(alias="startTime")
    end_time: datetime = Field(alias="endTime")
    topic: SanitizedOptionalString = Field(None, max_length=MAX_ROOM_TOPIC_LENGTH)
    description: SanitizedOptionalString = Field(None, max_length=MAX_ROOM_DESCRIPTION_LENGTH)
    max_participants: int | None = Field(None, ge=1)

    model_config = ConfigDict(populate_by_name=True)


class RoomResponse(BaseModel):
    """
    Schema for room responses.
    """

    id: int
    host_id: int
    name: str
    topic: str | None = None
    description: str | None = None
    type: RoomType
    max_participants: int | None = None
    start_time: datetime
    end_time: datetime
    access_code: str | None = None
    status: RoomStatus
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class RoomEnvelope(BaseModel):
    room: RoomResponse


class ParticipantResponse(BaseModel):
    """
    Active participant of a room.
    """

    user_id: int
    username: str


class RoomDetailResponse(RoomResponse):
    """
    Room with its current roster.
    """

    participants: list[ParticipantResponse] = Field(default_factory=list)
    current_participants: int = Field(0, description="Active participant count")


class RoomDetailEnvelope(BaseModel):
    room: RoomDetailResponse


class RoomJoinResponse(BaseModel):
    """
    Response when user joins room.
    """

    message: str = Field(description="Success message")
    room: RoomDetailResponse


class RoomLeaveResponse(BaseModel):
    """
    Response when user leaves room.
    """

    message: str = Field(description="Success message")
    room_id: int = Field(description="ID of left room")
    current_participants: int = Field(description="Active participants after leaving")


class RoomParticipantsResponse(BaseModel):
    """
    Active roster of a room.
    """

    room_id: int
    participants: list[ParticipantResponse]
    count: int
