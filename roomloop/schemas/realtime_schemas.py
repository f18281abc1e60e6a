from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from roomloop.core.constants import MAX_CHAT_MESSAGE_LENGTH
from roomloop.core.validators import SanitizedString
from roomloop.schemas.room_schemas import ParticipantResponse


class CamelModel(BaseModel):
    """Socket.IO payloads use camelCase keys on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ChatMessageIn(CamelModel):
    """
    Client -> server `chat:message` payload.
    """

    room_id: int
    content: SanitizedString = Field(min_length=1, max_length=MAX_CHAT_MESSAGE_LENGTH)
    sender_username: str | None = None


class ChatMessageOut(CamelModel):
    """
    Server -> subscribers `chat:message_received` payload.
    """

    room_id: int
    sender_username: str
    content: str
    timestamp: datetime


class ParticipantUpdate(CamelModel):
    """
    Server -> subscribers `room:participant_updated` payload.
    """

    room_id: int
    user_id: int
    username: str
    action: Literal["joined", "left"]
    new_participant_count: int
    new_participant_list: list[ParticipantResponse]
