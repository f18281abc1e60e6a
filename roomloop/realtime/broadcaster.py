from datetime import datetime
from typing import Any, Literal

import socketio
import structlog

from roomloop.core.constants import EVENT_CHAT_MESSAGE_RECEIVED, EVENT_PARTICIPANT_UPDATED
from roomloop.realtime.socket_server import room_channel
from roomloop.schemas.realtime_schemas import ChatMessageOut, ParticipantUpdate
from roomloop.schemas.room_schemas import ParticipantResponse

logger = structlog.get_logger(__name__)

BroadcastScope = Literal["room", "global"]


class RoomBroadcaster:
    """
    Publishes membership and chat events to Socket.IO subscribers.

    Publishing is fire-and-forget: callers have already committed the state
    change, so an emit failure is logged and swallowed rather than surfaced.
    """

    def __init__(self, sio: socketio.AsyncServer, scope: BroadcastScope = "room"):
        self.sio = sio
        self.scope = scope

    async def publish_participant_update(
        self,
        room_id: int,
        user_id: int,
        username: str,
        action: Literal["joined", "left"],
        roster: list[ParticipantResponse],
    ) -> bool:
        """
        Emit `room:participant_updated` after a successful join or leave.
        :return: True if the emit was handed to the transport
        """
        payload = ParticipantUpdate(
            room_id=room_id,
            user_id=user_id,
            username=username,
            action=action,
            new_participant_count=len(roster),
            new_participant_list=roster,
        )
        return await self._publish(room_id, EVENT_PARTICIPANT_UPDATED, payload.model_dump(mode="json", by_alias=True))

    async def publish_chat_message(
        self,
        room_id: int,
        sender_username: str,
        content: str,
        timestamp: datetime,
    ) -> bool:
        """Emit `chat:message_received` to the room."""
        payload = ChatMessageOut(
            room_id=room_id,
            sender_username=sender_username,
            content=content,
            timestamp=timestamp,
        )
        return await self._publish(room_id, EVENT_CHAT_MESSAGE_RECEIVED, payload.model_dump(mode="json", by_alias=True))

    async def _publish(self, room_id: int, event: str, payload: dict[str, Any]) -> bool:
        try:
            if self.scope == "global":
                await self.sio.emit(event, payload)
            else:
                await self.sio.emit(event, payload, room=room_channel(room_id))
        except Exception as e:
            logger.exception("broadcast_failed", event=event, room_id=room_id, error=str(e))
            return False

        logger.debug("broadcast_sent", event=event, room_id=room_id, scope=self.scope)
        return True
