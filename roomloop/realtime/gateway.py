"""Socket.IO event handlers.

Clients may connect anonymously unless realtime_require_auth is set. When a
JWT is supplied (``auth: {token}`` or ``?token=``) the user it names is bound
to the socket session and used as the chat sender.
"""

from typing import Any
from urllib.parse import parse_qs

import socketio
import structlog
from pydantic import ValidationError

from roomloop.core.clock import Clock, utc_now
from roomloop.core.config import Settings
from roomloop.core.constants import (
    EVENT_CHAT_MESSAGE,
    EVENT_JOIN_ROOM,
    EVENT_LEAVE_ROOM,
)
from roomloop.core.exceptions import InvalidTokenException
from roomloop.core.jwt_utils import verify_token
from roomloop.realtime.broadcaster import RoomBroadcaster
from roomloop.realtime.socket_server import room_channel
from roomloop.schemas.realtime_schemas import ChatMessageIn

logger = structlog.get_logger(__name__)


def extract_token(environ: dict[str, Any], auth: Any | None) -> str | None:
    """Extract JWT from the Socket.IO auth payload or the handshake query string."""
    if isinstance(auth, dict):
        auth_token = auth.get("token")
        if isinstance(auth_token, str) and auth_token:
            return auth_token

    query_string: str | bytes = environ.get("QUERY_STRING", "") if isinstance(environ, dict) else ""
    if isinstance(query_string, (bytes, bytearray)):
        query_string = query_string.decode(errors="ignore")

    token = parse_qs(str(query_string)).get("token", [None])[0]
    if isinstance(token, str) and token:
        return token
    return None


class RealtimeGateway:
    """Binds RoomLoop event handlers to a Socket.IO server."""

    def __init__(
        self,
        sio: socketio.AsyncServer,
        broadcaster: RoomBroadcaster,
        config: Settings,
        clock: Clock = utc_now,
    ):
        self.sio = sio
        self.broadcaster = broadcaster
        self.config = config
        self.clock = clock

    def register(self) -> None:
        self.sio.on("connect", self.on_connect)
        self.sio.on("disconnect", self.on_disconnect)
        self.sio.on(EVENT_JOIN_ROOM, self.on_join_room)
        self.sio.on(EVENT_LEAVE_ROOM, self.on_leave_room)
        self.sio.on(EVENT_CHAT_MESSAGE, self.on_chat_message)

    async def on_connect(self, sid: str, environ: dict[str, Any], auth: Any | None = None) -> None:
        token = extract_token(environ, auth)
        identity: dict[str, Any] = {}

        if token:
            try:
                payload = verify_token(token, self.config)
                identity = {"user_id": payload.get("id"), "username": payload.get("username")}
            except InvalidTokenException as exc:
                if self.config.realtime_require_auth:
                    logger.info("socket_connect_refused", sid=sid, reason=exc.message)
                    raise ConnectionRefusedError("unauthorized") from exc
                logger.info("socket_token_ignored", sid=sid, reason=exc.message)
        elif self.config.realtime_require_auth:
            logger.info("socket_connect_refused", sid=sid, reason="missing token")
            raise ConnectionRefusedError("unauthorized")

        await self.sio.save_session(sid, identity)
        logger.info("socket_connected", sid=sid, username=identity.get("username"))

    async def on_disconnect(self, sid: str, *args: Any) -> None:
        logger.info("socket_disconnected", sid=sid)

    async def on_join_room(self, sid: str, room_id: Any) -> None:
        if room_id is None or str(room_id) == "":
            logger.warning("socket_join_room_missing_id", sid=sid)
            return
        await self.sio.enter_room(sid, room_channel(room_id))
        logger.info("socket_joined_channel", sid=sid, room_id=room_id)

    async def on_leave_room(self, sid: str, room_id: Any) -> None:
        if room_id is None or str(room_id) == "":
            return
        await self.sio.leave_room(sid, room_channel(room_id))
        logger.info("socket_left_channel", sid=sid, room_id=room_id)

    async def on_chat_message(self, sid: str, data: Any) -> None:
        try:
            message = ChatMessageIn.model_validate(data)
        except ValidationError as e:
            logger.warning("chat_message_rejected", sid=sid, reason="invalid payload", errors=e.error_count())
            return

        sender = await self._resolve_sender(sid, message)
        if sender is None:
            logger.warning("chat_message_rejected", sid=sid, room_id=message.room_id, reason="unauthenticated sender")
            return

        await self.broadcaster.publish_chat_message(
            room_id=message.room_id,
            sender_username=sender,
            content=message.content,
            timestamp=self.clock(),
        )

    async def _resolve_sender(self, sid: str, message: ChatMessageIn) -> str | None:
        """
        Sender for a chat message.

        The session-bound username wins. Anonymous sockets fall back to the
        client-asserted senderUsername only with realtime_trust_client_sender.
        """
        session = await self.sio.get_session(sid)
        bound_username = session.get("username") if isinstance(session, dict) else None

        if bound_username:
            return bound_username
        if self.config.realtime_trust_client_sender and message.sender_username:
            return message.sender_username
        return None
