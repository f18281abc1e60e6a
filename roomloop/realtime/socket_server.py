"""Socket.IO server shared by the API process.

The React frontend connects with the stock socket.io client, subscribes to a
room with `join_room`, and listens for `room:participant_updated` and
`chat:message_received`.
"""

from typing import Any

import socketio

from roomloop.core.config import Settings


def room_channel(room_id: int | str) -> str:
    """Socket.IO room name for a RoomLoop room."""
    return f"room:{room_id}"


def create_socket_server(config: Settings) -> socketio.AsyncServer:
    """
    Build the AsyncServer for this process.

    With realtime_redis_enabled, channel membership and emits go through
    Redis pub/sub so every API worker reaches every subscriber.
    """
    options: dict[str, Any] = {}
    if config.realtime_redis_enabled:
        options["client_manager"] = socketio.AsyncRedisManager(config.redis_url)

    cors_allowed_origins: str | list[str] = config.cors_origins
    if "*" in config.cors_origins:
        cors_allowed_origins = "*"

    return socketio.AsyncServer(
        async_mode="asgi",
        cors_allowed_origins=cors_allowed_origins,
        logger=False,
        engineio_logger=False,
        **options,
    )
