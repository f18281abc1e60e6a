from roomloop.core.config import settings
from roomloop.realtime.broadcaster import RoomBroadcaster
from roomloop.realtime.socket_server import create_socket_server

sio = create_socket_server(settings)

broadcaster = RoomBroadcaster(sio, scope=settings.broadcast_scope)


def get_broadcaster() -> RoomBroadcaster:
    """
    Process-wide broadcaster bound to the Socket.IO server.
    :return: RoomBroadcaster instance
    """
    return broadcaster
