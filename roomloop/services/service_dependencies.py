from fastapi import Depends

from roomloop.core.config import settings
from roomloop.realtime.broadcaster import RoomBroadcaster
from roomloop.realtime.realtime_dependencies import get_broadcaster
from roomloop.repositories.repository_dependencies import (
    get_room_participant_repository,
    get_room_repository,
)
from roomloop.repositories.room_participant_repository import IRoomParticipantRepository
from roomloop.repositories.room_repository import IRoomRepository
from roomloop.services.room_service import RoomService


def get_room_service(
    room_repo: IRoomRepository = Depends(get_room_repository),
    participant_repo: IRoomParticipantRepository = Depends(get_room_participant_repository),
    broadcaster: RoomBroadcaster = Depends(get_broadcaster),
) -> RoomService:
    """
    Create RoomService instance with repository dependencies.
    :param room_repo: Room repository instance
    :param participant_repo: RoomParticipant repository instance
    :param broadcaster: Realtime broadcaster
    :return: RoomService instance
    """
    return RoomService(
        room_repo=room_repo,
        participant_repo=participant_repo,
        broadcaster=broadcaster,
        config=settings,
    )
