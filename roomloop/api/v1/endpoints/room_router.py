from fastapi import APIRouter, Depends, Query, status

from roomloop.core.auth_dependencies import get_current_user
from roomloop.models.user import User
from roomloop.schemas.room_schemas import (
    PublicRoomFilter,
    RoomCreate,
    RoomDetailEnvelope,
    RoomDetailResponse,
    RoomEnvelope,
    RoomJoinResponse,
    RoomLeaveResponse,
    RoomParticipantsResponse,
    RoomResponse,
)
from roomloop.services.room_service import MembershipResult, RoomService
from roomloop.services.service_dependencies import get_room_service

router = APIRouter(prefix="/rooms", tags=["rooms"])


def _room_detail(result: MembershipResult) -> RoomDetailResponse:
    room = RoomResponse.model_validate(result.room)
    return RoomDetailResponse(
        **room.model_dump(),
        participants=result.roster,
        current_participants=result.count,
    )


@router.post("", response_model=RoomEnvelope, status_code=status.HTTP_201_CREATED)
async def create_room(
    room_data: RoomCreate,
    current_user: User = Depends(get_current_user),
    room_service: RoomService = Depends(get_room_service),
) -> RoomEnvelope:
    """
    Create a new room hosted by the current user.
    :param room_data: Room creation data
    :param current_user: Current authenticated user
    :param room_service: Service instance handling room logic
    :return: Created room
    """
    room = await room_service.create_room(current_user, room_data)
    return RoomEnvelope(room=RoomResponse.model_validate(room))


@router.get("/public", response_model=list[RoomResponse])
async def list_public_rooms(
    tag: str | None = Query(None, description="Case-insensitive topic substring"),
    status_filter: PublicRoomFilter | None = Query(None, alias="status", description="live, starting_soon or all"),
    current_user: User = Depends(get_current_user),
    room_service: RoomService = Depends(get_room_service),
) -> list[RoomResponse]:
    """
    Discover public rooms.
    :param tag: Topic filter
    :param status_filter: Status filter, defaults to live
    :param current_user: Current authenticated user
    :param room_service: Service instance handling room logic
    :return: Matching public rooms
    """
    rooms = await room_service.list_public_rooms(tag=tag, status_filter=status_filter)
    return [RoomResponse.model_validate(room) for room in rooms]


@router.get("/{room_id}/participants", response_model=RoomParticipantsResponse)
async def get_room_participants(
    room_id: int,
    current_user: User = Depends(get_current_user),
    room_service: RoomService = Depends(get_room_service),
) -> RoomParticipantsResponse:
    """
    Get active participants of a room.
    :param room_id: ID of room
    :param current_user: Current authenticated user
    :param room_service: Service instance handling room logic
    :return: Roster with count
    """
    roster = await room_service.list_roster(room_id)
    return RoomParticipantsResponse(room_id=room_id, participants=roster, count=len(roster))


@router.get("/{room_key}", response_model=RoomDetailEnvelope)
async def get_room(
    room_key: str,
    current_user: User = Depends(get_current_user),
    room_service: RoomService = Depends(get_room_service),
) -> RoomDetailEnvelope:
    """
    Get a room by access code or ID, with its roster.
    :param room_key: Access code or numeric ID
    :param current_user: Current authenticated user
    :param room_service: Service instance handling room logic
    :return: Room detail
    """
    result = await room_service.get_room(room_key)
    return RoomDetailEnvelope(room=_room_detail(result))


@router.post("/{access_code}/join", response_model=RoomJoinResponse)
async def join_room(
    access_code: str,
    current_user: User = Depends(get_current_user),
    room_service: RoomService = Depends(get_room_service),
) -> RoomJoinResponse:
    """
    User joins room.
    :param access_code: Access code (or ID) of room to join
    :param current_user: Current authenticated user
    :param room_service: Service instance handling room logic
    :return: Join confirmation with room and roster
    """
    result = await room_service.join_room(current_user, access_code)
    return RoomJoinResponse(
        message=f"Successfully joined room '{result.room.name}'",
        room=_room_detail(result),
    )


@router.post("/{room_id}/leave", response_model=RoomLeaveResponse)
async def leave_room(
    room_id: int,
    current_user: User = Depends(get_current_user),
    room_service: RoomService = Depends(get_room_service),
) -> RoomLeaveResponse:
    """
    User leaves room.
    :param room_id: ID of room to leave
    :param current_user: Current authenticated user
    :param room_service: Service instance handling room logic
    :return: Leave confirmation with remaining participant count
    """
    result = await room_service.leave_room(current_user, room_id)
    return RoomLeaveResponse(
        message="Successfully left room",
        room_id=result.room_id,
        current_participants=result.count,
    )
