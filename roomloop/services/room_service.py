import secrets
from dataclasses import dataclass, field
from datetime import timedelta

import structlog
from sqlalchemy.exc import IntegrityError

from roomloop.core.clock import Clock, as_utc, utc_now
from roomloop.core.config import Settings, settings as default_settings
from roomloop.core.constants import ACCESS_CODE_ALPHABET, ACCESS_CODE_LENGTH, ACCESS_CODE_MAX_ATTEMPTS
from roomloop.core.exceptions import (
    AlreadyJoinedException,
    ConflictException,
    NotAParticipantException,
    RoomFullException,
    RoomNotFoundException,
    RoomNotJoinableException,
    ValidationException,
)
from roomloop.core.validators import normalize_access_code
from roomloop.models.room import Room, RoomStatus, RoomType
from roomloop.models.user import User
from roomloop.realtime.broadcaster import RoomBroadcaster
from roomloop.repositories.room_participant_repository import IRoomParticipantRepository
from roomloop.repositories.room_repository import IRoomRepository
from roomloop.schemas.room_schemas import ParticipantResponse, PublicRoomFilter, RoomCreate
from roomloop.services.room_lifecycle import resolve_status

logger = structlog.get_logger(__name__)


@dataclass
class MembershipResult:
    """Room roster after a membership change or lookup."""

    room_id: int
    roster: list[ParticipantResponse] = field(default_factory=list)
    room: Room | None = None

    @property
    def count(self) -> int:
        return len(self.roster)


def generate_access_code(length: int = ACCESS_CODE_LENGTH) -> str:
    """Random uppercase alphanumeric access code."""
    return "".join(secrets.choice(ACCESS_CODE_ALPHABET) for _ in range(length))


class RoomService:
    """Room creation, discovery and the membership ledger."""

    def __init__(
        self,
        room_repo: IRoomRepository,
        participant_repo: IRoomParticipantRepository,
        broadcaster: RoomBroadcaster,
        config: Settings = default_settings,
        clock: Clock = utc_now,
    ):
        self.room_repo = room_repo
        self.participant_repo = participant_repo
        self.broadcaster = broadcaster
        self.config = config
        self.clock = clock

    async def create_room(self, host: User, data: RoomCreate) -> Room:
        """
        Create a room hosted by `host`.
        :param host: Authenticated user creating the room
        :param data: Validated room payload
        :return: Created room
        """
        now = self.clock()
        start_time = as_utc(data.start_time)
        end_time = as_utc(data.end_time)

        if start_time < now:
            raise ValidationException("Start time cannot be in the past")
        if end_time <= start_time:
            raise ValidationException("End time must be after start time")

        host_id = host.id
        needs_code = data.type == RoomType.PRIVATE or self.config.assign_access_code_to_public_rooms

        for attempt in range(1, ACCESS_CODE_MAX_ATTEMPTS + 1):
            access_code = await self._generate_unique_access_code() if needs_code else None
            room = Room(
                host_id=host_id,
                name=data.name,
                topic=data.topic or None,
                description=data.description or None,
                type=data.type,
                max_participants=data.max_participants,
                start_time=start_time,
                end_time=end_time,
                access_code=access_code,
                status=resolve_status(now, start_time, end_time),
            )
            try:
                room = await self.room_repo.create(room)
            except IntegrityError:
                await self.room_repo.rollback()
                if access_code is None:
                    raise
                # Another insert claimed the code between the check and the commit.
                logger.warning("access_code_collision", attempt=attempt)
                continue

            logger.info("room_created", room_id=room.id, host_id=host_id, type=data.type.value, status=room.status.value)
            return room

        logger.error("access_code_exhausted", attempts=ACCESS_CODE_MAX_ATTEMPTS)
        raise ConflictException("Could not allocate a unique access code, please retry")

    async def get_room(self, room_key: str | int) -> MembershipResult:
        """
        Room with its roster, looked up by access code or id.
        :param room_key: Access code or numeric id
        :return: Room and active roster
        """
        room = await self._resolve_room(room_key)
        roster = await self._build_roster(room.id)
        return MembershipResult(room_id=room.id, roster=roster, room=room)

    async def join_room(self, user: User, room_key: str | int) -> MembershipResult:
        """
        Admit `user` to a live room with free capacity.

        The room row stays locked from the status check to the insert, so two
        concurrent joins for the last seat cannot both pass the capacity check.
        :param user: User joining
        :param room_key: Access code or numeric id
        :return: Room and roster after the join
        """
        room = await self._resolve_room(room_key)
        room_name = room.name

        try:
            locked_room = await self.room_repo.get_by_id_for_update(room.id)
            if locked_room is None:
                raise RoomNotFoundException(room_key)
            room = locked_room

            if room.status != RoomStatus.LIVE:
                raise RoomNotJoinableException(room.name, room.status.value)

            if room.max_participants is not None:
                active_count = await self.participant_repo.count_active(room.id)
                if active_count >= room.max_participants:
                    raise RoomFullException(room.name, room.max_participants)

            if await self.participant_repo.get_active(room.id, user.id):
                raise AlreadyJoinedException(room.name)

            await self.participant_repo.add(room.id, user.id, joined_at=self.clock())
            await self.participant_repo.commit()
        except IntegrityError:
            await self.participant_repo.rollback()
            raise AlreadyJoinedException(room_name)
        except Exception:
            await self.participant_repo.rollback()
            raise

        roster = await self._build_roster(room.id)
        logger.info("room_joined", room_id=room.id, user_id=user.id, participant_count=len(roster))

        await self.broadcaster.publish_participant_update(
            room_id=room.id,
            user_id=user.id,
            username=user.username,
            action="joined",
            roster=roster,
        )
        return MembershipResult(room_id=room.id, roster=roster, room=room)

    async def leave_room(self, user: User, room_id: int) -> MembershipResult:
        """
        End the active membership of `user` in a room.
        :param user: User leaving
        :param room_id: Room ID
        :return: Roster after leaving
        """
        participant = await self.participant_repo.get_active(room_id, user.id)
        if participant is None:
            raise NotAParticipantException(room_id)

        try:
            await self.participant_repo.mark_left(participant, left_at=self.clock())
            await self.participant_repo.commit()
        except Exception:
            await self.participant_repo.rollback()
            raise

        roster = await self._build_roster(room_id)
        logger.info("room_left", room_id=room_id, user_id=user.id, participant_count=len(roster))

        await self.broadcaster.publish_participant_update(
            room_id=room_id,
            user_id=user.id,
            username=user.username,
            action="left",
            roster=roster,
        )
        return MembershipResult(room_id=room_id, roster=roster)

    async def list_roster(self, room_id: int) -> list[ParticipantResponse]:
        """
        Active participants of a room.
        :param room_id: Room ID
        :return: Roster entries (user_id, username)
        """
        if await self.room_repo.get_by_id(room_id) is None:
            raise RoomNotFoundException(room_id)
        return await self._build_roster(room_id)

    async def list_public_rooms(
        self,
        tag: str | None = None,
        status_filter: PublicRoomFilter | None = None,
    ) -> list[Room]:
        """
        Public rooms by status and optional topic substring.

        live: currently live. starting_soon: scheduled to start within the
        configured window. all: both. Defaults to live.
        :param tag: Case-insensitive topic substring
        :param status_filter: Status predicate
        :return: Matching rooms, soonest first
        """
        status_filter = status_filter or PublicRoomFilter.LIVE
        now = self.clock()

        include_live = status_filter in (PublicRoomFilter.LIVE, PublicRoomFilter.ALL)
        starting_between = None
        if status_filter in (PublicRoomFilter.STARTING_SOON, PublicRoomFilter.ALL):
            starting_between = (now, now + timedelta(minutes=self.config.starting_soon_window_minutes))

        topic = tag.strip() if tag else None
        return await self.room_repo.list_public(
            topic=topic or None,
            include_live=include_live,
            starting_between=starting_between,
        )

    async def _build_roster(self, room_id: int) -> list[ParticipantResponse]:
        users = await self.participant_repo.get_roster(room_id)
        return [ParticipantResponse(user_id=u.id, username=u.username) for u in users]

    async def _resolve_room(self, room_key: str | int) -> Room:
        """Find room by access code first, then by numeric id, or raise 404."""
        key = str(room_key).strip()

        room = await self.room_repo.get_by_access_code(normalize_access_code(key))
        if room is None and key.isdigit():
            room = await self.room_repo.get_by_id(int(key))
        if room is None:
            raise RoomNotFoundException(room_key)
        return room

    async def _generate_unique_access_code(self) -> str:
        for _ in range(ACCESS_CODE_MAX_ATTEMPTS):
            code = generate_access_code()
            if not await self.room_repo.access_code_exists(code):
                return code

        logger.error("access_code_exhausted", attempts=ACCESS_CODE_MAX_ATTEMPTS)
        raise ConflictException("Could not allocate a unique access code, please retry")
