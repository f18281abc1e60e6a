"""
Domain exceptions.

Services raise these instead of HTTPException; main.py converts each family
to a JSON response with the matching status code.
"""


class DomainException(Exception):
    """Base class for all domain errors."""

    error_code = "DOMAIN_ERROR"

    def __init__(self, message: str, error_code: str | None = None):
        super().__init__(message)
        self.message = message
        if error_code is not None:
            self.error_code = error_code


class ValidationException(DomainException):
    """Malformed or missing input (400)."""

    error_code = "VALIDATION_ERROR"


class UnauthorizedException(DomainException):
    """Missing or invalid credentials (401)."""

    error_code = "UNAUTHORIZED"


class ForbiddenException(DomainException):
    """Authenticated but not allowed (403)."""

    error_code = "FORBIDDEN"


class InvalidTokenException(ForbiddenException):
    error_code = "INVALID_TOKEN"

    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message)


class NotFoundException(DomainException):
    """Resource not found (404)."""

    error_code = "NOT_FOUND"


class ConflictException(DomainException):
    """Duplicate resource or state conflict (409)."""

    error_code = "CONFLICT"


class UserNotFoundException(NotFoundException):
    error_code = "USER_NOT_FOUND"

    def __init__(self, message: str = "User not found"):
        super().__init__(message)


class RoomNotFoundException(NotFoundException):
    error_code = "ROOM_NOT_FOUND"

    def __init__(self, room_key: int | str):
        super().__init__(f"Room '{room_key}' not found")
        self.room_key = room_key


class NotAParticipantException(NotFoundException):
    error_code = "NOT_A_PARTICIPANT"

    def __init__(self, room_id: int):
        super().__init__(f"You are not an active participant of room {room_id}")
        self.room_id = room_id


class RoomNotJoinableException(ForbiddenException):
    error_code = "ROOM_NOT_JOINABLE"

    def __init__(self, room_name: str, status: str):
        super().__init__(f"Room '{room_name}' is {status} and cannot be joined")
        self.status = status


class DuplicateResourceException(ConflictException):
    error_code = "DUPLICATE_RESOURCE"

    def __init__(self, resource: str, value: str):
        super().__init__(f"{resource} '{value}' is already taken")


class RoomFullException(ConflictException):
    error_code = "ROOM_FULL"

    def __init__(self, room_name: str, max_participants: int):
        super().__init__(f"Room '{room_name}' is full (max {max_participants} participants)")


class AlreadyJoinedException(ConflictException):
    error_code = "ALREADY_JOINED"

    def __init__(self, room_name: str):
        super().__init__(f"You have already joined room '{room_name}'")
