import structlog
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from roomloop.core.exceptions import UnauthorizedException, UserNotFoundException
from roomloop.core.jwt_utils import get_user_id_from_token
from roomloop.models.user import User
from roomloop.repositories.repository_dependencies import get_user_repository
from roomloop.repositories.user_repository import IUserRepository

logger = structlog.get_logger(__name__)

security = HTTPBearer(auto_error=False)


def get_token(credentials: HTTPAuthorizationCredentials | None = Depends(security)) -> str:
    """
    Extract JWT token from the Authorization header.
    :param credentials: HTTP bearer credentials, None when the header is absent
    :return: JWT token string
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedException("Authentication required")
    return credentials.credentials


async def get_current_user(
    token: str = Depends(get_token),
    user_repo: IUserRepository = Depends(get_user_repository),
) -> User:
    """
    Get current authenticated user from JWT token.

    Invalid or expired tokens raise InvalidTokenException (403); a valid token
    whose user no longer exists raises UserNotFoundException (404).
    :param token: JWT token string
    :param user_repo: User repository instance
    :return: Current user object
    """
    user_id = get_user_id_from_token(token)

    user = await user_repo.get_by_id(user_id)
    if not user:
        logger.info("token_user_missing", user_id=user_id)
        raise UserNotFoundException()

    return user
