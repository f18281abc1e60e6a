import structlog
from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError

from roomloop.core.auth_utils import hash_password, verify_password
from roomloop.core.exceptions import DuplicateResourceException, UnauthorizedException
from roomloop.core.jwt_utils import create_user_token
from roomloop.models.user import User
from roomloop.repositories.repository_dependencies import get_user_repository
from roomloop.repositories.user_repository import IUserRepository
from roomloop.schemas.auth_schemas import AuthResponse, UserLogin, UserRegister, UserResponse

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register_user(user_data: UserRegister, user_repo: IUserRepository = Depends(get_user_repository)):
    """
    Register a new user and log them in.
    :param user_data: New user data
    :param user_repo: User Repository instance
    :return: Created user and access token
    """
    if await user_repo.email_exists(user_data.email):
        raise DuplicateResourceException("Email", user_data.email)

    if await user_repo.username_exists(user_data.username):
        raise DuplicateResourceException("Username", user_data.username)

    new_user = User(
        email=user_data.email,
        username=user_data.username,
        password_hash=hash_password(user_data.password),
    )

    try:
        created_user = await user_repo.create(new_user)
    except IntegrityError:
        # concurrent registration with the same email or username
        await user_repo.rollback()
        raise DuplicateResourceException("Email or username", user_data.username)

    logger.info("user_registered", user_id=created_user.id, username=created_user.username)
    return AuthResponse(user=UserResponse.model_validate(created_user), token=create_user_token(created_user))


@router.post("/login", response_model=AuthResponse)
async def login_user(user_credentials: UserLogin, user_repo: IUserRepository = Depends(get_user_repository)):
    """
    Login with email or username and password.
    :param user_credentials: User login credentials
    :param user_repo: User Repository instance
    :return: User and access token
    """
    user = await user_repo.get_by_login(user_credentials.email, user_credentials.username)

    if not user or not verify_password(user_credentials.password, user.password_hash):
        logger.info("login_failed", email=user_credentials.email, username=user_credentials.username)
        raise UnauthorizedException("Invalid credentials")

    return AuthResponse(user=UserResponse.model_validate(user), token=create_user_token(user))
