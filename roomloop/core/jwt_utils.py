from datetime import datetime, timedelta, timezone

import jwt

from roomloop.core.config import Settings, settings as default_settings
from roomloop.core.exceptions import InvalidTokenException


def create_access_token(
    data: dict,
    expires_delta: timedelta | None = None,
    config: Settings = default_settings,
) -> str:
    """
    Create JWT access token
    :param data: Claims to encode ({id, username, email})
    :param expires_delta: Token expiration time
    :param config: Settings holding secret and algorithm
    :return: JWT token string
    """
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=config.access_token_expire_minutes)

    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, config.secret_key, algorithm=config.algorithm)


def create_user_token(user, config: Settings = default_settings) -> str:
    """Issue the access token carried by a logged-in user."""
    return create_access_token(
        data={"id": user.id, "username": user.username, "email": user.email},
        config=config,
    )


def verify_token(token: str, config: Settings = default_settings) -> dict:
    """
    Verify and decode JWT token.
    :param token: JWT token string
    :return: Decoded payload
    """
    try:
        return jwt.decode(token, config.secret_key, algorithms=[config.algorithm])
    except jwt.ExpiredSignatureError:
        raise InvalidTokenException("Token has expired")
    except jwt.InvalidTokenError:
        raise InvalidTokenException()


def get_user_id_from_token(token: str, config: Settings = default_settings) -> int:
    """
    Extract user id from JWT token.
    :param token: JWT token string
    :return: User id claim
    """
    payload = verify_token(token, config)
    user_id = payload.get("id")

    if not isinstance(user_id, int):
        raise InvalidTokenException()

    return user_id
