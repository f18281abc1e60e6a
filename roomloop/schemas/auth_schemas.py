from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from roomloop.core.validators import Username


class UserRegister(BaseModel):
    """
    Schema for user registration.
    """

    email: EmailStr = Field(description="User email address")
    username: Username = Field(min_length=3, max_length=20, description="Username")
    password: str = Field(min_length=8, description="Password")


class UserLogin(BaseModel):
    """
    Schema for user login. Either email or username identifies the account.
    """

    email: EmailStr | None = Field(None, description="User email address")
    username: Username | None = Field(None, min_length=1, description="Username")
    password: str = Field(min_length=1, description="Password")

    @model_validator(mode="after")
    def require_identifier(self) -> "UserLogin":
        if not self.email and not self.username:
            raise ValueError("Email or username is required")
        return self


class UserResponse(BaseModel):
    """
    User data response.
    """

    id: int
    email: EmailStr
    username: str
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class AuthResponse(BaseModel):
    """
    Returned by register and login: the user and a bearer token.
    """

    user: UserResponse
    token: str = Field(description="JWT access token")


class UserEnvelope(BaseModel):
    user: UserResponse
