from abc import abstractmethod

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from roomloop.models.user import User
from .base_repository import BaseRepository


class IUserRepository(BaseRepository[User]):
    """Abstract interface for User repository."""

    @abstractmethod
    async def get_by_email(self, email: str) -> User | None:
        """Get user by email address."""
        pass

    @abstractmethod
    async def get_by_username(self, username: str) -> User | None:
        """Get user by username."""
        pass

    @abstractmethod
    async def get_by_login(self, email: str | None, username: str | None) -> User | None:
        """Get user by email or username, whichever was supplied."""
        pass

    @abstractmethod
    async def email_exists(self, email: str) -> bool:
        """Check if email already exists."""
        pass

    @abstractmethod
    async def username_exists(self, username: str) -> bool:
        """Check if username already exists."""
        pass


class UserRepository(IUserRepository):
    """SQLAlchemy implementation of User repository."""

    def __init__(self, db: AsyncSession):
        super().__init__(db)

    async def get_by_id(self, id: int) -> User | None:
        """Get user by ID."""
        query = select(User).where(User.id == id)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> User | None:
        """Get user by email address."""
        query = select(User).where(User.email == email)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_by_username(self, username: str) -> User | None:
        """Get user by username."""
        query = select(User).where(User.username == username)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_by_login(self, email: str | None, username: str | None) -> User | None:
        """Get user by email, or by username when no email is given."""
        if email:
            return await self.get_by_email(email)
        if username:
            return await self.get_by_username(username)
        return None

    async def create(self, user: User) -> User:
        """Create new user."""
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)
        return user

    async def email_exists(self, email: str) -> bool:
        """Check if email already exists."""
        return await self.get_by_email(email) is not None

    async def username_exists(self, username: str) -> bool:
        """Check if username already exists."""
        return await self.get_by_username(username) is not None
