from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from roomloop.core.database import Base


class User(Base):
    """User model"""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    username = Column(String(100), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    hosted_rooms = relationship("Room", back_populates="host", lazy="raise")
    room_participations = relationship("RoomParticipant", back_populates="user", lazy="raise")

    def __repr__(self):
        return f"<User (id={self.id}, username='{self.username}')>"
