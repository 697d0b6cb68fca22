import uuid
from datetime import datetime
from typing import Optional

from pydantic import Field

from app.models.user import User
from app.schemas.common import CamelModel


class UserSummary(CamelModel):
    """Compact user shape embedded in friend lists, requests, posts and comments."""

    id: uuid.UUID
    name: Optional[str] = None
    phone_number: str
    image: Optional[str] = None

    @classmethod
    def from_user(cls, user: User) -> "UserSummary":
        return cls(
            id=user.id,
            name=user.name,
            phone_number=user.phone_number,
            image=user.image,
        )


class UserResponse(UserSummary):
    """Full public profile. The password hash is never part of it."""

    created_at: datetime
    updated_at: datetime
    friends: list[uuid.UUID] = Field(default_factory=list)

    @classmethod
    def from_user(cls, user: User, friend_ids: Optional[list[uuid.UUID]] = None) -> "UserResponse":
        return cls(
            id=user.id,
            name=user.name,
            phone_number=user.phone_number,
            image=user.image,
            created_at=user.created_at,
            updated_at=user.updated_at,
            friends=friend_ids or [],
        )
