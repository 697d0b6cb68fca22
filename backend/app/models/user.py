"""
Notify Backend: User SQLAlchemy Model
======================================

What:  ORM model for the `users` table plus the `user_friends` edge table that
       stores each user's friend-set.
Who:   Used by AuthService, UserService, RelationshipManager and Alembic.

Table Design:
    - phone_number: unique login identifier
    - password_hash: bcrypt hash, never serialized by any response schema
    - image: optional data URI (opaque blob)

Friend-set:
    `user_friends` holds one row per direction of a friendship. The composite
    primary key (user_id, friend_id) gives the friend-set set semantics:
    inserting an existing edge is a no-op (ON CONFLICT DO NOTHING), never a
    duplicate.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, String, Table, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


user_friends = Table(
    "user_friends",
    Base.metadata,
    Column(
        "user_id",
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "friend_id",
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "created_at",
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    ),
)


class User(Base):
    """
    A registered account.

    Lifecycle:
        1. Created on registration
        2. Friend-set mutated when friendships are accepted or removed
        3. Never embeds friend request data (see FriendRequest)
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    phone_number: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        unique=True,
        index=True,
    )

    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    name: Mapped[str | None] = mapped_column(String(120), nullable=True)

    image: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, phone_number='{self.phone_number}')>"
