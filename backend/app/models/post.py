"""
Notify Backend: Post and Comment SQLAlchemy Models
===================================================

What:  ORM models for `posts`, `comments` and the `post_likes` edge table.

Likes are a duplicate-free set of user ids per post (composite primary key on
`post_likes`). Comments belong to exactly one post and are deleted with it.
"""

import uuid
from datetime import datetime
from typing import List

from sqlalchemy import Column, DateTime, ForeignKey, Index, Table, Text, Uuid
from sqlalchemy import text as sql_text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base
from app.models.user import User, utcnow

post_likes = Table(
    "post_likes",
    Base.metadata,
    Column("post_id", Uuid, ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column(
        "created_at",
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=sql_text("CURRENT_TIMESTAMP"),
    ),
)


class Comment(Base):
    __tablename__ = "comments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    post_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    text: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=sql_text("CURRENT_TIMESTAMP"),
    )

    author: Mapped[User] = relationship(lazy="selectin")


class Post(Base):
    """
    A user's post: a description and an inline image.

    Query Patterns:
        - Feed: ORDER BY created_at DESC LIMIT/OFFSET (idx_posts_created_at)
        - Per-user feed: WHERE user_id = :id ORDER BY created_at DESC
    """

    __tablename__ = "posts"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    description: Mapped[str] = mapped_column(Text, nullable=False)

    # data:<mime>;base64,<payload>
    image: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=sql_text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=sql_text("CURRENT_TIMESTAMP"),
    )

    author: Mapped[User] = relationship(lazy="selectin")
    likers: Mapped[List[User]] = relationship(secondary=post_likes, lazy="selectin")
    comments: Mapped[List[Comment]] = relationship(
        lazy="selectin",
        order_by=Comment.created_at,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("idx_posts_created_at", "created_at"),
        Index("idx_posts_user_created_at", "user_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Post(id={self.id}, user_id={self.user_id})>"
