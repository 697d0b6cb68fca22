"""
Notify Backend: FriendRequest SQLAlchemy Model
===============================================

What:  ORM model for the `friend_requests` table.

State machine:
    pending → accepted | rejected
    Both outcomes are terminal; nothing re-enters `pending`.

Pair uniqueness:
    A request from A to B and one from B to A occupy the same slot.
    `pair_low`/`pair_high` hold the two user ids in canonical (sorted) order,
    and the unique constraint on them makes the storage layer reject a second
    record for the same unordered pair, even when two inserts race. Check
    constraints tie the pair columns to `from_user_id`/`to_user_id` and fix
    their order, so a hand-built row cannot dodge the unique constraint.
"""

import enum
import uuid
from datetime import datetime
from typing import Tuple

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base
from app.models.user import User, utcnow


class FriendRequestStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


def canonical_pair(a: uuid.UUID, b: uuid.UUID) -> Tuple[uuid.UUID, uuid.UUID]:
    """Returns the two ids in the order used by the pair unique constraint."""
    return (a, b) if a < b else (b, a)


# pair_low/pair_high must be exactly {from_user_id, to_user_id}
PAIR_MATCHES_USERS = (
    "(pair_low = from_user_id AND pair_high = to_user_id) "
    "OR (pair_low = to_user_id AND pair_high = from_user_id)"
)


class FriendRequest(Base):
    """A directional friend request from `from_user_id` to `to_user_id`."""

    __tablename__ = "friend_requests"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    from_user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    to_user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    pair_low: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    pair_high: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)

    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=FriendRequestStatus.PENDING.value,
        server_default=text("'pending'"),
    )

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

    from_user: Mapped[User] = relationship(foreign_keys=[from_user_id], lazy="selectin")
    to_user: Mapped[User] = relationship(foreign_keys=[to_user_id], lazy="selectin")

    __table_args__ = (
        UniqueConstraint("pair_low", "pair_high", name="uq_friend_requests_pair"),
        CheckConstraint("from_user_id <> to_user_id", name="ck_friend_requests_not_self"),
        CheckConstraint("pair_low < pair_high", name="ck_friend_requests_pair_order"),
        CheckConstraint(PAIR_MATCHES_USERS, name="ck_friend_requests_pair_users"),
        CheckConstraint(
            "status IN ('pending', 'accepted', 'rejected')",
            name="ck_friend_requests_status",
        ),
        Index("idx_friend_requests_to_status", "to_user_id", "status"),
        Index("idx_friend_requests_from_status", "from_user_id", "status"),
    )

    @classmethod
    def create_pending(cls, from_user_id: uuid.UUID, to_user_id: uuid.UUID) -> "FriendRequest":
        low, high = canonical_pair(from_user_id, to_user_id)
        return cls(
            from_user_id=from_user_id,
            to_user_id=to_user_id,
            pair_low=low,
            pair_high=high,
            status=FriendRequestStatus.PENDING.value,
        )

    @property
    def is_pending(self) -> bool:
        return self.status == FriendRequestStatus.PENDING.value

    def __repr__(self) -> str:
        return (
            f"<FriendRequest(id={self.id}, from={self.from_user_id}, "
            f"to={self.to_user_id}, status='{self.status}')>"
        )
