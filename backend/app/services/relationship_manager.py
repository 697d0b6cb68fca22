"""
Notify Backend: Relationship Manager
=====================================

What:  Owns the friend-request lifecycle and the symmetric friendship edges it
       produces between two users.
How:   Constructed per request with that request's AsyncSession; every write
       happens inside the session's transaction, which the get_db_session
       dependency commits or rolls back.
Who:   Called by the friend routes in app.routes.users.

State machine:
    ┌─────────┐  accept (target only)  ┌──────────┐
    │ pending │───────────────────────▶│ accepted │  (terminal)
    └─────────┘                        └──────────┘
         │       reject (target only)  ┌──────────┐
         └────────────────────────────▶│ rejected │  (terminal)
                                       └──────────┘

Storage guarantees relied on:
    - uq_friend_requests_pair: one record per unordered pair. A racing second
      send_request fails at flush and surfaces as ConflictError.
    - user_friends primary key + insert_ignore: friend-set adds never duplicate.
    - accept/reject update with `WHERE status = 'pending'`, so only one of two
      racing transitions succeeds.
"""

import logging
from typing import List
from uuid import UUID

from sqlalchemy import and_, delete, or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import insert_ignore
from app.exceptions import (
    ConflictError,
    DatabaseError,
    ForbiddenError,
    InvalidOperationError,
    NotFoundError,
)
from app.models.friend_request import FriendRequest, FriendRequestStatus, canonical_pair
from app.models.user import User, user_friends, utcnow

logger = logging.getLogger(__name__)

DUPLICATE_REQUEST_MESSAGE = "A friend request already exists between you and this user"
ALREADY_PROCESSED_MESSAGE = "This request has already been processed"

# PostgreSQL reports the constraint name, SQLite the constrained columns
PAIR_CONFLICT_MARKERS = ("uq_friend_requests_pair", "friend_requests.pair_low")


def is_pair_conflict(error: IntegrityError) -> bool:
    """True when `error` is a violation of the one-request-per-pair constraint."""
    return any(marker in str(error.orig) for marker in PAIR_CONFLICT_MARKERS)


class RelationshipManager:
    """
    Friend requests and friendships for one unit of work.

    Responsibilities:
        - send_request(): create a pending request (pair-unique)
        - list_pending() / list_sent(): pending requests by direction
        - accept() / reject(): terminal transitions, target only
        - remove_friend(): drop both edges and the pair's request record
        - list_friends() / friend_ids(): read the friend-set
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    # ── Commands ──────────────────────────────────────────────────────────

    async def send_request(self, from_user_id: UUID, to_user_id: UUID) -> FriendRequest:
        """
        Create a pending friend request from `from_user_id` to `to_user_id`.

        A terminal (rejected) record for the same pair is discarded first, so
        a rejection never blocks a later request.

        Raises:
            InvalidOperationError: self-request
            NotFoundError: target user does not exist
            ConflictError: already friends, or a pending request exists for
                           the pair in either direction
        """
        if from_user_id == to_user_id:
            raise InvalidOperationError(
                message="You cannot send a friend request to yourself",
                context={"user_id": str(from_user_id)},
            )

        target = await self.db.get(User, to_user_id)
        if target is None:
            raise NotFoundError(
                resource="user",
                resource_id=str(to_user_id),
                message="Target user not found",
            )

        if await self.are_friends(from_user_id, to_user_id):
            raise ConflictError(
                message="You are already friends with this user",
                context={"from": str(from_user_id), "to": str(to_user_id)},
            )

        existing = await self._find_for_pair(from_user_id, to_user_id)
        if existing is not None:
            if existing.is_pending:
                raise ConflictError(
                    message=DUPLICATE_REQUEST_MESSAGE,
                    context={"request_id": str(existing.id)},
                )
            logger.debug("Discarding terminal request %s (%s)", existing.id, existing.status)
            await self.db.delete(existing)
            await self.db.flush()

        request = FriendRequest.create_pending(from_user_id, to_user_id)
        self.db.add(request)
        try:
            await self.db.flush()
        except IntegrityError as e:
            if not is_pair_conflict(e):
                logger.error("Integrity error creating friend request: %s", str(e), exc_info=True)
                raise DatabaseError(
                    message="Could not send the friend request. Please try again.",
                    context={"error_type": type(e).__name__},
                )
            # Lost the race against a concurrent request for the same pair
            await self.db.rollback()
            raise ConflictError(
                message=DUPLICATE_REQUEST_MESSAGE,
                context={"from": str(from_user_id), "to": str(to_user_id)},
            )
        except SQLAlchemyError as e:
            logger.error("Database error creating friend request: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not send the friend request. Please try again.",
                context={"error_type": type(e).__name__},
            )

        await self.db.refresh(request, attribute_names=["from_user", "to_user"])
        logger.info("Friend request %s sent: %s -> %s", request.id, from_user_id, to_user_id)
        return request

    async def accept(self, request_id: UUID, acting_user_id: UUID) -> FriendRequest:
        """
        Accept a pending request and link both users.

        Raises:
            NotFoundError: no such request
            ForbiddenError: acting user is not the request's target
            InvalidOperationError: request already accepted or rejected
        """
        request = await self._get_actionable(request_id, acting_user_id, "accept")
        await self._transition(request, FriendRequestStatus.ACCEPTED)

        await self.db.execute(
            insert_ignore(self.db, user_friends).values(
                [
                    {"user_id": request.from_user_id, "friend_id": request.to_user_id},
                    {"user_id": request.to_user_id, "friend_id": request.from_user_id},
                ]
            )
        )
        logger.info(
            "Friend request %s accepted: %s <-> %s",
            request.id,
            request.from_user_id,
            request.to_user_id,
        )
        return request

    async def reject(self, request_id: UUID, acting_user_id: UUID) -> FriendRequest:
        """Reject a pending request. Same errors as accept(); friend-sets untouched."""
        request = await self._get_actionable(request_id, acting_user_id, "reject")
        await self._transition(request, FriendRequestStatus.REJECTED)
        logger.info("Friend request %s rejected by %s", request.id, acting_user_id)
        return request

    async def remove_friend(self, user_id: UUID, friend_id: UUID) -> None:
        """
        Remove the friendship in both directions and delete the pair's request
        record, whatever its status.

        No precondition check: removing a friendship that does not exist
        succeeds and changes nothing.
        """
        await self.db.execute(
            delete(user_friends).where(
                or_(
                    and_(user_friends.c.user_id == user_id, user_friends.c.friend_id == friend_id),
                    and_(user_friends.c.user_id == friend_id, user_friends.c.friend_id == user_id),
                )
            )
        )
        low, high = canonical_pair(user_id, friend_id)
        await self.db.execute(
            delete(FriendRequest).where(
                FriendRequest.pair_low == low,
                FriendRequest.pair_high == high,
            )
        )
        logger.info("Friendship removed: %s <-> %s", user_id, friend_id)

    # ── Queries ───────────────────────────────────────────────────────────

    async def list_pending(self, user_id: UUID) -> List[FriendRequest]:
        """Pending requests received by `user_id`, oldest first."""
        result = await self.db.execute(
            select(FriendRequest)
            .where(
                FriendRequest.to_user_id == user_id,
                FriendRequest.status == FriendRequestStatus.PENDING.value,
            )
            .order_by(FriendRequest.created_at)
        )
        return list(result.scalars().all())

    async def list_sent(self, user_id: UUID) -> List[FriendRequest]:
        """Pending requests sent by `user_id`, oldest first."""
        result = await self.db.execute(
            select(FriendRequest)
            .where(
                FriendRequest.from_user_id == user_id,
                FriendRequest.status == FriendRequestStatus.PENDING.value,
            )
            .order_by(FriendRequest.created_at)
        )
        return list(result.scalars().all())

    async def list_friends(self, user_id: UUID) -> List[User]:
        """
        Users in `user_id`'s friend-set, in the order the friendships formed.

        Raises:
            NotFoundError: `user_id` does not exist
        """
        if await self.db.get(User, user_id) is None:
            raise NotFoundError(resource="user", resource_id=str(user_id))

        result = await self.db.execute(
            select(User)
            .join(user_friends, user_friends.c.friend_id == User.id)
            .where(user_friends.c.user_id == user_id)
            .order_by(user_friends.c.created_at)
        )
        return list(result.scalars().all())

    async def friend_ids(self, user_id: UUID) -> List[UUID]:
        """Ids in `user_id`'s friend-set, oldest friendship first."""
        result = await self.db.execute(
            select(user_friends.c.friend_id)
            .where(user_friends.c.user_id == user_id)
            .order_by(user_friends.c.created_at)
        )
        return list(result.scalars().all())

    async def are_friends(self, user_id: UUID, other_id: UUID) -> bool:
        """True when `other_id` is in `user_id`'s friend-set."""
        result = await self.db.execute(
            select(user_friends.c.friend_id).where(
                user_friends.c.user_id == user_id,
                user_friends.c.friend_id == other_id,
            )
        )
        return result.first() is not None

    # ── Internals ─────────────────────────────────────────────────────────

    async def _find_for_pair(self, a: UUID, b: UUID) -> FriendRequest | None:
        low, high = canonical_pair(a, b)
        result = await self.db.execute(
            select(FriendRequest).where(
                FriendRequest.pair_low == low,
                FriendRequest.pair_high == high,
            )
        )
        return result.scalar_one_or_none()

    async def _get_actionable(
        self, request_id: UUID, acting_user_id: UUID, action: str
    ) -> FriendRequest:
        request = await self.db.get(FriendRequest, request_id)
        if request is None:
            raise NotFoundError(
                resource="friend request",
                resource_id=str(request_id),
                message="Friend request not found",
            )
        if request.to_user_id != acting_user_id:
            raise ForbiddenError(
                message=f"You are not authorized to {action} this request",
                context={"request_id": str(request_id), "user_id": str(acting_user_id)},
            )
        if not request.is_pending:
            raise InvalidOperationError(
                message=ALREADY_PROCESSED_MESSAGE,
                context={"request_id": str(request_id), "status": request.status},
            )
        return request

    async def _transition(self, request: FriendRequest, status: FriendRequestStatus) -> None:
        """
        Move a pending request to a terminal status.

        The update only matches while the row is still pending; zero matched
        rows means another transaction processed it first.
        """
        result = await self.db.execute(
            update(FriendRequest)
            .where(
                FriendRequest.id == request.id,
                FriendRequest.status == FriendRequestStatus.PENDING.value,
            )
            .values(status=status.value, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise InvalidOperationError(
                message=ALREADY_PROCESSED_MESSAGE,
                context={"request_id": str(request.id)},
            )
        await self.db.refresh(request, attribute_names=["status", "updated_at"])
