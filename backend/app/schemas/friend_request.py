import uuid
from datetime import datetime
from typing import Optional

from pydantic import Field

from app.models.friend_request import FriendRequest
from app.schemas.common import CamelModel
from app.schemas.user import UserSummary


class SendFriendRequestBody(CamelModel):
    to_user_id: Optional[uuid.UUID] = Field(default=None, description="Target user ID")


class FriendRequestResponse(CamelModel):
    """
    A friend request with both parties expanded.

    `from` and `to` keep the wire names clients already use; the raw ids are
    repeated as `fromUserId` / `toUserId` for convenience.
    """

    id: uuid.UUID
    from_user_id: uuid.UUID
    to_user_id: uuid.UUID
    from_user: Optional[UserSummary] = Field(default=None, alias="from")
    to_user: Optional[UserSummary] = Field(default=None, alias="to")
    status: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_request(cls, request: FriendRequest) -> "FriendRequestResponse":
        return cls(
            id=request.id,
            from_user_id=request.from_user_id,
            to_user_id=request.to_user_id,
            from_user=UserSummary.from_user(request.from_user) if request.from_user else None,
            to_user=UserSummary.from_user(request.to_user) if request.to_user else None,
            status=request.status,
            created_at=request.created_at,
            updated_at=request.updated_at,
        )
