"""
Notify Backend: User and Friend Route Handlers
===============================================

What:  User directory and profile reads, plus every friend-request and
       friendship endpoint.
How:   Friend endpoints delegate to a RelationshipManager bound to the
       request's session (see app.dependencies); the session dependency
       commits on success and rolls back when a handler raises.
Who:   Mounted at /api/users; every route requires a bearer token.

Route Inventory:
    GET    /api/users                                   paginated directory
    GET    /api/users/{id}                              profile + friend ids
    GET    /api/users/{id}/friends                      friend list
    POST   /api/users/friend-request                    send
    GET    /api/users/friend-requests/pending           received, pending
    GET    /api/users/friend-requests/sent              sent, pending
    POST   /api/users/friend-request/{id}/accept        accept (target only)
    POST   /api/users/friend-request/{id}/reject        reject (target only)
    DELETE /api/users/friends/{friend_id}               unfriend

The static paths are registered before `/{user_id}` so they are never parsed
as user ids.
"""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.dependencies import (
    clamp_page,
    get_current_user,
    get_relationship_manager,
    get_user_service,
)
from app.exceptions import ValidationError
from app.schemas.common import ApiResponse, ErrorResponse, Pagination
from app.schemas.friend_request import FriendRequestResponse, SendFriendRequestBody
from app.schemas.user import UserResponse, UserSummary
from app.security import TokenPayload
from app.services.relationship_manager import RelationshipManager
from app.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["Users"])


# ── Friend requests ───────────────────────────────────────────────────────

@router.post(
    "/friend-request",
    response_model=ApiResponse[FriendRequestResponse],
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Self-request, already friends or duplicate request", "model": ErrorResponse},
        404: {"description": "Target user not found", "model": ErrorResponse},
    },
    summary="Send a friend request",
)
async def send_friend_request(
    body: SendFriendRequestBody,
    current_user: TokenPayload = Depends(get_current_user),
    relationships: RelationshipManager = Depends(get_relationship_manager),
) -> ApiResponse[FriendRequestResponse]:
    if body.to_user_id is None:
        raise ValidationError(message="Target user ID is required", field="toUserId")

    request = await relationships.send_request(current_user.user_id, body.to_user_id)
    return ApiResponse(
        message="Friend request sent successfully",
        data=FriendRequestResponse.from_request(request),
    )


@router.get(
    "/friend-requests/pending",
    response_model=ApiResponse[List[FriendRequestResponse]],
    summary="Pending requests received by the caller",
)
async def list_pending_requests(
    current_user: TokenPayload = Depends(get_current_user),
    relationships: RelationshipManager = Depends(get_relationship_manager),
) -> ApiResponse[List[FriendRequestResponse]]:
    requests = await relationships.list_pending(current_user.user_id)
    return ApiResponse(data=[FriendRequestResponse.from_request(r) for r in requests])


@router.get(
    "/friend-requests/sent",
    response_model=ApiResponse[List[FriendRequestResponse]],
    summary="Pending requests sent by the caller",
)
async def list_sent_requests(
    current_user: TokenPayload = Depends(get_current_user),
    relationships: RelationshipManager = Depends(get_relationship_manager),
) -> ApiResponse[List[FriendRequestResponse]]:
    requests = await relationships.list_sent(current_user.user_id)
    return ApiResponse(data=[FriendRequestResponse.from_request(r) for r in requests])


_TRANSITION_RESPONSES = {
    400: {"description": "Request already processed", "model": ErrorResponse},
    403: {"description": "Caller is not the request's target", "model": ErrorResponse},
    404: {"description": "Friend request not found", "model": ErrorResponse},
}


@router.post(
    "/friend-request/{request_id}/accept",
    response_model=ApiResponse[FriendRequestResponse],
    responses=_TRANSITION_RESPONSES,
    summary="Accept a pending friend request",
)
async def accept_friend_request(
    request_id: UUID,
    current_user: TokenPayload = Depends(get_current_user),
    relationships: RelationshipManager = Depends(get_relationship_manager),
) -> ApiResponse[FriendRequestResponse]:
    request = await relationships.accept(request_id, current_user.user_id)
    return ApiResponse(
        message="Friend request accepted",
        data=FriendRequestResponse.from_request(request),
    )


@router.post(
    "/friend-request/{request_id}/reject",
    response_model=ApiResponse[FriendRequestResponse],
    responses=_TRANSITION_RESPONSES,
    summary="Reject a pending friend request",
)
async def reject_friend_request(
    request_id: UUID,
    current_user: TokenPayload = Depends(get_current_user),
    relationships: RelationshipManager = Depends(get_relationship_manager),
) -> ApiResponse[FriendRequestResponse]:
    request = await relationships.reject(request_id, current_user.user_id)
    return ApiResponse(
        message="Friend request rejected",
        data=FriendRequestResponse.from_request(request),
    )


@router.delete(
    "/friends/{friend_id}",
    response_model=ApiResponse[None],
    summary="Remove a friend",
)
async def remove_friend(
    friend_id: UUID,
    current_user: TokenPayload = Depends(get_current_user),
    relationships: RelationshipManager = Depends(get_relationship_manager),
) -> ApiResponse[None]:
    await relationships.remove_friend(current_user.user_id, friend_id)
    return ApiResponse(message="Friend removed successfully")


# ── Users ─────────────────────────────────────────────────────────────────

@router.get(
    "",
    response_model=ApiResponse[List[UserSummary]],
    summary="List users",
)
async def list_users(
    page: int = Query(default=1, ge=1, description="1-based page number"),
    limit: Optional[int] = Query(default=None, ge=1, description="Items per page"),
    current_user: TokenPayload = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
) -> ApiResponse[List[UserSummary]]:
    page, limit = clamp_page(page, limit)
    items, total = await users.list_users(page, limit)
    return ApiResponse(
        data=[UserSummary.from_user(u) for u in items],
        pagination=Pagination.build(page, limit, total),
    )


@router.get(
    "/{user_id}",
    response_model=ApiResponse[UserResponse],
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="Get a user's profile",
)
async def get_user(
    user_id: UUID,
    current_user: TokenPayload = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
    relationships: RelationshipManager = Depends(get_relationship_manager),
) -> ApiResponse[UserResponse]:
    user = await users.get_user(user_id)
    friend_ids = await relationships.friend_ids(user.id)
    return ApiResponse(data=UserResponse.from_user(user, friend_ids))


@router.get(
    "/{user_id}/friends",
    response_model=ApiResponse[List[UserSummary]],
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="List a user's friends",
)
async def list_friends(
    user_id: UUID,
    current_user: TokenPayload = Depends(get_current_user),
    relationships: RelationshipManager = Depends(get_relationship_manager),
) -> ApiResponse[List[UserSummary]]:
    friends = await relationships.list_friends(user_id)
    return ApiResponse(data=[UserSummary.from_user(u) for u in friends])
