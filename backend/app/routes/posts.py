"""
Notify Backend: Post Route Handlers
====================================

What:  Post feed, CRUD, likes and comments under /api/posts.
How:   Create and update take multipart form data (`description`, `image`);
       the image part is read fully and handed to PostService, which
       validates it and stores it as a data URI.

Reads are public; every write requires a bearer token.
"""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from app.dependencies import clamp_page, get_current_user, get_post_service
from app.schemas.common import ApiResponse, ErrorResponse, Pagination
from app.schemas.post import CommentCreate, CommentResponse, LikeToggleResponse, PostResponse
from app.security import TokenPayload
from app.services.image_service import UploadedImage
from app.services.post_service import PostService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/posts", tags=["Posts"])


async def _read_upload(upload: Optional[UploadFile]) -> Optional[UploadedImage]:
    # Browsers send an empty, unnamed part when no file was chosen
    if upload is None or not upload.filename:
        return None
    try:
        content = await upload.read()
    finally:
        await upload.close()
    return UploadedImage(
        filename=upload.filename,
        content_type=upload.content_type,
        content=content,
    )


@router.get(
    "",
    response_model=ApiResponse[List[PostResponse]],
    summary="List all posts, newest first",
)
async def list_posts(
    page: int = Query(default=1, ge=1, description="1-based page number"),
    limit: Optional[int] = Query(default=None, ge=1, description="Items per page"),
    posts: PostService = Depends(get_post_service),
) -> ApiResponse[List[PostResponse]]:
    page, limit = clamp_page(page, limit)
    items, total = await posts.list_posts(page, limit)
    return ApiResponse(
        data=[PostResponse.from_post(p) for p in items],
        pagination=Pagination.build(page, limit, total),
    )


@router.get(
    "/user/{user_id}",
    response_model=ApiResponse[List[PostResponse]],
    summary="List one user's posts, newest first",
)
async def list_user_posts(
    user_id: UUID,
    page: int = Query(default=1, ge=1),
    limit: Optional[int] = Query(default=None, ge=1),
    posts: PostService = Depends(get_post_service),
) -> ApiResponse[List[PostResponse]]:
    page, limit = clamp_page(page, limit)
    items, total = await posts.list_posts(page, limit, user_id=user_id)
    return ApiResponse(
        data=[PostResponse.from_post(p) for p in items],
        pagination=Pagination.build(page, limit, total),
    )


@router.get(
    "/{post_id}",
    response_model=ApiResponse[PostResponse],
    responses={404: {"description": "Post not found", "model": ErrorResponse}},
    summary="Get a single post",
)
async def get_post(
    post_id: UUID,
    posts: PostService = Depends(get_post_service),
) -> ApiResponse[PostResponse]:
    post = await posts.get_post(post_id)
    return ApiResponse(data=PostResponse.from_post(post))


@router.post(
    "",
    response_model=ApiResponse[PostResponse],
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Missing description or invalid image", "model": ErrorResponse}},
    summary="Create a post",
)
async def create_post(
    description: Optional[str] = Form(default=None),
    image: Optional[UploadFile] = File(default=None),
    current_user: TokenPayload = Depends(get_current_user),
    posts: PostService = Depends(get_post_service),
) -> ApiResponse[PostResponse]:
    upload = await _read_upload(image)
    post = await posts.create_post(current_user.user_id, description, upload)
    return ApiResponse(message="Post created successfully", data=PostResponse.from_post(post))


@router.put(
    "/{post_id}",
    response_model=ApiResponse[PostResponse],
    responses={
        403: {"description": "Caller is not the author", "model": ErrorResponse},
        404: {"description": "Post not found", "model": ErrorResponse},
    },
    summary="Update a post",
)
async def update_post(
    post_id: UUID,
    description: Optional[str] = Form(default=None),
    image: Optional[UploadFile] = File(default=None),
    current_user: TokenPayload = Depends(get_current_user),
    posts: PostService = Depends(get_post_service),
) -> ApiResponse[PostResponse]:
    upload = await _read_upload(image)
    post = await posts.update_post(post_id, current_user.user_id, description, upload)
    return ApiResponse(message="Post updated successfully", data=PostResponse.from_post(post))


@router.delete(
    "/{post_id}",
    response_model=ApiResponse[None],
    responses={
        403: {"description": "Caller is not the author", "model": ErrorResponse},
        404: {"description": "Post not found", "model": ErrorResponse},
    },
    summary="Delete a post",
)
async def delete_post(
    post_id: UUID,
    current_user: TokenPayload = Depends(get_current_user),
    posts: PostService = Depends(get_post_service),
) -> ApiResponse[None]:
    await posts.delete_post(post_id, current_user.user_id)
    return ApiResponse(message="Post deleted successfully")


@router.post(
    "/{post_id}/like",
    response_model=ApiResponse[LikeToggleResponse],
    responses={404: {"description": "Post not found", "model": ErrorResponse}},
    summary="Like or unlike a post",
)
async def toggle_like(
    post_id: UUID,
    current_user: TokenPayload = Depends(get_current_user),
    posts: PostService = Depends(get_post_service),
) -> ApiResponse[LikeToggleResponse]:
    likes_count, is_liked = await posts.toggle_like(post_id, current_user.user_id)
    return ApiResponse(
        message="Post liked" if is_liked else "Post unliked",
        data=LikeToggleResponse(likes_count=likes_count, is_liked=is_liked),
    )


@router.post(
    "/{post_id}/comments",
    response_model=ApiResponse[CommentResponse],
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Empty comment", "model": ErrorResponse},
        404: {"description": "Post not found", "model": ErrorResponse},
    },
    summary="Comment on a post",
)
async def add_comment(
    post_id: UUID,
    body: CommentCreate,
    current_user: TokenPayload = Depends(get_current_user),
    posts: PostService = Depends(get_post_service),
) -> ApiResponse[CommentResponse]:
    comment = await posts.add_comment(post_id, current_user.user_id, body.text)
    return ApiResponse(message="Comment added successfully", data=CommentResponse.from_comment(comment))


@router.delete(
    "/{post_id}/comments/{comment_id}",
    response_model=ApiResponse[None],
    responses={
        403: {"description": "Caller wrote neither the comment nor the post", "model": ErrorResponse},
        404: {"description": "Post or comment not found", "model": ErrorResponse},
    },
    summary="Delete a comment",
)
async def delete_comment(
    post_id: UUID,
    comment_id: UUID,
    current_user: TokenPayload = Depends(get_current_user),
    posts: PostService = Depends(get_post_service),
) -> ApiResponse[None]:
    await posts.delete_comment(post_id, comment_id, current_user.user_id)
    return ApiResponse(message="Comment deleted successfully")
