import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from app.models.post import Comment, Post
from app.schemas.common import CamelModel
from app.schemas.user import UserSummary


class CommentCreate(CamelModel):
    text: Optional[str] = Field(default=None, max_length=2000)


class CommentResponse(CamelModel):
    id: uuid.UUID
    user: UserSummary
    text: str
    created_at: datetime

    @classmethod
    def from_comment(cls, comment: Comment) -> "CommentResponse":
        return cls(
            id=comment.id,
            user=UserSummary.from_user(comment.author),
            text=comment.text,
            created_at=comment.created_at,
        )


class PostResponse(CamelModel):
    id: uuid.UUID
    description: str
    image: str = Field(description="data:<mime>;base64,<payload>")
    user: UserSummary
    likes: List[UserSummary]
    likes_count: int
    comments: List[CommentResponse]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_post(cls, post: Post) -> "PostResponse":
        return cls(
            id=post.id,
            description=post.description,
            image=post.image,
            user=UserSummary.from_user(post.author),
            likes=[UserSummary.from_user(u) for u in post.likers],
            likes_count=len(post.likers),
            comments=[CommentResponse.from_comment(c) for c in post.comments],
            created_at=post.created_at,
            updated_at=post.updated_at,
        )


class LikeToggleResponse(CamelModel):
    likes_count: int
    is_liked: bool
