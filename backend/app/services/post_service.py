"""
Notify Backend: Post Service
=============================

What:  Post CRUD, like toggling and comments.
How:   Images go through ImageService and are stored inline as data URIs.
       Likes live in the `post_likes` edge table; comments in `comments`.
Who:   Called by the post routes in app.routes.posts.

Ownership rules:
    - Only the author may update or delete a post.
    - A comment may be deleted by its author or by the post's author.
"""

import logging
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import delete, desc, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import insert_ignore
from app.exceptions import DatabaseError, ForbiddenError, NotFoundError, ValidationError
from app.models.post import Comment, Post, post_likes
from app.services.image_service import ImageService, UploadedImage, image_service

logger = logging.getLogger(__name__)


class PostService:
    """
    Business logic for posts.

    Responsibilities:
        - create_post() / update_post() / delete_post()
        - list_posts(): paginated feed, optionally for one author
        - toggle_like(): add or remove the caller's like
        - add_comment() / delete_comment()
    """

    def __init__(self, db: AsyncSession, images: Optional[ImageService] = None):
        self.db = db
        self.images = images or image_service

    async def create_post(
        self,
        user_id: UUID,
        description: Optional[str],
        image: Optional[UploadedImage],
    ) -> Post:
        """
        Raises:
            ValidationError: missing description, missing or invalid image
        """
        description = (description or "").strip()
        if not description:
            raise ValidationError(message="Description is required", field="description")
        if image is None:
            raise ValidationError(message="Image file is required", field="image")

        post = Post(
            user_id=user_id,
            description=description,
            image=self.images.to_data_uri(image),
        )
        self.db.add(post)
        try:
            await self.db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error creating post: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create the post. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.info("Post %s created by %s", post.id, user_id)
        return await self.get_post(post.id)

    async def list_posts(
        self,
        page: int,
        limit: int,
        user_id: Optional[UUID] = None,
    ) -> Tuple[List[Post], int]:
        """One page of posts, newest first, plus the matching total."""
        query = select(Post)
        count_query = select(func.count(Post.id))
        if user_id is not None:
            query = query.where(Post.user_id == user_id)
            count_query = count_query.where(Post.user_id == user_id)

        result = await self.db.execute(
            query.order_by(desc(Post.created_at), desc(Post.id)).offset((page - 1) * limit).limit(limit)
        )
        posts = list(result.scalars().all())
        total = (await self.db.execute(count_query)).scalar() or 0
        return posts, total

    async def get_post(self, post_id: UUID) -> Post:
        # populate_existing reloads collections already held by the session
        result = await self.db.execute(
            select(Post)
            .where(Post.id == post_id)
            .execution_options(populate_existing=True)
        )
        post = result.scalar_one_or_none()
        if post is None:
            raise NotFoundError(resource="post", resource_id=str(post_id))
        return post

    async def update_post(
        self,
        post_id: UUID,
        user_id: UUID,
        description: Optional[str] = None,
        image: Optional[UploadedImage] = None,
    ) -> Post:
        """
        Replace the description and/or image. Omitted fields are kept.

        Raises:
            NotFoundError: no such post
            ForbiddenError: caller is not the author
            ValidationError: invalid image
        """
        post = await self._get_owned(post_id, user_id, "update")

        description = (description or "").strip()
        if description:
            post.description = description
        if image is not None:
            post.image = self.images.to_data_uri(image)

        await self.db.flush()
        logger.info("Post %s updated", post.id)
        return await self.get_post(post.id)

    async def delete_post(self, post_id: UUID, user_id: UUID) -> None:
        post = await self._get_owned(post_id, user_id, "delete")
        await self.db.delete(post)
        await self.db.flush()
        logger.info("Post %s deleted by %s", post_id, user_id)

    async def toggle_like(self, post_id: UUID, user_id: UUID) -> Tuple[int, bool]:
        """
        Like the post if the caller has not, unlike it otherwise.

        Returns:
            (likes_count, is_liked) after the toggle
        """
        await self.get_post(post_id)

        existing = await self.db.execute(
            select(post_likes.c.user_id).where(
                post_likes.c.post_id == post_id,
                post_likes.c.user_id == user_id,
            )
        )
        if existing.first() is not None:
            await self.db.execute(
                delete(post_likes).where(
                    post_likes.c.post_id == post_id,
                    post_likes.c.user_id == user_id,
                )
            )
            is_liked = False
        else:
            await self.db.execute(
                insert_ignore(self.db, post_likes).values(post_id=post_id, user_id=user_id)
            )
            is_liked = True

        likes_count = (
            await self.db.execute(
                select(func.count()).select_from(post_likes).where(post_likes.c.post_id == post_id)
            )
        ).scalar() or 0
        logger.debug("Post %s like toggled by %s (liked=%s)", post_id, user_id, is_liked)
        return likes_count, is_liked

    async def add_comment(self, post_id: UUID, user_id: UUID, text: Optional[str]) -> Comment:
        """
        Raises:
            ValidationError: empty comment text
            NotFoundError: no such post
        """
        text = (text or "").strip()
        if not text:
            raise ValidationError(message="Comment text is required", field="text")

        await self.get_post(post_id)

        comment = Comment(post_id=post_id, user_id=user_id, text=text)
        self.db.add(comment)
        await self.db.flush()
        await self.db.refresh(comment, attribute_names=["author"])
        logger.info("Comment %s added to post %s", comment.id, post_id)
        return comment

    async def delete_comment(self, post_id: UUID, comment_id: UUID, user_id: UUID) -> None:
        """
        Raises:
            NotFoundError: no such post, or no such comment on it
            ForbiddenError: caller wrote neither the comment nor the post
        """
        post = await self.get_post(post_id)

        result = await self.db.execute(
            select(Comment).where(Comment.id == comment_id, Comment.post_id == post_id)
        )
        comment = result.scalar_one_or_none()
        if comment is None:
            raise NotFoundError(
                resource="comment",
                resource_id=str(comment_id),
                message="Comment not found",
            )

        if user_id not in (comment.user_id, post.user_id):
            raise ForbiddenError(
                message="You are not authorized to delete this comment",
                context={"comment_id": str(comment_id), "user_id": str(user_id)},
            )

        await self.db.delete(comment)
        await self.db.flush()
        logger.info("Comment %s deleted from post %s", comment_id, post_id)

    async def _get_owned(self, post_id: UUID, user_id: UUID, action: str) -> Post:
        post = await self.get_post(post_id)
        if post.user_id != user_id:
            raise ForbiddenError(
                message=f"You are not authorized to {action} this post",
                context={"post_id": str(post_id), "user_id": str(user_id)},
            )
        return post
