"""
Notify Backend: User Service
=============================

What:  Read-only user queries: paginated directory listing and profile lookup.
"""

import logging
from typing import List, Tuple
from uuid import UUID

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import NotFoundError
from app.models.user import User

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_users(self, page: int, limit: int) -> Tuple[List[User], int]:
        """
        One page of users, newest first, plus the total user count.

        Offset pagination: page 1 is the first page; `(page - 1) * limit`
        rows are skipped.
        """
        result = await self.db.execute(
            select(User)
            .order_by(desc(User.created_at), desc(User.id))
            .offset((page - 1) * limit)
            .limit(limit)
        )
        users = list(result.scalars().all())

        total = (await self.db.execute(select(func.count(User.id)))).scalar() or 0
        return users, total

    async def get_user(self, user_id: UUID) -> User:
        user = await self.db.get(User, user_id)
        if user is None:
            raise NotFoundError(resource="user", resource_id=str(user_id))
        return user
