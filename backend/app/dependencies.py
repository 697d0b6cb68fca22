"""
Notify Backend: Route Dependencies
===================================

What:  FastAPI dependencies shared by the routers: the authenticated caller
       and per-request service instances bound to the request's session.

Authentication:
    Protected routes declare `current_user: TokenPayload = Depends(get_current_user)`.
    The bearer token is read from `Authorization: Bearer <jwt>`; a missing or
    invalid token raises UnauthenticatedError, which the global handler turns
    into a 401 envelope.
"""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db_session
from app.exceptions import UnauthenticatedError
from app.security import TokenPayload, decode_access_token
from app.services.auth_service import AuthService
from app.services.post_service import PostService
from app.services.relationship_manager import RelationshipManager
from app.services.user_service import UserService

# auto_error=False: a missing header reaches get_current_user, which raises
# the application's own 401 instead of FastAPI's 403
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> TokenPayload:
    if credentials is None or not credentials.credentials:
        raise UnauthenticatedError(message="Access token is required")
    return decode_access_token(credentials.credentials)


def get_relationship_manager(db: AsyncSession = Depends(get_db_session)) -> RelationshipManager:
    return RelationshipManager(db)


def get_auth_service(db: AsyncSession = Depends(get_db_session)) -> AuthService:
    return AuthService(db)


def get_user_service(db: AsyncSession = Depends(get_db_session)) -> UserService:
    return UserService(db)


def get_post_service(db: AsyncSession = Depends(get_db_session)) -> PostService:
    return PostService(db)


def clamp_page(page: int, limit: Optional[int]) -> tuple[int, int]:
    """Normalizes `page`/`limit` query values to a 1-based page and a bounded limit."""
    limit = limit or settings.page_size_default
    return max(page, 1), max(1, min(limit, settings.page_size_max))
