"""
Notify Backend: Shared Response Schemas
========================================

What:  The response envelope used by every endpoint, plus pagination, error
       and health models.

Envelope:
    {
        "success": true,
        "message": "Friend request sent successfully",
        "data": {...},
        "pagination": {"currentPage": 1, "totalPages": 3, "total": 27, "hasMore": true}
    }

JSON keys are camelCase; Python attributes stay snake_case.
"""

import math
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base for API models: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Pagination(CamelModel):
    current_page: int = Field(description="1-based page number")
    total_pages: int = Field(description="Number of pages at the current limit")
    total: int = Field(description="Total number of matching items")
    has_more: bool = Field(description="Whether a later page exists")

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(
            current_page=page,
            total_pages=math.ceil(total / limit) if limit else 0,
            total=total,
            has_more=page * limit < total,
        )


class ApiResponse(CamelModel, Generic[T]):
    success: bool = Field(default=True)
    message: Optional[str] = Field(default=None)
    data: Optional[T] = Field(default=None)
    pagination: Optional[Pagination] = Field(default=None)


class ErrorResponse(BaseModel):
    """
    Error body returned by the global exception handlers.

    Example:
        {
            "success": false,
            "error": "conflict",
            "message": "A friend request already exists between you and this user",
            "request_id": "3f2a9c1b"
        }
    """
    success: bool = Field(default=False)
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
    timestamp: str = Field(description="Server time (UTC ISO 8601)")


def error_body(error: str, message: str, request_id: str, details: Optional[dict] = None) -> dict:
    """JSON content for an error response; `details` is omitted when empty."""
    return ErrorResponse(
        error=error,
        message=message,
        details=details or None,
        request_id=request_id,
    ).model_dump(exclude_none=True)
