"""
Request and response bodies for /api/auth.

Fields are optional at the schema level so that missing values produce the
service's own 400 message ("Phone number and password are required") rather
than a generic schema error.
"""

import uuid
from typing import Optional

from pydantic import Field

from app.schemas.common import CamelModel


class RegisterRequest(CamelModel):
    phone_number: Optional[str] = Field(default=None, max_length=32)
    password: Optional[str] = Field(default=None, max_length=128)
    name: Optional[str] = Field(default=None, max_length=120)


class LoginRequest(CamelModel):
    phone_number: Optional[str] = Field(default=None, max_length=32)
    password: Optional[str] = Field(default=None, max_length=128)


class AuthUser(CamelModel):
    id: uuid.UUID
    phone_number: str
    name: Optional[str] = None


class AuthPayload(CamelModel):
    access_token: str
    token_type: str = "bearer"
    user: AuthUser
