"""
Notify Backend: Password Hashing and Access Tokens
===================================================

What:  bcrypt password hashing (passlib) and HS256 JWT signing/verification
       (python-jose).
Who:   AuthService issues tokens; app.dependencies verifies them on every
       protected route.

Token claims:
    sub           user id (UUID string)
    phone_number  the user's login phone number
    exp           expiry, `settings.jwt_expires_days` after issuance
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.config import settings
from app.exceptions import UnauthenticatedError

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


@dataclass(frozen=True)
class TokenPayload:
    user_id: UUID
    phone_number: str


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(
    user_id: UUID,
    phone_number: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(days=settings.jwt_expires_days)
    )
    to_encode = {
        "sub": str(user_id),
        "phone_number": phone_number,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> TokenPayload:
    """
    Verifies signature and expiry and returns the token's identity.

    Raises:
        UnauthenticatedError: bad signature, expired, or missing claims.
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
        return TokenPayload(
            user_id=UUID(payload["sub"]),
            phone_number=payload.get("phone_number", ""),
        )
    except (JWTError, KeyError, ValueError) as e:
        raise UnauthenticatedError(
            message="Invalid or expired token",
            context={"error_type": type(e).__name__},
        )
