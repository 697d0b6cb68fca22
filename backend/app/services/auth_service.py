"""
Notify Backend: Auth Service
=============================

What:  Registration and login by phone number + password.
How:   Passwords are stored as bcrypt hashes; both flows return a signed
       access token plus the public user fields.
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import ConflictError, UnauthenticatedError, ValidationError
from app.models.user import User
from app.schemas.auth import AuthPayload, AuthUser
from app.security import create_access_token, hash_password, verify_password

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid phone number or password"


def _require_credentials(phone_number: str | None, password: str | None) -> tuple[str, str]:
    phone = (phone_number or "").strip()
    if not phone or not password:
        raise ValidationError(
            message="Phone number and password are required",
            context={"phone_number": bool(phone), "password": bool(password)},
        )
    return phone, password


def _auth_payload(user: User) -> AuthPayload:
    return AuthPayload(
        access_token=create_access_token(user.id, user.phone_number),
        user=AuthUser(id=user.id, phone_number=user.phone_number, name=user.name),
    )


class AuthService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def register(
        self,
        phone_number: str | None,
        password: str | None,
        name: str | None = None,
    ) -> AuthPayload:
        """
        Create an account and sign the user in.

        Raises:
            ValidationError: phone number or password missing
            ConflictError: phone number already registered
        """
        phone, password = _require_credentials(phone_number, password)

        if await self._find_by_phone(phone) is not None:
            raise ConflictError(message="User with this phone number already exists")

        user = User(
            phone_number=phone,
            password_hash=hash_password(password),
            name=(name or "").strip() or None,
        )
        self.db.add(user)
        try:
            await self.db.flush()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError(message="User with this phone number already exists")

        logger.info("User registered: %s", user.id)
        return _auth_payload(user)

    async def login(self, phone_number: str | None, password: str | None) -> AuthPayload:
        """
        Raises:
            ValidationError: phone number or password missing
            UnauthenticatedError: unknown phone number or wrong password
                                  (same message for both)
        """
        phone, password = _require_credentials(phone_number, password)

        user = await self._find_by_phone(phone)
        if user is None or not verify_password(password, user.password_hash):
            logger.info("Failed login attempt for phone number ending %s", phone[-4:])
            raise UnauthenticatedError(message=INVALID_CREDENTIALS_MESSAGE)

        return _auth_payload(user)

    async def _find_by_phone(self, phone_number: str) -> User | None:
        result = await self.db.execute(select(User).where(User.phone_number == phone_number))
        return result.scalar_one_or_none()
