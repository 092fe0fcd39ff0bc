"""
Bookstore Backend — Auth Service
==================================

What:  User registration, credential login, and profile lookup.
Who:   Called by the /auth route handlers.

Flow:
    register: validate → reject duplicate email → bcrypt hash → insert
    login:    find by email → bcrypt verify → issue JWT (sub = user id)
    me:       load user by id → profile without the password hash

Emails are trimmed and lower-cased on both register and login, so
"Reader@Shop.io" and "reader@shop.io" name the same account.

Login answers the same 401 for an unknown email and a wrong password.
"""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.exceptions import (
    BookstoreError,
    ConflictError,
    DatabaseError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from bookstore.models.user import User
from bookstore.schemas.auth import (
    LoginRequest,
    RegisteredUser,
    RegisterRequest,
    TokenResponse,
    UserProfile,
)
from bookstore.security import (
    BCRYPT_MAX_PASSWORD_BYTES,
    create_access_token,
    hash_password,
    verify_password,
)

logger = logging.getLogger(__name__)


def _normalize_email(email: str) -> str:
    return email.strip().lower()


class AuthService:
    """Stateless; each call receives the request's session."""

    async def register(self, db: AsyncSession, payload: RegisterRequest) -> RegisteredUser:
        if not payload.email or not payload.password:
            raise ValidationError("Email and password are required")
        if len(payload.password.encode("utf-8")) > BCRYPT_MAX_PASSWORD_BYTES:
            raise ValidationError(
                f"Password must be at most {BCRYPT_MAX_PASSWORD_BYTES} bytes",
                field="password",
            )

        email = _normalize_email(payload.email)
        username = payload.username.strip() if payload.username else None

        try:
            existing = await self._find_by_email(db, email)
            if existing is not None:
                raise ConflictError("Email already exists", field="email")

            user = User(
                email=email,
                password_hash=hash_password(payload.password),
                username=username or None,
            )
            db.add(user)
            await db.flush()
        except BookstoreError:
            raise
        except IntegrityError:
            # Lost a race with a concurrent registration for the same email
            raise ConflictError("Email already exists", field="email")
        except SQLAlchemyError as e:
            logger.error("Database error registering user: %s", str(e), exc_info=True)
            raise DatabaseError(context={"operation": "register"})

        logger.info("Registered user %s", user.id)
        return RegisteredUser.model_validate(user)

    async def login(self, db: AsyncSession, payload: LoginRequest) -> TokenResponse:
        if not payload.email or not payload.password:
            raise ValidationError("Email and password are required")

        try:
            user = await self._find_by_email(db, _normalize_email(payload.email))
        except SQLAlchemyError as e:
            logger.error("Database error during login: %s", str(e), exc_info=True)
            raise DatabaseError(context={"operation": "login"})

        if user is None or not verify_password(payload.password, user.password_hash):
            raise UnauthorizedError("Invalid credentials")

        return TokenResponse(access_token=create_access_token(str(user.id)))

    async def get_profile(self, db: AsyncSession, user_id: uuid.UUID) -> UserProfile:
        try:
            user = await db.get(User, user_id)
        except SQLAlchemyError as e:
            logger.error("Database error loading user %s: %s", user_id, str(e))
            raise DatabaseError(context={"user_id": str(user_id)})

        if user is None:
            raise NotFoundError(resource="user", message="User not found")
        return UserProfile.model_validate(user)

    async def _find_by_email(self, db: AsyncSession, email: str):
        result = await db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()


auth_service = AuthService()
