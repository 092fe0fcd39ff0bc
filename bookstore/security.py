"""
Bookstore Backend — Password Hashing & Access Tokens
======================================================

What:  bcrypt password hashing and JWT access-token issuance/verification.
Who:   AuthService (register/login) and the current-user dependency.

Tokens:
    HS256-signed JWT (python-jose) with claims:
        sub: user id (UUID string)
        exp: expiry, ACCESS_TOKEN_EXPIRE_MINUTES after issuance
        iat: issue time

bcrypt input limit:
    bcrypt only reads the first 72 bytes of a password and current releases
    raise ValueError for longer input. AuthService rejects such passwords at
    registration; verify_password() treats them as a mismatch.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from jose import JWTError, jwt

from bookstore.config import settings

logger = logging.getLogger(__name__)

BCRYPT_MAX_PASSWORD_BYTES = 72


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Over-long password or malformed stored hash
        return False


def create_access_token(subject: str, expires_delta: Optional[timedelta] = None) -> str:
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    claims = {"sub": subject, "iat": now, "exp": expire}
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Optional[str]:
    """
    Return the token's subject, or None when the token is malformed,
    carries a bad signature, has expired, or has no subject.
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        logger.debug("Rejected access token: %s", str(e))
        return None
    subject = payload.get("sub")
    if not subject:
        return None
    return str(subject)
