"""
Password hashing, session-token issuance/verification and the current-user
dependency.

Passwords are stored as "<salt>:<hash>": PBKDF2-HMAC-SHA256 with
PBKDF2_ITERATIONS iterations over a 32-byte random salt (hex), 64-byte
derived key (hex).

Session tokens are HS256 JWTs carrying the caller's role and geographic scope.

In development with DEV_SKIP_AUTH=true:
  - Pass X-Dev-User-ID: <user id> to authenticate as that user.
  - Without the header a normal bearer token is still required.
"""
import hashlib
import hmac
import logging
import secrets
from datetime import timedelta
from typing import Any

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from elacak.core.config import get_settings
from elacak.core.db import get_db, utcnow
from elacak.core.errors import AuthError
from elacak.models.user import User

logger = logging.getLogger(__name__)
settings = get_settings()

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)

PBKDF2_ITERATIONS = 10_000
SALT_BYTES = 32
KEY_LENGTH = 64


# ---------------------------------------------------------------------------
# Passwords
# ---------------------------------------------------------------------------

def hash_password(password: str) -> str:
    salt = secrets.token_hex(SALT_BYTES)
    derived = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("utf-8"), PBKDF2_ITERATIONS, KEY_LENGTH
    )
    return f"{salt}:{derived.hex()}"


def verify_password(password: str, password_hash: str) -> bool:
    salt, sep, expected = password_hash.partition(":")
    if not sep or not salt or not expected:
        return False
    derived = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("utf-8"), PBKDF2_ITERATIONS, KEY_LENGTH
    )
    return hmac.compare_digest(derived.hex(), expected)


# ---------------------------------------------------------------------------
# Session tokens
# ---------------------------------------------------------------------------

def create_access_token(user: User) -> str:
    now = utcnow()
    payload = {
        "sub": str(user.id),
        "username": user.username,
        "role": user.role,
        "district_id": user.district_id,
        "village_id": user.village_id,
        "iat": now,
        "exp": now + timedelta(minutes=settings.access_token_ttl_minutes),
    }
    return jwt.encode(payload, settings.token_secret, algorithm=settings.jwt_algorithm)


def _is_numeric_id(value: str) -> bool:
    return value.isascii() and value.isdigit()


def decode_access_token(token: str) -> dict[str, Any]:
    """Verify signature and expiry. Raises AuthError on any failure."""
    try:
        payload = jwt.decode(token, settings.token_secret, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError as exc:
        raise AuthError("Token has expired") from exc
    except JWTError as exc:
        raise AuthError("Token verification failed") from exc

    if not _is_numeric_id(str(payload.get("sub", ""))):
        raise AuthError("Invalid token subject")
    return payload


# ---------------------------------------------------------------------------
# Current user
# ---------------------------------------------------------------------------

async def _load_active_user(db: AsyncSession, user_id: int) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalars().first()
    if not user or not user.is_active:
        raise AuthError("User not found or inactive")
    return user


async def get_current_user(
    request: Request,
    token: str | None = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """FastAPI dependency: resolve and return the authenticated User ORM object."""
    # ------------------------------------------------------------------ #
    # Development bypass
    # ------------------------------------------------------------------ #
    if settings.auth_disabled:
        dev_user_id = request.headers.get("X-Dev-User-ID")
        if dev_user_id:
            if not _is_numeric_id(dev_user_id):
                raise AuthError("Dev auth: X-Dev-User-ID must be a numeric user id")
            return await _load_active_user(db, int(dev_user_id))

    if not token:
        raise AuthError("Not authenticated")

    payload = decode_access_token(token)
    return await _load_active_user(db, int(payload["sub"]))


def client_ip(request: Request) -> str | None:
    return request.client.host if request.client else None
