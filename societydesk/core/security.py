"""Security utilities: credential hashing and session tokens."""

import secrets
from datetime import datetime, timedelta, timezone

from jose import jwt
from passlib.context import CryptContext

from societydesk.core.config import get_settings

settings = get_settings()

# ── Password hashing (Argon2) ─────────────────────────────────

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def generate_temporary_password() -> str:
    """Random one-time password handed to a newly created account."""
    return secrets.token_urlsafe(9)


# ── Session JWT ───────────────────────────────────────────────

def create_jwt(subject: str, society_id: str, expires_delta: timedelta | None = None) -> str:
    """Issue a session token.

    Only identifies the account; the role is looked up on every request.
    """
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.jwt_expire_minutes)
    )
    payload = {
        "sub": subject,
        "sid": society_id,
        "exp": expire,
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_jwt(token: str) -> dict:
    """Decode and verify a JWT. Raises jose.JWTError on failure."""
    return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
