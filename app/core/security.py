"""Security utilities for authentication."""

import base64
import hashlib
import hmac
import secrets
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt

from app.core.settings import get_settings

PASSWORD_HASH_SCHEME = "pbkdf2_sha256"


def _b64(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def _pbkdf2(password: str, salt: str, iterations: int) -> bytes:
    return hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("ascii"), iterations
    )


def hash_password(password: str) -> str:
    """
    Hash a password with a random salt.

    Args:
        password: Plain-text password

    Returns:
        Encoded hash in the form ``pbkdf2_sha256$<iterations>$<salt>$<digest>``
    """
    iterations = get_settings().password_hash_iterations
    salt = _b64(secrets.token_bytes(16))
    digest = _b64(_pbkdf2(password, salt, iterations))
    return f"{PASSWORD_HASH_SCHEME}${iterations}${salt}${digest}"


def verify_password(password: str, password_hash: str) -> bool:
    """
    Check a plain-text password against a stored hash.

    Malformed hashes never match.
    """
    try:
        scheme, iterations, salt, expected = password_hash.split("$", 3)
        rounds = int(iterations)
    except (AttributeError, ValueError):
        return False

    if scheme != PASSWORD_HASH_SCHEME:
        return False

    actual = _b64(_pbkdf2(password, salt, rounds))
    return hmac.compare_digest(actual, expected)


def create_token(user_id: int, token_type: str, expires_delta: timedelta) -> str:
    """
    Create a JWT token.

    Args:
        user_id: User ID to encode in token
        token_type: Type of token ('access' or 'refresh')
        expires_delta: Time until token expires

    Returns:
        Encoded JWT token string
    """
    settings = get_settings()

    now = datetime.now(UTC)
    payload = {
        "sub": str(user_id),
        "type": token_type,
        "exp": now + expires_delta,
        "iat": now,
    }

    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_access_token(user_id: int) -> str:
    """Create an access token with configured expiry."""
    settings = get_settings()
    expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    return create_token(user_id, "access", expires_delta)


def create_refresh_token(user_id: int) -> str:
    """Create a refresh token with configured expiry."""
    settings = get_settings()
    expires_delta = timedelta(days=settings.refresh_token_expire_days)
    return create_token(user_id, "refresh", expires_delta)


def verify_token(token: str) -> dict[str, Any]:
    """
    Verify and decode a JWT token.

    Args:
        token: JWT token string

    Returns:
        Decoded token payload

    Raises:
        jwt.ExpiredSignatureError: If token is expired
        jwt.InvalidTokenError: If token is invalid
    """
    settings = get_settings()
    return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
