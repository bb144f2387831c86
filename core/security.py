"""
Security utilities: access-token handling and one-way hashing.

Tokens are issued by the identity service; this API only needs to verify
them, but ``create_access_token`` is kept for tooling and tests.
"""

import hashlib
import logging
from datetime import timedelta
from typing import Any, Optional

import jwt

from core.config import settings
from core.utils.datetime import now

logger = logging.getLogger("security")


class TokenError(Exception):
    """Base exception for token errors."""
    pass


class TokenExpiredError(TokenError):
    """Raised when JWT token has expired."""
    pass


class TokenInvalidError(TokenError):
    """Raised when JWT token is invalid."""
    pass


def create_access_token(
    user_id: str,
    user_type: str,
    expires_delta: Optional[timedelta] = None,
    extra_claims: Optional[dict[str, Any]] = None,
) -> str:
    """
    Create a signed access token.

    Args:
        user_id: Subject of the token
        user_type: Role claim (COMPANY, PLAYER, ...)
        expires_delta: Token lifetime, defaults to the configured minutes
        extra_claims: Additional claims to embed

    Returns:
        Encoded JWT
    """
    issued_at = now()
    expire = issued_at + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    payload: dict[str, Any] = {
        "sub": user_id,
        "user_type": user_type,
        "iat": issued_at,
        "exp": expire,
    }
    if extra_claims:
        payload.update(extra_claims)
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Verify and decode an access token.

    Raises:
        TokenExpiredError: The token is past its ``exp`` claim
        TokenInvalidError: Signature, format or required claims are wrong
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise TokenExpiredError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise TokenInvalidError(f"Invalid token: {str(e)}")
    return payload


def hash_secret(value: str) -> str:
    """One-way hash for stored secrets such as security-question answers."""
    normalized = value.strip().lower()
    return hashlib.sha256(normalized.encode("utf-8")).hexdigest()
