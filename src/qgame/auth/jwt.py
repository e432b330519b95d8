"""
Identity token handling.

Tokens are issued by the external identity provider. This service verifies
them (signature, issuer, expiry) and, in mock mode, mints its own for a fixed
local development user.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from qgame.config import get_settings

MOCK_CLAIMS: dict[str, Any] = {
    "sub": "mock-user-id",
    "email": "dev@example.com",
    "first_name": "Local",
    "last_name": "Developer",
    "profile_image_url": "https://api.dicebear.com/7.x/avataaars/svg?seed=mock",
}


def create_identity_token(claims: dict[str, Any], expires_in: timedelta | None = None) -> str:
    """
    Sign a token carrying the given identity claims.

    Args:
        claims: Must contain ``sub``; other profile claims are optional.
        expires_in: Lifetime, defaults to the mock token lifetime.

    Returns:
        Encoded JWT string.
    """
    settings = get_settings()
    now = datetime.now(timezone.utc)
    lifetime = expires_in if expires_in is not None else timedelta(hours=settings.mock_token_ttl_hours)
    payload: dict[str, Any] = {
        **claims,
        "iat": now,
        "exp": now + lifetime,
        "iss": settings.jwt_issuer,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_identity_token(token: str) -> dict[str, Any]:
    """
    Decode and verify an identity token.

    Raises:
        jwt.InvalidTokenError: If the token is malformed, expired, has the wrong
            issuer or signature, or carries no subject.
    """
    settings = get_settings()
    payload: dict[str, Any] = jwt.decode(
        token,
        settings.jwt_secret,
        algorithms=[settings.jwt_algorithm],
        issuer=settings.jwt_issuer,
        options={"require": ["sub", "exp"]},
    )
    return payload


def profile_claim(claims: dict[str, Any], name: str) -> str | None:
    """String profile claim, or None when it is absent or not a string."""
    value = claims.get(name)
    return value if isinstance(value, str) else None
