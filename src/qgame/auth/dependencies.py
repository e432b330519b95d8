"""FastAPI authentication dependencies."""

from __future__ import annotations

from typing import Any

import jwt
import structlog
from fastapi import Depends, HTTPException, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from qgame.auth.jwt import verify_identity_token
from qgame.config import get_settings
from qgame.dependencies import get_storage
from qgame.game.service import get_or_create_game_user
from qgame.schemas import User
from qgame.storage import Storage

logger = structlog.get_logger()

_bearer = HTTPBearer(auto_error=False)


async def get_optional_claims(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
) -> dict[str, Any] | None:
    """
    Return verified identity claims, or None for anonymous requests.

    The token is taken from the Authorization header first, then from the
    session cookie set by /api/login. An invalid or expired token counts as
    anonymous.
    """
    token = credentials.credentials if credentials else None
    if token is None:
        token = request.cookies.get(get_settings().session_cookie_name)
    if not token:
        return None
    try:
        return verify_identity_token(token)
    except jwt.InvalidTokenError as e:
        logger.info("identity_token_rejected", reason=str(e))
        return None


async def get_current_claims(
    claims: dict[str, Any] | None = Depends(get_optional_claims),
) -> dict[str, Any]:
    """Same as get_optional_claims but raises 401 for anonymous requests."""
    if claims is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return claims


async def get_current_user(
    claims: dict[str, Any] = Depends(get_current_claims),
    storage: Storage = Depends(get_storage),
) -> User:
    """Return the caller's game user, creating it on first sight."""
    return await get_or_create_game_user(storage, claims)
