"""Login, logout and identity profile endpoints."""

from __future__ import annotations

from datetime import timedelta
from typing import Any
from urllib.parse import urlencode

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse

from qgame import api_paths
from qgame.auth.dependencies import get_current_claims
from qgame.auth.jwt import MOCK_CLAIMS, create_identity_token, profile_claim
from qgame.auth.storage import AuthStorage
from qgame.config import Settings, get_settings
from qgame.dependencies import get_auth_storage
from qgame.schemas import AuthUser, UpsertAuthUser

logger = structlog.get_logger()

router = APIRouter(tags=["Auth"])


def upsert_from_claims(claims: dict[str, Any]) -> UpsertAuthUser:
    return UpsertAuthUser(
        id=str(claims["sub"]),
        email=profile_claim(claims, "email"),
        first_name=profile_claim(claims, "first_name"),
        last_name=profile_claim(claims, "last_name"),
        profile_image_url=profile_claim(claims, "profile_image_url"),
    )


@router.get(api_paths.AUTH_LOGIN)
async def login(
    request: Request,
    settings: Settings = Depends(get_settings),
    auth_storage: AuthStorage = Depends(get_auth_storage),
) -> RedirectResponse:
    """
    Start a session.

    In mock mode the fixed local user is signed in immediately. In oidc mode
    the browser is sent to the identity provider; the session cookie is set by
    whatever serves ``oidc_redirect_uri``.
    """
    if settings.auth_mode == "oidc":
        redirect_uri = settings.oidc_redirect_uri
        if redirect_uri.startswith("/"):
            redirect_uri = str(request.base_url).rstrip("/") + redirect_uri
        query = urlencode({
            "client_id": settings.oidc_client_id,
            "response_type": "code",
            "scope": "openid email profile offline_access",
            "prompt": "login consent",
            "redirect_uri": redirect_uri,
        })
        return RedirectResponse(f"{settings.oidc_authorize_url}?{query}", status_code=302)

    ttl = timedelta(hours=settings.mock_token_ttl_hours)
    token = create_identity_token(MOCK_CLAIMS, expires_in=ttl)
    await auth_storage.upsert_user(upsert_from_claims(MOCK_CLAIMS))
    logger.info("mock_login", sub=MOCK_CLAIMS["sub"])

    response = RedirectResponse("/", status_code=302)
    response.set_cookie(
        settings.session_cookie_name,
        token,
        max_age=int(ttl.total_seconds()),
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )
    return response


@router.get(api_paths.AUTH_LOGOUT)
async def logout(settings: Settings = Depends(get_settings)) -> RedirectResponse:
    response = RedirectResponse("/", status_code=302)
    response.delete_cookie(settings.session_cookie_name)
    return response


@router.get(api_paths.AUTH_USER, response_model=AuthUser)
async def get_auth_user(
    claims: dict[str, Any] = Depends(get_current_claims),
    auth_storage: AuthStorage = Depends(get_auth_storage),
) -> AuthUser:
    """Identity profile of the caller, stored from the token claims on first sight."""
    user = await auth_storage.get_user(str(claims["sub"]))
    if user is None:
        user = await auth_storage.upsert_user(upsert_from_claims(claims))
    return user
