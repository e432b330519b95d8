"""Middleware registration."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from qgame.config import Settings
from qgame.middleware.error_handler import setup_error_handlers
from qgame.middleware.logging import setup_logging
from qgame.middleware.rate_limit import RateLimitMiddleware
from qgame.middleware.request_id import REQUEST_ID_HEADER, RequestIdMiddleware


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Register logging, error handlers and middleware.

    Starlette runs the last added middleware outermost. CORS wraps the rate limiter
    and the routers, so 429s and HTTPException responses carry the allow-origin
    headers. Unhandled-exception 500s are sent by ServerErrorMiddleware, outside
    CORS and the request id, and carry neither.
    """
    setup_logging(settings)
    setup_error_handlers(app)
    app.add_middleware(
        RateLimitMiddleware,
        requests_per_window=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )
    app.add_middleware(RequestIdMiddleware)
    # The session cookie needs credentials; the client only reads and posts.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER, "X-RateLimit-Remaining", "X-RateLimit-Limit", "Retry-After"],
    )
