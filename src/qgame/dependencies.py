"""Shared FastAPI dependencies."""

from fastapi import Request

from qgame.auth.storage import AuthStorage
from qgame.storage import Storage


def get_storage(request: Request) -> Storage:
    """Return the game storage attached to the application at startup."""
    storage: Storage = request.app.state.storage
    return storage


def get_auth_storage(request: Request) -> AuthStorage:
    """Return the identity profile storage attached to the application at startup."""
    auth_storage: AuthStorage = request.app.state.auth_storage
    return auth_storage
