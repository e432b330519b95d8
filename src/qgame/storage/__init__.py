"""Game storage backends and backend selection."""

from qgame.config import Settings
from qgame.database import get_session_factory
from qgame.storage.base import InsufficientTokensError, NotFoundError, Storage
from qgame.storage.database import DatabaseStorage
from qgame.storage.memory import MemStorage

__all__ = [
    "DatabaseStorage",
    "MemStorage",
    "InsufficientTokensError",
    "NotFoundError",
    "Storage",
    "create_storage",
]


def create_storage(settings: Settings) -> Storage:
    """Build the storage backend named by ``settings.storage_backend``.

    The database backend requires init_db() to have run.
    """
    if settings.storage_backend == "database":
        return DatabaseStorage(get_session_factory(), starting_tokens=settings.starting_tokens)
    return MemStorage(starting_tokens=settings.starting_tokens)
