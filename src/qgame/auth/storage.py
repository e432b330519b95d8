"""Identity-provider profile storage (memory and database backends)."""

from __future__ import annotations

from abc import ABC, abstractmethod

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from qgame.config import Settings
from qgame.database import get_session_factory
from qgame.db.models import AuthUserRow
from qgame.schemas import AuthUser, UpsertAuthUser, utcnow

_PROFILE_FIELDS = ("email", "first_name", "last_name", "profile_image_url")


class AuthStorage(ABC):
    """Keeps the latest profile claims seen for each identity subject."""

    @abstractmethod
    async def get_user(self, user_id: str) -> AuthUser | None: ...

    @abstractmethod
    async def upsert_user(self, user: UpsertAuthUser) -> AuthUser:
        """Insert or refresh a profile; null claims never erase stored values."""


class MemAuthStorage(AuthStorage):
    def __init__(self) -> None:
        self._users: dict[str, AuthUser] = {}

    async def get_user(self, user_id: str) -> AuthUser | None:
        return self._users.get(user_id)

    async def upsert_user(self, user: UpsertAuthUser) -> AuthUser:
        existing = self._users.get(user.id)
        now = utcnow()
        fields = {
            name: getattr(user, name) if getattr(user, name) is not None
            else (getattr(existing, name) if existing else None)
            for name in _PROFILE_FIELDS
        }
        record = AuthUser(
            id=user.id,
            created_at=existing.created_at if existing else now,
            updated_at=now,
            **fields,
        )
        self._users[user.id] = record
        return record


class DatabaseAuthStorage(AuthStorage):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get_user(self, user_id: str) -> AuthUser | None:
        async with self._session_factory() as db:
            row = await db.get(AuthUserRow, user_id)
            return AuthUser.model_validate(row) if row is not None else None

    async def upsert_user(self, user: UpsertAuthUser) -> AuthUser:
        now = utcnow()
        async with self._session_factory() as db:
            row = await db.get(AuthUserRow, user.id)
            if row is None:
                row = AuthUserRow(
                    id=user.id,
                    created_at=now,
                    updated_at=now,
                    **{name: getattr(user, name) for name in _PROFILE_FIELDS},
                )
                db.add(row)
            else:
                for name in _PROFILE_FIELDS:
                    value = getattr(user, name)
                    if value is not None:
                        setattr(row, name, value)
            row.updated_at = now
            await db.commit()
            return AuthUser.model_validate(row)


def create_auth_storage(settings: Settings) -> AuthStorage:
    if settings.storage_backend == "database":
        return DatabaseAuthStorage(get_session_factory())
    return MemAuthStorage()
