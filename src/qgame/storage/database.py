"""Relational storage through async SQLAlchemy.

Each operation runs in its own session and commits before returning.
"""

from __future__ import annotations

from typing import TypeVar

import structlog
from sqlalchemy import select, text, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from qgame.db.base import Base
from qgame.db.models import ChainRow, GameUser, PredictionRow, StakeRow
from qgame.schemas import (
    Chain,
    ChainStatsUpdate,
    CreatePredictionRequest,
    CreateStakeRequest,
    NewChain,
    NewUser,
    Prediction,
    Stake,
    User,
    utcnow,
)
from qgame.storage.base import DEFAULT_PREDICTIONS_LIMIT, InsufficientTokensError, NotFoundError, Storage

logger = structlog.get_logger()

_RowT = TypeVar("_RowT", bound=Base)


class DatabaseStorage(Storage):
    """Storage backed by the game tables."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        starting_tokens: float = 1000.0,
    ) -> None:
        self._session_factory = session_factory
        self.starting_tokens = starting_tokens

    async def _get_or_raise(self, db: AsyncSession, model: type[_RowT], row_id: int, entity: str) -> _RowT:
        row = await db.get(model, row_id)
        if row is None:
            raise NotFoundError(entity, row_id)
        return row

    # --- Users ---

    async def get_user(self, user_id: int) -> User | None:
        async with self._session_factory() as db:
            row = await db.get(GameUser, user_id)
            return User.model_validate(row) if row is not None else None

    async def get_user_by_auth_id(self, auth_id: str) -> User | None:
        async with self._session_factory() as db:
            result = await db.execute(select(GameUser).where(GameUser.auth_id == auth_id))
            row = result.scalar_one_or_none()
            return User.model_validate(row) if row is not None else None

    async def create_user(self, user: NewUser) -> User:
        async with self._session_factory() as db:
            row = GameUser(
                auth_id=user.auth_id,
                username=user.username,
                email=user.email or None,
                tokens=self.starting_tokens,
                mining_power=0.0,
                experience=0,
                created_at=utcnow(),
            )
            db.add(row)
            try:
                await db.commit()
            except IntegrityError as e:
                await db.rollback()
                msg = f"User with auth id {user.auth_id!r} already exists"
                raise ValueError(msg) from e
            logger.info("game_user_created", user_id=row.id, username=row.username)
            return User.model_validate(row)

    async def update_user_mining_power(self, user_id: int, power: float) -> User:
        async with self._session_factory() as db:
            row = await self._get_or_raise(db, GameUser, user_id, "User")
            row.mining_power = power
            await db.commit()
            return User.model_validate(row)

    async def update_user_tokens(self, user_id: int, tokens: float) -> User:
        async with self._session_factory() as db:
            row = await self._get_or_raise(db, GameUser, user_id, "User")
            row.tokens = tokens
            await db.commit()
            return User.model_validate(row)

    async def spend_tokens(self, user_id: int, amount: float, mining_power_gain: float = 0.0) -> User:
        async with self._session_factory() as db:
            result = await db.execute(
                update(GameUser)
                .where(GameUser.id == user_id, GameUser.tokens >= amount)
                .values(
                    tokens=GameUser.tokens - amount,
                    mining_power=GameUser.mining_power + mining_power_gain,
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                await db.rollback()
                row = await self._get_or_raise(db, GameUser, user_id, "User")
                raise InsufficientTokensError(row.tokens, amount)
            await db.commit()
            row = await self._get_or_raise(db, GameUser, user_id, "User")
            return User.model_validate(row)

    # --- Chains ---

    async def get_chains(self) -> list[Chain]:
        async with self._session_factory() as db:
            result = await db.execute(select(ChainRow).order_by(ChainRow.id))
            return [Chain.model_validate(row) for row in result.scalars()]

    async def get_chain(self, chain_id: int) -> Chain | None:
        async with self._session_factory() as db:
            row = await db.get(ChainRow, chain_id)
            return Chain.model_validate(row) if row is not None else None

    async def create_chain(self, chain: NewChain) -> Chain:
        async with self._session_factory() as db:
            row = ChainRow(**chain.model_dump())
            db.add(row)
            await db.commit()
            return Chain.model_validate(row)

    async def update_chain_stats(self, chain_id: int, stats: ChainStatsUpdate) -> Chain:
        async with self._session_factory() as db:
            row = await self._get_or_raise(db, ChainRow, chain_id, "Chain")
            for field, value in stats.model_dump(exclude_unset=True).items():
                setattr(row, field, value)
            await db.commit()
            return Chain.model_validate(row)

    # --- Stakes ---

    async def create_stake(self, user_id: int, stake: CreateStakeRequest) -> Stake:
        async with self._session_factory() as db:
            row = StakeRow(
                user_id=user_id,
                chain_id=stake.chain_id,
                amount=stake.amount,
                active=True,
                start_time=utcnow(),
            )
            db.add(row)
            await db.commit()
            return Stake.model_validate(row)

    async def get_user_stakes(self, user_id: int) -> list[Stake]:
        async with self._session_factory() as db:
            result = await db.execute(
                select(StakeRow).where(StakeRow.user_id == user_id).order_by(StakeRow.id)
            )
            return [Stake.model_validate(row) for row in result.scalars()]

    async def deactivate_stake(self, stake_id: int) -> Stake:
        async with self._session_factory() as db:
            row = await self._get_or_raise(db, StakeRow, stake_id, "Stake")
            row.active = False
            await db.commit()
            return Stake.model_validate(row)

    # --- Predictions ---

    async def create_prediction(self, user_id: int, prediction: CreatePredictionRequest) -> Prediction:
        async with self._session_factory() as db:
            row = PredictionRow(
                user_id=user_id,
                type=prediction.type,
                target_chain_id=prediction.target_chain_id,
                predicted_value=prediction.predicted_value,
                resolved=False,
                won=None,
                created_at=utcnow(),
            )
            db.add(row)
            await db.commit()
            return Prediction.model_validate(row)

    async def get_predictions(self, limit: int = DEFAULT_PREDICTIONS_LIMIT) -> list[Prediction]:
        async with self._session_factory() as db:
            result = await db.execute(
                select(PredictionRow)
                .order_by(PredictionRow.created_at.desc(), PredictionRow.id.desc())
                .limit(limit)
            )
            return [Prediction.model_validate(row) for row in result.scalars()]

    async def resolve_prediction(self, prediction_id: int, won: bool) -> Prediction:
        async with self._session_factory() as db:
            row = await self._get_or_raise(db, PredictionRow, prediction_id, "Prediction")
            row.resolved = True
            row.won = won
            await db.commit()
            return Prediction.model_validate(row)

    async def ping(self) -> None:
        async with self._session_factory() as db:
            result = await db.execute(text("SELECT 1"))
            result.scalar()
