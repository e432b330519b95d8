"""In-process storage backed by dicts with auto-incrementing integer ids."""

from __future__ import annotations

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


class MemStorage(Storage):
    """Ephemeral storage. Everything is lost when the process exits."""

    def __init__(self, starting_tokens: float = 1000.0) -> None:
        self.starting_tokens = starting_tokens
        self._users: dict[int, User] = {}
        self._chains: dict[int, Chain] = {}
        self._stakes: dict[int, Stake] = {}
        self._predictions: dict[int, Prediction] = {}
        self._next_user_id = 1
        self._next_chain_id = 1
        self._next_stake_id = 1
        self._next_prediction_id = 1

    # --- Users ---

    async def get_user(self, user_id: int) -> User | None:
        return self._users.get(user_id)

    async def get_user_by_auth_id(self, auth_id: str) -> User | None:
        return next((u for u in self._users.values() if u.auth_id == auth_id), None)

    async def create_user(self, user: NewUser) -> User:
        if await self.get_user_by_auth_id(user.auth_id) is not None:
            msg = f"User with auth id {user.auth_id!r} already exists"
            raise ValueError(msg)
        user_id = self._next_user_id
        self._next_user_id += 1
        record = User(
            id=user_id,
            auth_id=user.auth_id,
            username=user.username,
            email=user.email or None,
            tokens=self.starting_tokens,
            mining_power=0.0,
            experience=0,
            created_at=utcnow(),
        )
        self._users[user_id] = record
        return record

    async def update_user_mining_power(self, user_id: int, power: float) -> User:
        return self._replace_user(user_id, mining_power=power)

    async def update_user_tokens(self, user_id: int, tokens: float) -> User:
        return self._replace_user(user_id, tokens=tokens)

    async def spend_tokens(self, user_id: int, amount: float, mining_power_gain: float = 0.0) -> User:
        user = self._users.get(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        if user.tokens < amount:
            raise InsufficientTokensError(user.tokens, amount)
        return self._replace_user(
            user_id,
            tokens=user.tokens - amount,
            mining_power=user.mining_power + mining_power_gain,
        )

    def _replace_user(self, user_id: int, **changes: object) -> User:
        user = self._users.get(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        updated = user.model_copy(update=changes)
        self._users[user_id] = updated
        return updated

    # --- Chains ---

    async def get_chains(self) -> list[Chain]:
        return [self._chains[k] for k in sorted(self._chains)]

    async def get_chain(self, chain_id: int) -> Chain | None:
        return self._chains.get(chain_id)

    async def create_chain(self, chain: NewChain) -> Chain:
        chain_id = self._next_chain_id
        self._next_chain_id += 1
        record = Chain(id=chain_id, **chain.model_dump())
        self._chains[chain_id] = record
        return record

    async def update_chain_stats(self, chain_id: int, stats: ChainStatsUpdate) -> Chain:
        chain = self._chains.get(chain_id)
        if chain is None:
            raise NotFoundError("Chain", chain_id)
        updated = chain.model_copy(update=stats.model_dump(exclude_unset=True))
        self._chains[chain_id] = updated
        return updated

    # --- Stakes ---

    async def create_stake(self, user_id: int, stake: CreateStakeRequest) -> Stake:
        stake_id = self._next_stake_id
        self._next_stake_id += 1
        record = Stake(
            id=stake_id,
            user_id=user_id,
            chain_id=stake.chain_id,
            amount=stake.amount,
            active=True,
            start_time=utcnow(),
        )
        self._stakes[stake_id] = record
        return record

    async def get_user_stakes(self, user_id: int) -> list[Stake]:
        return [s for s in self._stakes.values() if s.user_id == user_id]

    async def deactivate_stake(self, stake_id: int) -> Stake:
        stake = self._stakes.get(stake_id)
        if stake is None:
            raise NotFoundError("Stake", stake_id)
        updated = stake.model_copy(update={"active": False})
        self._stakes[stake_id] = updated
        return updated

    # --- Predictions ---

    async def create_prediction(self, user_id: int, prediction: CreatePredictionRequest) -> Prediction:
        prediction_id = self._next_prediction_id
        self._next_prediction_id += 1
        record = Prediction(
            id=prediction_id,
            user_id=user_id,
            type=prediction.type,
            target_chain_id=prediction.target_chain_id,
            predicted_value=prediction.predicted_value,
            resolved=False,
            won=None,
            created_at=utcnow(),
        )
        self._predictions[prediction_id] = record
        return record

    async def get_predictions(self, limit: int = DEFAULT_PREDICTIONS_LIMIT) -> list[Prediction]:
        ordered = sorted(
            self._predictions.values(),
            key=lambda p: (p.created_at, p.id),
            reverse=True,
        )
        return ordered[:limit]

    async def resolve_prediction(self, prediction_id: int, won: bool) -> Prediction:
        prediction = self._predictions.get(prediction_id)
        if prediction is None:
            raise NotFoundError("Prediction", prediction_id)
        updated = prediction.model_copy(update={"resolved": True, "won": won})
        self._predictions[prediction_id] = updated
        return updated

    async def ping(self) -> None:
        return None
