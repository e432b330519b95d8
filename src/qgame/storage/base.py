"""
Storage interface shared by the in-memory and database backends.

Backends return immutable pydantic records (see qgame.schemas); callers never
hold a live ORM object.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

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
)

DEFAULT_PREDICTIONS_LIMIT = 50


class NotFoundError(LookupError):
    """Raised when an update targets a row that does not exist."""

    def __init__(self, entity: str, entity_id: int | str) -> None:
        super().__init__(f"{entity} not found")
        self.entity = entity
        self.entity_id = entity_id


class InsufficientTokensError(ValueError):
    """Raised when a purchase or stake exceeds the user's token balance."""

    def __init__(self, balance: float, required: float) -> None:
        super().__init__("Not enough tokens")
        self.balance = balance
        self.required = required


class Storage(ABC):
    """Data-access layer for users, chains, stakes and predictions."""

    # --- Users ---

    @abstractmethod
    async def get_user(self, user_id: int) -> User | None: ...

    @abstractmethod
    async def get_user_by_auth_id(self, auth_id: str) -> User | None: ...

    @abstractmethod
    async def create_user(self, user: NewUser) -> User:
        """Create a game user with the starting balance and no mining power."""

    @abstractmethod
    async def update_user_mining_power(self, user_id: int, power: float) -> User: ...

    @abstractmethod
    async def update_user_tokens(self, user_id: int, tokens: float) -> User: ...

    @abstractmethod
    async def spend_tokens(self, user_id: int, amount: float, mining_power_gain: float = 0.0) -> User:
        """Debit ``amount`` and add ``mining_power_gain`` in one step.

        The balance check and the write are atomic: the balance never goes negative.

        Raises:
            NotFoundError: If the user does not exist.
            InsufficientTokensError: If the balance is below ``amount``.
        """

    # --- Chains ---

    @abstractmethod
    async def get_chains(self) -> list[Chain]:
        """All chains ordered by id."""

    @abstractmethod
    async def get_chain(self, chain_id: int) -> Chain | None: ...

    @abstractmethod
    async def create_chain(self, chain: NewChain) -> Chain: ...

    @abstractmethod
    async def update_chain_stats(self, chain_id: int, stats: ChainStatsUpdate) -> Chain:
        """Apply only the fields explicitly set on ``stats``."""

    # --- Stakes ---

    @abstractmethod
    async def create_stake(self, user_id: int, stake: CreateStakeRequest) -> Stake: ...

    @abstractmethod
    async def get_user_stakes(self, user_id: int) -> list[Stake]: ...

    @abstractmethod
    async def deactivate_stake(self, stake_id: int) -> Stake: ...

    # --- Predictions ---

    @abstractmethod
    async def create_prediction(self, user_id: int, prediction: CreatePredictionRequest) -> Prediction: ...

    @abstractmethod
    async def get_predictions(self, limit: int = DEFAULT_PREDICTIONS_LIMIT) -> list[Prediction]:
        """Most recent predictions first."""

    @abstractmethod
    async def resolve_prediction(self, prediction_id: int, won: bool) -> Prediction: ...

    # --- Health ---

    @abstractmethod
    async def ping(self) -> None:
        """Raise if the backend is unusable."""
