"""Entity shapes and request validation shared by routers and storage backends.

Wire format is camelCase (the browser client's contract); Python attributes
stay snake_case. Every model accepts either spelling on input.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ChainTier = Literal["prime", "region", "zone"]
PredictionType = Literal["tps_spike", "block_time"]
MinerType = Literal["gpu", "asic", "farm"]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class _Model(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        allow_inf_nan=False,
    )


class _Record(_Model):
    """Stored entity. Records are replaced on update, never mutated."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        allow_inf_nan=False,
        frozen=True,
    )


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------


class User(_Record):
    id: int
    auth_id: str
    username: str
    email: str | None = None
    tokens: float = 1000.0
    mining_power: float = 0.0
    experience: int = 0
    created_at: datetime


class Chain(_Record):
    id: int
    name: str
    tier: ChainTier
    parent_id: int | None = None
    tps: float = 0.0
    difficulty: float = 0.0
    active_miners: int = 0
    last_block_time: datetime
    health: float = 100.0


class Stake(_Record):
    id: int
    user_id: int
    chain_id: int
    amount: float
    active: bool = True
    start_time: datetime


class Prediction(_Record):
    id: int
    user_id: int
    type: PredictionType
    target_chain_id: int
    predicted_value: float
    resolved: bool = False
    won: bool | None = None
    created_at: datetime


class AuthUser(_Record):
    """Identity-provider profile keyed by the token subject."""

    id: str
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    profile_image_url: str | None = None
    created_at: datetime
    updated_at: datetime


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------


class NewUser(_Model):
    auth_id: str = Field(min_length=1)
    username: str = Field(min_length=1)
    email: str | None = None


class NewChain(_Model):
    name: str = Field(min_length=1)
    tier: ChainTier
    parent_id: int | None = None
    tps: float = 0.0
    difficulty: float = 0.0
    active_miners: int = 0
    last_block_time: datetime = Field(default_factory=utcnow)
    health: float = Field(default=100.0, ge=0, le=100)


class ChainStatsUpdate(_Model):
    """Partial update of the simulated chain statistics."""

    tps: float | None = None
    difficulty: float | None = None
    active_miners: int | None = None
    health: float | None = None
    last_block_time: datetime | None = None


class CreateStakeRequest(_Model):
    chain_id: int
    amount: float = Field(gt=0)


class CreatePredictionRequest(_Model):
    type: PredictionType
    target_chain_id: int
    predicted_value: float


class MinerUpgradeRequest(_Model):
    type: MinerType


class UpsertAuthUser(_Model):
    id: str = Field(min_length=1)
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    profile_image_url: str | None = None


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class ErrorResponse(BaseModel):
    message: str
    field: str | None = None
