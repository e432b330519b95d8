"""Game economy rules: lazy user creation, miner upgrades, stakes, predictions."""

from __future__ import annotations

import random
from typing import Any

import structlog

from qgame.auth.jwt import profile_claim
from qgame.schemas import (
    CreatePredictionRequest,
    CreateStakeRequest,
    MinerType,
    NewUser,
    Prediction,
    Stake,
    User,
)
from qgame.storage import NotFoundError, Storage

logger = structlog.get_logger()

# miner type -> (token cost, mining power gained)
MINER_UPGRADES: dict[str, tuple[float, float]] = {
    "gpu": (100, 1),
    "asic": (500, 10),
    "farm": (5000, 150),
}


def username_from_claims(claims: dict[str, Any], rng: random.Random | None = None) -> str:
    """Local part of the email claim, or ``User<n>`` with n in [0, 1000)."""
    email = profile_claim(claims, "email") or ""
    local_part = email.split("@")[0]
    if local_part:
        return local_part
    return f"User{(rng or random).randrange(1000)}"


async def get_or_create_game_user(
    storage: Storage,
    claims: dict[str, Any],
    rng: random.Random | None = None,
) -> User:
    """Return the game user linked to the token subject, creating it if needed."""
    auth_id = str(claims["sub"])
    user = await storage.get_user_by_auth_id(auth_id)
    if user is not None:
        return user

    new_user = NewUser(
        auth_id=auth_id,
        username=username_from_claims(claims, rng),
        email=profile_claim(claims, "email"),
    )
    try:
        user = await storage.create_user(new_user)
    except ValueError:
        # Created by a concurrent request for the same subject
        existing = await storage.get_user_by_auth_id(auth_id)
        if existing is None:
            raise
        return existing

    logger.info("game_user_registered", user_id=user.id, auth_id=auth_id)
    return user


async def upgrade_miner(storage: Storage, user: User, miner_type: MinerType) -> User:
    """
    Buy a miner upgrade.

    Raises:
        InsufficientTokensError: If the balance is below the upgrade cost.
    """
    cost, power_gain = MINER_UPGRADES[miner_type]
    updated = await storage.spend_tokens(user.id, cost, mining_power_gain=power_gain)
    logger.info(
        "miner_upgraded",
        user_id=user.id,
        miner_type=miner_type,
        cost=cost,
        mining_power=updated.mining_power,
    )
    return updated


async def place_stake(storage: Storage, user: User, request: CreateStakeRequest) -> Stake:
    """
    Commit tokens to a chain. The balance is debited before the stake is recorded.

    Raises:
        NotFoundError: If the chain does not exist.
        InsufficientTokensError: If the amount exceeds the balance.
    """
    if await storage.get_chain(request.chain_id) is None:
        raise NotFoundError("Chain", request.chain_id)
    await storage.spend_tokens(user.id, request.amount)
    stake = await storage.create_stake(user.id, request)
    logger.info("stake_created", user_id=user.id, chain_id=request.chain_id, amount=request.amount)
    return stake


async def make_prediction(storage: Storage, user: User, request: CreatePredictionRequest) -> Prediction:
    """
    Record a forecast of a chain metric. Settlement is not performed here.

    Raises:
        NotFoundError: If the target chain does not exist.
    """
    if await storage.get_chain(request.target_chain_id) is None:
        raise NotFoundError("Chain", request.target_chain_id)
    prediction = await storage.create_prediction(user.id, request)
    logger.info(
        "prediction_created",
        user_id=user.id,
        chain_id=request.target_chain_id,
        prediction_type=request.type,
    )
    return prediction
