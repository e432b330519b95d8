"""Game endpoints: profile, miner upgrades, Guardian stakes, predictions."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from qgame import api_paths
from qgame.auth.dependencies import get_current_user
from qgame.config import Settings, get_settings
from qgame.dependencies import get_storage
from qgame.game.service import make_prediction, place_stake, upgrade_miner
from qgame.schemas import (
    CreatePredictionRequest,
    CreateStakeRequest,
    MinerUpgradeRequest,
    Prediction,
    Stake,
    User,
)
from qgame.storage import InsufficientTokensError, Storage

router = APIRouter(tags=["Game"])


# ---------------------------------------------------------------------------
# User & economy
# ---------------------------------------------------------------------------


@router.get(api_paths.USER_ME, response_model=User)
async def get_me(user: User = Depends(get_current_user)) -> User:
    """Current game user (created on first request)."""
    return user


@router.post(api_paths.USER_UPGRADE_MINER, response_model=User)
async def upgrade_miner_endpoint(
    body: MinerUpgradeRequest,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> User:
    """Spend tokens on a gpu, asic or farm upgrade."""
    try:
        return await upgrade_miner(storage, user, body.type)
    except InsufficientTokensError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


# ---------------------------------------------------------------------------
# Guardian: stakes
# ---------------------------------------------------------------------------


@router.post(api_paths.STAKES_CREATE, response_model=Stake, status_code=201)
async def create_stake(
    body: CreateStakeRequest,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> Stake:
    """Stake tokens on a chain. The stake always belongs to the caller."""
    try:
        return await place_stake(storage, user, body)
    except InsufficientTokensError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


@router.get(api_paths.STAKES_LIST_MINE, response_model=list[Stake])
async def list_my_stakes(
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> list[Stake]:
    return await storage.get_user_stakes(user.id)


# ---------------------------------------------------------------------------
# Predictions
# ---------------------------------------------------------------------------


@router.post(api_paths.PREDICTIONS_CREATE, response_model=Prediction, status_code=201)
async def create_prediction(
    body: CreatePredictionRequest,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> Prediction:
    return await make_prediction(storage, user, body)


@router.get(api_paths.PREDICTIONS_LIST, response_model=list[Prediction])
async def list_predictions(
    storage: Storage = Depends(get_storage),
    settings: Settings = Depends(get_settings),
) -> list[Prediction]:
    """Latest predictions from all players, newest first."""
    return await storage.get_predictions(limit=settings.predictions_page_size)
