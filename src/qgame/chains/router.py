"""Chain hierarchy endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from qgame import api_paths
from qgame.dependencies import get_storage
from qgame.schemas import Chain
from qgame.storage import Storage

router = APIRouter(tags=["Chains"])


@router.get(api_paths.CHAINS_LIST, response_model=list[Chain])
async def list_chains(storage: Storage = Depends(get_storage)) -> list[Chain]:
    """All chains, prime first, with their live simulated stats."""
    return await storage.get_chains()


@router.get(api_paths.CHAINS_GET, response_model=Chain)
async def get_chain(id: int, storage: Storage = Depends(get_storage)) -> Chain:  # noqa: A002
    chain = await storage.get_chain(id)
    if chain is None:
        raise HTTPException(status_code=404, detail="Chain not found")
    return chain
