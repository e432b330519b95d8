"""Chain hierarchy seed: one prime chain, three regions, three zones per region."""

from __future__ import annotations

import structlog

from qgame.schemas import NewChain
from qgame.storage import Storage

logger = structlog.get_logger()

PRIME_CHAIN: dict = {
    "name": "Prime Chain",
    "tier": "prime",
    "tps": 5000,
    "difficulty": 100,
    "active_miners": 5000,
    "health": 100,
}

REGION_NAMES: list[str] = ["Cyprus", "Paxos", "Hydra"]
ZONES_PER_REGION = 3

REGION_STATS: dict = {"tps": 1500, "difficulty": 50, "active_miners": 1500, "health": 100}
ZONE_STATS: dict = {"tps": 300, "difficulty": 10, "active_miners": 200, "health": 100}


async def seed_chains(storage: Storage) -> int:
    """Create the chain tree if no chain exists. Returns the number created."""
    if await storage.get_chains():
        return 0

    created = 0
    prime = await storage.create_chain(NewChain(parent_id=None, **PRIME_CHAIN))
    created += 1

    for region_name in REGION_NAMES:
        region = await storage.create_chain(
            NewChain(name=region_name, tier="region", parent_id=prime.id, **REGION_STATS)
        )
        created += 1
        for i in range(1, ZONES_PER_REGION + 1):
            await storage.create_chain(
                NewChain(name=f"{region_name} Zone {i}", tier="zone", parent_id=region.id, **ZONE_STATS)
            )
            created += 1

    logger.info("chains_seeded", count=created)
    return created
