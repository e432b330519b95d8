"""Background task that jitters chain statistics to simulate a live network."""

from __future__ import annotations

import asyncio
import random

import structlog

from qgame.schemas import Chain, ChainStatsUpdate, utcnow
from qgame.storage import Storage

logger = structlog.get_logger()

TPS_SWING = 50.0
DIFFICULTY_SWING = 0.1
MIN_DIFFICULTY = 1.0
MINER_SWING = 5
HEALTH_SWING = 2.0


def next_stats(chain: Chain, rng: random.Random) -> ChainStatsUpdate:
    """One random step for a single chain."""
    tps = max(0.0, chain.tps + (rng.random() - 0.5) * TPS_SWING)
    difficulty = max(MIN_DIFFICULTY, chain.difficulty + (rng.random() - 0.5) * DIFFICULTY_SWING)
    active_miners = max(0, chain.active_miners + rng.randint(-MINER_SWING, MINER_SWING))
    health = min(100.0, max(0.0, chain.health + (rng.random() - 0.5) * HEALTH_SWING))
    return ChainStatsUpdate(
        tps=round(tps, 2),
        difficulty=round(difficulty, 2),
        active_miners=active_miners,
        health=round(health, 2),
        last_block_time=utcnow(),
    )


class ChainSimulator:
    """Periodically applies next_stats() to every chain in storage."""

    def __init__(
        self,
        storage: Storage,
        interval_seconds: float = 2.0,
        rng: random.Random | None = None,
    ) -> None:
        self.storage = storage
        self.interval_seconds = interval_seconds
        self.rng = rng or random.Random()
        self._running = False
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._running

    async def tick(self) -> int:
        """Update every chain once. Returns the number of chains updated."""
        chains = await self.storage.get_chains()
        for chain in chains:
            await self.storage.update_chain_stats(chain.id, next_stats(chain, self.rng))
        return len(chains)

    async def run(self) -> None:
        """Tick until stopped. A failing tick is logged and the loop goes on."""
        self._running = True
        logger.info("chain_simulator_started", interval_seconds=self.interval_seconds)
        while self._running:
            await asyncio.sleep(self.interval_seconds)
            try:
                await self.tick()
            except Exception:
                logger.exception("chain_simulator_tick_failed")

    def start(self) -> asyncio.Task[None]:
        """Schedule run() on the current event loop."""
        self._task = asyncio.create_task(self.run())
        return self._task

    async def stop(self) -> None:
        self._running = False
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("chain_simulator_stopped")
