"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from qgame.auth.router import router as auth_router
from qgame.auth.storage import create_auth_storage
from qgame.chains.router import router as chains_router
from qgame.chains.seed import seed_chains
from qgame.chains.simulation import ChainSimulator
from qgame.config import get_settings
from qgame.database import close_db, init_db
from qgame.game.router import router as game_router
from qgame.health.router import router as health_router
from qgame.middleware import setup_middleware
from qgame.redis_client import close_redis, init_redis
from qgame.storage import create_storage

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    if settings.storage_backend == "database":
        await init_db(settings.database_url)
    await init_redis(settings.redis_url)

    storage = create_storage(settings)
    app.state.storage = storage
    app.state.auth_storage = create_auth_storage(settings)
    logger.info("storage_ready", backend=settings.storage_backend)

    if settings.seed_on_startup:
        await seed_chains(storage)

    simulator: ChainSimulator | None = None
    if settings.simulation_enabled:
        simulator = ChainSimulator(storage, interval_seconds=settings.simulation_interval_seconds)
        simulator.start()
    app.state.simulator = simulator

    yield

    if simulator is not None:
        await simulator.stop()
    await close_redis()
    await close_db()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="QGame API",
        description="Backend API for the chain hierarchy staking and prediction game",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(auth_router)
    app.include_router(chains_router)
    app.include_router(game_router)

    return app


app = create_app()
