"""Health, readiness, and version endpoints."""

from fastapi import APIRouter, Depends

from qgame.config import get_settings
from qgame.dependencies import get_storage
from qgame.redis_client import get_redis
from qgame.storage import Storage

router = APIRouter()


@router.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe: returns 200 if the process is alive."""
    return {"status": "healthy"}


@router.get("/ready")
async def readiness(storage: Storage = Depends(get_storage)) -> dict[str, object]:
    """Readiness probe: checks storage and, when configured, Redis."""
    checks: dict[str, object] = {}

    try:
        await storage.ping()
        checks["storage"] = "ok"
    except Exception as exc:
        checks["storage"] = f"error: {exc}"

    if get_settings().redis_url:
        try:
            await get_redis().ping()
            checks["redis"] = "ok"
        except Exception as exc:
            checks["redis"] = f"error: {exc}"

    all_ok = all(v == "ok" for v in checks.values())
    return {"status": "ready" if all_ok else "degraded", "checks": checks}


@router.get("/version")
async def version() -> dict[str, str]:
    """Return API version, environment and storage backend."""
    settings = get_settings()
    return {
        "version": settings.app_version,
        "environment": settings.environment,
        "storage": settings.storage_backend,
    }
