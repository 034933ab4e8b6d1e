from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from model_vault import __version__
from model_vault.infrastructure.observability import get_api_logger
from model_vault.storage import LocalFileStore
from model_vault_api.dependencies import get_file_store

logger = get_api_logger("health")

router = APIRouter(tags=["health"])


async def check_storage(store: LocalFileStore) -> bool:
    """Check the file store directory is reachable."""
    available = store.is_available()
    if not available:
        logger.error("storage_health_check_failed", root=str(store.root))
    return available


@router.get("/health")
async def health_check(
    store: LocalFileStore = Depends(get_file_store),
) -> dict[str, Any]:
    """Comprehensive health check endpoint."""
    health_status = {
        "status": "healthy",
        "services": {
            "storage": await check_storage(store),
        },
        "version": __version__,
    }

    # If any service is unhealthy, return 503
    if not all(health_status["services"].values()):
        health_status["status"] = "unhealthy"
        raise HTTPException(status_code=503, detail=health_status)

    return health_status


@router.get("/ready")
async def readiness_check() -> dict[str, Any]:
    """Readiness check for Kubernetes."""
    return {"status": "ready"}
