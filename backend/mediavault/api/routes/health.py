"""Health check."""

from fastapi import APIRouter

from mediavault import __version__
from mediavault.config import settings
from mediavault.schemas.system import HealthResponse
from mediavault.services import get_local_store

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Lightweight liveness and readiness check."""
    try:
        storage_ready = get_local_store().is_open
    except RuntimeError:
        storage_ready = False
    return HealthResponse(
        version=__version__,
        storage_ready=storage_ready,
        sync_configured=not settings.sync_config().missing_fields(),
    )


@router.get("/ping")
async def ping():
    """Ultra-lightweight ping."""
    return {"status": "ok"}
