"""API route registration."""

from fastapi import APIRouter

from mediavault.api.routes import blobs, files, health, library, sync

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(files.router, prefix="/files", tags=["files"])
api_router.include_router(blobs.router, prefix="/blobs", tags=["files"])
api_router.include_router(library.router, prefix="/library", tags=["library"])
api_router.include_router(sync.router, prefix="/sync", tags=["sync"])
