"""Main API router for v1."""
from fastapi import APIRouter

from convention_voting.api.v1.endpoints import admin, voter, watcher

api_router = APIRouter(prefix="/api/v1")

# Include all endpoint routers
api_router.include_router(voter.router, prefix="/voter", tags=["Voter"])
api_router.include_router(watcher.router, prefix="/watcher", tags=["Watcher"])
api_router.include_router(admin.router, prefix="/admin", tags=["Admin"])
