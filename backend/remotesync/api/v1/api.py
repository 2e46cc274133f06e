"""API v1 router."""

from fastapi import APIRouter

from remotesync.api.v1.endpoints import sync

api_router = APIRouter()
api_router.include_router(sync.router, prefix="/sync", tags=["sync"])
