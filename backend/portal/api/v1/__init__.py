"""API v1 routes."""

from fastapi import APIRouter

from portal.api.v1.endpoints import auth, share_links, shoots, system

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(shoots.router, prefix="/shoots", tags=["Shoots"])
api_router.include_router(share_links.router, prefix="/share-links", tags=["Share Links"])
api_router.include_router(system.router, prefix="/system", tags=["System"])
