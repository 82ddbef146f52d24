"""Main API router for v1."""
from fastapi import APIRouter

from inec_poll.api.v1.endpoints import polls, profiles

api_router = APIRouter(prefix="/api/v1")

# Include all endpoint routers
api_router.include_router(polls.router, prefix="/polls", tags=["Polls"])
api_router.include_router(profiles.router, prefix="/profiles", tags=["Profiles"])
