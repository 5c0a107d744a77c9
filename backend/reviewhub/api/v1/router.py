"""API v1 router -- aggregates all v1 endpoint routers."""

from fastapi import APIRouter

from reviewhub.api.v1 import app_info, health, reviews, search, stats

api_v1_router = APIRouter()

api_v1_router.include_router(health.router, tags=["health"])
api_v1_router.include_router(reviews.router, prefix="/reviews", tags=["reviews"])
api_v1_router.include_router(app_info.router, prefix="/app-info", tags=["app-info"])
api_v1_router.include_router(stats.router, prefix="/stats", tags=["stats"])
api_v1_router.include_router(search.router, prefix="/search", tags=["search"])
