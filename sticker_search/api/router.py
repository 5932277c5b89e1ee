"""API router that aggregates all routes."""

from fastapi import APIRouter

from sticker_search.api.routes import health

api_router = APIRouter(prefix="/api")

api_router.include_router(health.router)
