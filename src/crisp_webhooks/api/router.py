"""Master API router."""

from fastapi import APIRouter

from crisp_webhooks.api.routes import health, incoming

api_router = APIRouter()
api_router.include_router(health.router, tags=["Health"])
api_router.include_router(incoming.router)
