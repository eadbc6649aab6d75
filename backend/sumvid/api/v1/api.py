"""API routes for the FastAPI application."""

from fastapi import APIRouter

from sumvid.api.v1.endpoints import checkout, generation, health, users, webhooks

api_router = APIRouter()
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(users.router, prefix="/user", tags=["user"])
api_router.include_router(checkout.router, prefix="/checkout", tags=["checkout"])
api_router.include_router(generation.router, prefix="/generate", tags=["generate"])
api_router.include_router(webhooks.router, prefix="/webhooks", tags=["webhooks"])
