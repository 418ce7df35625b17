"""
API Router
"""

from fastapi import APIRouter

from app.api.health import router as health_router
from app.api.user.auth import router as auth_router
from app.api.user.friends import router as friends_router

api_router = APIRouter()

# 1. Routes that DON'T need authentication
api_router.include_router(health_router)
api_router.include_router(auth_router)

# 2. Routes that DO need authentication (each endpoint resolves the caller)
api_router.include_router(friends_router)
