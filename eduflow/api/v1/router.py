"""Main API router combining all v1 endpoints"""
from fastapi import APIRouter

from eduflow.api.v1 import auth, dashboard, dev_auth, health, superadmins

api_router = APIRouter()

api_router.include_router(health.router, tags=["Health"])
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["Dashboard"])
api_router.include_router(dev_auth.router, prefix="/dev/auth", tags=["Developer Auth"])
api_router.include_router(superadmins.router, prefix="/dev", tags=["Developer Portal"])
