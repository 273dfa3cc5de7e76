"""API Routes module"""
from fastapi import APIRouter

from .workflows import router as workflows_router
from .templates import router as templates_router
from .accounts import router as accounts_router
from .notifications import router as notifications_router

# Main API router
api_router = APIRouter()

# Include all route modules
api_router.include_router(workflows_router, prefix="/workflows", tags=["Workflows"])
api_router.include_router(templates_router, prefix="/templates", tags=["Templates"])
api_router.include_router(accounts_router, prefix="/accounts", tags=["Accounts"])
api_router.include_router(notifications_router, prefix="/notifications", tags=["Notifications"])

__all__ = ["api_router"]
