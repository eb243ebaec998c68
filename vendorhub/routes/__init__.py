"""
API routers grouped by audience.
"""
from .admin import router as admin_router
from .app import router as app_router

__all__ = ["admin_router", "app_router"]
