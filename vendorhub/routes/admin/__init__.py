"""
Admin portal routers, mounted under ``/api/admin``.
"""
from fastapi import APIRouter

from . import admins, dashboard, modules, orders, products, users, vendors

router = APIRouter()
router.include_router(admins.router)
router.include_router(modules.router)
router.include_router(vendors.router)
router.include_router(products.router)
router.include_router(orders.router)
router.include_router(users.router)
router.include_router(dashboard.router)

__all__ = ["router"]
