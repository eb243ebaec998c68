"""
Customer app routers, mounted under ``/api/app``.
"""
from fastapi import APIRouter

from . import addresses, auth, checkout, vendors

router = APIRouter()
router.include_router(auth.router)
router.include_router(addresses.router)
router.include_router(vendors.router)
router.include_router(checkout.router)

__all__ = ["router"]
