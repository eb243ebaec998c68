"""
Dashboard statistics for the admin portal.
"""
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from motor.motor_asyncio import AsyncIOMotorDatabase

from ...config import get_database
from ...schemas.common import SuccessResponse, ok
from ...services import stats_service
from ...services.order_lifecycle import admin_order_scope
from ...utils.dependencies import get_current_admin
from ...utils.errors import server_error
from ...utils.populate import populate
from ...utils.serializers import convert_object_ids

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/overview", response_model=SuccessResponse)
async def get_overview(
    admin: Dict[str, Any] = Depends(get_current_admin),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """Counts, top performers, the last 7 days and the latest orders."""
    try:
        data = await stats_service.dashboard_overview(db, admin_order_scope(admin))
        await populate(db.users, data["recent_orders"], "user", {"name": 1, "email": 1})
        await populate(db.vendors, data["recent_orders"], "vendor", {"name": 1})
        return ok("Dashboard data fetched successfully", convert_object_ids(data))
    except Exception as e:
        raise server_error("fetch dashboard data", e)


@router.get("/revenue-stats", response_model=SuccessResponse)
async def get_revenue_stats(
    period: Optional[str] = Query("7days", description="7days, 30days, thisMonth or lastMonth"),
    admin: Dict[str, Any] = Depends(get_current_admin),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    if period not in stats_service.REVENUE_PERIODS:
        logger.info(f"Unknown revenue period {period!r}, using 7days")
        period = "7days"

    try:
        rows = await stats_service.revenue_stats(db, admin_order_scope(admin), period)
        return ok("Revenue statistics fetched successfully", rows, period=period)
    except Exception as e:
        raise server_error("fetch revenue statistics", e)
