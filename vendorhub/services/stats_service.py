"""
Order statistics and dashboard aggregations.

All date windows are computed in UTC on naive datetimes, matching what Motor
returns for stored timestamps.
"""
import logging
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from ..models.cart import OrderStatus, REVENUE_STATUSES

logger = logging.getLogger(__name__)

NOT_NEW = {"$ne": OrderStatus.NEW.value}
REVENUE_PERIODS = ("7days", "30days", "thisMonth", "lastMonth")


def day_range(day: date) -> Tuple[datetime, datetime]:
    """``[start, end)`` of a UTC calendar day."""
    start = datetime(day.year, day.month, day.day)
    return start, start + timedelta(days=1)


def month_range(now: datetime) -> Tuple[datetime, datetime]:
    """``[start, end)`` of the calendar month containing ``now``."""
    start = datetime(now.year, now.month, 1)
    if now.month == 12:
        end = datetime(now.year + 1, 1, 1)
    else:
        end = datetime(now.year, now.month + 1, 1)
    return start, end


def revenue_period(period: Optional[str], now: datetime) -> Tuple[datetime, datetime]:
    """Date window for the revenue chart; unknown periods fall back to 7 days."""
    if period == "30days":
        return now - timedelta(days=30), now
    if period == "thisMonth":
        return datetime(now.year, now.month, 1), now
    if period == "lastMonth":
        this_month = datetime(now.year, now.month, 1)
        last_month_end = this_month - timedelta(days=1)
        return datetime(last_month_end.year, last_month_end.month, 1), this_month
    return now - timedelta(days=7), now


def fill_daily_series(rows: List[Dict[str, Any]], today: date, days: int = 7) -> List[Dict[str, Any]]:
    """One entry per day ending today, with zero counts for days without orders."""
    by_day = {row["_id"]: row for row in rows}
    series = []
    for offset in range(days - 1, -1, -1):
        day = (today - timedelta(days=offset)).isoformat()
        row = by_day.get(day, {})
        series.append({
            "date": day,
            "count": row.get("count", 0),
            "revenue": round(row.get("revenue", 0), 2),
        })
    return series


def _daily_group(count_key: str = "count") -> Dict[str, Any]:
    return {
        "$group": {
            "_id": {"$dateToString": {"format": "%Y-%m-%d", "date": "$created_at"}},
            count_key: {"$sum": 1},
            "revenue": {"$sum": "$total_payable_amount"},
        }
    }


async def _aggregate(db, pipeline: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return await db.carts.aggregate(pipeline).to_list(length=None)


async def sum_revenue(db, match: Dict[str, Any]) -> float:
    """Sum ``total_payable_amount`` over revenue-counting orders matching ``match``."""
    rows = await _aggregate(db, [
        {"$match": {**match, "status": {"$in": REVENUE_STATUSES}}},
        {"$group": {"_id": None, "total": {"$sum": "$total_payable_amount"}}},
    ])
    return round(rows[0]["total"], 2) if rows else 0


async def order_stats(db, scope: Dict[str, Any], now: Optional[datetime] = None) -> Dict[str, Any]:
    """Headline order numbers for the orders page, restricted to ``scope``."""
    now = now or datetime.utcnow()
    today_start, today_end = day_range(now.date())
    month_start, month_end = month_range(now)
    today = {"$gte": today_start, "$lt": today_end}
    month = {"$gte": month_start, "$lt": month_end}

    count = db.carts.count_documents
    return {
        "total_orders": await count({**scope, "status": NOT_NEW}),
        "total_revenue": await sum_revenue(db, scope),
        "today_orders": await count({**scope, "created_at": today, "status": NOT_NEW}),
        "today_revenue": await sum_revenue(db, {**scope, "created_at": today}),
        "today_deliveries": await count({**scope, "delivery_date": today, "status": NOT_NEW}),
        "month_orders": await count({**scope, "created_at": month, "status": NOT_NEW}),
        "month_revenue": await sum_revenue(db, {**scope, "created_at": month}),
        "pending_orders": await count({**scope, "status": OrderStatus.PLACED.value}),
        "delivered_orders": await count({**scope, "status": OrderStatus.DELIVERED.value}),
        "cancelled_orders": await count({**scope, "status": OrderStatus.CANCELLED.value}),
    }


async def top_vendors(db, scope: Dict[str, Any], limit: int = 5) -> List[Dict[str, Any]]:
    return await _aggregate(db, [
        {"$match": {**scope, "status": {"$in": REVENUE_STATUSES}}},
        {"$group": {"_id": "$vendor", "total_revenue": {"$sum": "$total_payable_amount"}, "total_orders": {"$sum": 1}}},
        {"$sort": {"total_revenue": -1}},
        {"$limit": limit},
        {"$lookup": {"from": "vendors", "localField": "_id", "foreignField": "_id", "as": "vendor"}},
        {"$unwind": "$vendor"},
        {"$project": {
            "_id": 1,
            "name": "$vendor.name",
            "email": "$vendor.email",
            "vendor_image": "$vendor.vendor_image",
            "total_revenue": 1,
            "total_orders": 1,
        }},
    ])


async def top_products(db, scope: Dict[str, Any], limit: int = 5) -> List[Dict[str, Any]]:
    return await _aggregate(db, [
        {"$match": {**scope, "status": {"$in": REVENUE_STATUSES}}},
        {"$unwind": "$items"},
        {"$group": {
            "_id": "$items.product",
            "total_quantity": {"$sum": "$items.quantity"},
            "total_revenue": {"$sum": "$items.item_total"},
            "product_name": {"$first": "$items.name"},
        }},
        {"$sort": {"total_quantity": -1}},
        {"$limit": limit},
        {"$lookup": {"from": "products", "localField": "_id", "foreignField": "_id", "as": "product"}},
        {"$project": {
            "_id": 1,
            # the product may have been deleted since; fall back to the checkout snapshot
            "name": {"$ifNull": [{"$arrayElemAt": ["$product.name", 0]}, "$product_name"]},
            "image": {"$arrayElemAt": ["$product.image", 0]},
            "total_quantity": 1,
            "total_revenue": 1,
        }},
    ])


async def top_users(db, scope: Dict[str, Any], limit: int = 5) -> List[Dict[str, Any]]:
    return await _aggregate(db, [
        {"$match": {**scope, "status": {"$in": REVENUE_STATUSES}}},
        {"$group": {"_id": "$user", "total_spent": {"$sum": "$total_payable_amount"}, "total_orders": {"$sum": 1}}},
        {"$sort": {"total_spent": -1}},
        {"$limit": limit},
        {"$lookup": {"from": "users", "localField": "_id", "foreignField": "_id", "as": "user"}},
        {"$unwind": "$user"},
        {"$project": {
            "_id": 1,
            "name": "$user.name",
            "email": "$user.email",
            "mobile_number": "$user.mobile_number",
            "total_spent": 1,
            "total_orders": 1,
        }},
    ])


async def dashboard_overview(db, scope: Dict[str, Any], now: Optional[datetime] = None) -> Dict[str, Any]:
    """Everything the portal dashboard shows on its first screen."""
    now = now or datetime.utcnow()
    stats = await order_stats(db, scope, now)

    week_start, _ = day_range(now.date() - timedelta(days=6))
    daily_rows = await _aggregate(db, [
        {"$match": {**scope, "created_at": {"$gte": week_start}, "status": NOT_NEW}},
        _daily_group(),
        {"$sort": {"_id": 1}},
    ])

    recent = await (
        db.carts.find(
            {**scope, "status": NOT_NEW},
            {"user": 1, "vendor": 1, "total_payable_amount": 1, "status": 1, "created_at": 1},
        )
        .sort("created_at", -1)
        .limit(5)
        .to_list(length=5)
    )

    vendor_filter = {"status": 1}
    if "vendor" in scope:
        vendor_filter["_id"] = scope["vendor"]
    product_filter = {"is_active": True}
    if "vendor" in scope:
        product_filter["vendor_id"] = scope["vendor"]

    return {
        "overview": {
            "total_vendors": await db.vendors.count_documents(vendor_filter),
            "total_products": await db.products.count_documents(product_filter),
            "total_users": await db.users.count_documents({}),
            "total_orders": stats["total_orders"],
            "total_revenue": stats["total_revenue"],
            "pending_orders": stats["pending_orders"],
            "delivered_orders": stats["delivered_orders"],
            "cancelled_orders": stats["cancelled_orders"],
        },
        "today": {
            "orders": stats["today_orders"],
            "revenue": stats["today_revenue"],
            "deliveries": stats["today_deliveries"],
        },
        "this_month": {
            "orders": stats["month_orders"],
            "revenue": stats["month_revenue"],
        },
        "top_vendors": await top_vendors(db, scope),
        "top_products": await top_products(db, scope),
        "top_users": await top_users(db, scope),
        "daily_orders": fill_daily_series(daily_rows, now.date()),
        "recent_orders": recent,
    }


async def revenue_stats(db, scope: Dict[str, Any], period: Optional[str], now: Optional[datetime] = None) -> List[Dict[str, Any]]:
    """Revenue and order count per day over ``period``."""
    start, end = revenue_period(period, now or datetime.utcnow())
    rows = await _aggregate(db, [
        {"$match": {**scope, "created_at": {"$gte": start, "$lt": end}, "status": {"$in": REVENUE_STATUSES}}},
        _daily_group("orders"),
        {"$sort": {"_id": 1}},
    ])
    return [{"date": row["_id"], "revenue": round(row["revenue"], 2), "orders": row["orders"]} for row in rows]
