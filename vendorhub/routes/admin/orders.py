"""
Order management for the admin portal.

Orders are carts that left the ``New`` state. Super admins see all of them,
other admins only those of their assigned vendors.
"""
import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from ...config import get_database
from ...models.admin import is_super_admin
from ...models.cart import OrderStatus, PaymentStatus
from ...schemas.checkout import CancelOrderRequest, UpdateOrderStatusRequest
from ...schemas.common import PaginationMeta, SuccessResponse, ok
from ...services import stats_service
from ...services.order_lifecycle import admin_order_scope, ensure_order_access, ensure_transition
from ...utils.dependencies import find_or_404, get_current_admin, has_permission, permission_words
from ...utils.errors import server_error
from ...utils.populate import populate, populate_items
from ...utils.serializers import serialize_docs

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orders", tags=["Orders"])


async def present_orders(
    db: AsyncIOMotorDatabase,
    orders: List[Dict[str, Any]],
    detailed: bool = False,
) -> List[Dict[str, Any]]:
    """Populate user, vendor, delivery address and item products."""
    vendor_fields = {"name": 1, "email": 1, "mobile_number": 1, "address": 1}
    if detailed:
        vendor_fields.update(latitude=1, longitude=1)

    await populate(db.users, orders, "user", {"name": 1, "email": 1, "mobile_number": 1})
    await populate(db.vendors, orders, "vendor", vendor_fields)
    await populate(db.addresses, orders, "address", None, target="delivery_address")
    await populate_items(db.products, orders, {"name": 1, "main_price": 1, "special_price": 1, "image": 1})
    return serialize_docs(orders)


def ensure_can_manage(admin: Dict[str, Any]) -> None:
    if not has_permission(admin, "can_manage_orders"):
        raise HTTPException(
            status_code=403,
            detail=f"You don't have permission to {permission_words('can_manage_orders')}"
        )


async def load_order(db: AsyncIOMotorDatabase, admin: Dict[str, Any], order_id: str) -> Dict[str, Any]:
    order = await find_or_404(db.carts, order_id, "Order")
    ensure_order_access(admin, order)
    return order


async def change_status(
    db: AsyncIOMotorDatabase,
    admin: Dict[str, Any],
    order: Dict[str, Any],
    target: OrderStatus,
    extra: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Apply a lifecycle-checked move; the write is conditional on the status read."""
    ensure_transition(order.get("status"), target.value)

    now = datetime.utcnow()
    update = {"status": target.value, "updated_at": now, **(extra or {})}
    if target == OrderStatus.DELIVERED:
        update["delivered_at"] = now
    if target == OrderStatus.CANCELLED:
        update.update(cancelled_by=admin["_id"], cancelled_at=now)
    if target == OrderStatus.REFUNDED and order.get("payment_status") == PaymentStatus.PAID.value:
        update["payment_status"] = PaymentStatus.REFUNDED.value

    updated = await db.carts.find_one_and_update(
        {"_id": order["_id"], "status": order.get("status")},
        {"$set": update},
        return_document=ReturnDocument.AFTER,
    )
    if updated is None:
        raise HTTPException(status_code=409, detail="Order was modified by another request, please retry")

    logger.info(f"📦 Order {order['_id']}: {order.get('status')} -> {target.value} by {admin.get('email')}")
    return (await present_orders(db, [updated]))[0]


@router.get("", response_model=SuccessResponse)
async def list_orders(
    order_date: Optional[date] = Query(None, description="Only orders created on this UTC day"),
    delivery_date: Optional[date] = Query(None, description="Only orders delivered on this UTC day"),
    status: Optional[OrderStatus] = Query(None, description="Order status; defaults to every placed order"),
    page: int = Query(1, ge=1),
    limit: int = Query(100, ge=1, le=500),
    admin: Dict[str, Any] = Depends(get_current_admin),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """List orders with optional filters, pagination and headline stats"""
    try:
        scope = admin_order_scope(admin)
        filter_query: Dict[str, Any] = dict(scope)

        if order_date:
            start, end = stats_service.day_range(order_date)
            filter_query["created_at"] = {"$gte": start, "$lt": end}
        if delivery_date:
            start, end = stats_service.day_range(delivery_date)
            filter_query["delivery_date"] = {"$gte": start, "$lt": end}

        filter_query["status"] = status.value if status else stats_service.NOT_NEW

        total_orders = await db.carts.count_documents(filter_query)
        orders = await (
            db.carts.find(filter_query)
            .sort("created_at", -1)
            .skip((page - 1) * limit)
            .limit(limit)
            .to_list(length=limit)
        )

        return ok(
            "Orders fetched successfully",
            await present_orders(db, orders),
            pagination=PaginationMeta.build(page, limit, total_orders).as_dict("total_orders"),
            stats=await stats_service.order_stats(db, scope),
        )
    except Exception as e:
        raise server_error("fetch orders", e)


@router.get("/stats", response_model=SuccessResponse)
async def get_order_stats(
    admin: Dict[str, Any] = Depends(get_current_admin),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    try:
        stats = await stats_service.order_stats(db, admin_order_scope(admin))
        return ok("Order statistics fetched successfully", stats)
    except Exception as e:
        raise server_error("fetch order statistics", e)


@router.get("/{order_id}", response_model=SuccessResponse)
async def get_order(
    order_id: str,
    admin: Dict[str, Any] = Depends(get_current_admin),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    order = await load_order(db, admin, order_id)
    data = (await present_orders(db, [order], detailed=True))[0]
    return ok("Order details fetched successfully", data)


@router.put("/{order_id}/status", response_model=SuccessResponse)
async def update_order_status(
    order_id: str,
    payload: UpdateOrderStatusRequest,
    admin: Dict[str, Any] = Depends(get_current_admin),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    ensure_can_manage(admin)
    order = await load_order(db, admin, order_id)
    data = await change_status(db, admin, order, payload.status)
    return ok("Order status updated successfully", data)


@router.put("/{order_id}/deliver", response_model=SuccessResponse)
async def deliver_order(
    order_id: str,
    admin: Dict[str, Any] = Depends(get_current_admin),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    ensure_can_manage(admin)
    order = await load_order(db, admin, order_id)
    data = await change_status(db, admin, order, OrderStatus.DELIVERED)
    return ok("Order marked as delivered", data)


@router.put("/{order_id}/cancel", response_model=SuccessResponse)
async def cancel_order(
    order_id: str,
    payload: CancelOrderRequest,
    admin: Dict[str, Any] = Depends(get_current_admin),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    ensure_can_manage(admin)
    order = await load_order(db, admin, order_id)
    data = await change_status(db, admin, order, OrderStatus.CANCELLED, {"cancel_reason": payload.cancel_reason})
    return ok("Order cancelled successfully", data)


@router.delete("/{order_id}", response_model=SuccessResponse)
async def delete_order(
    order_id: str,
    admin: Dict[str, Any] = Depends(get_current_admin),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """Orders are never removed; deleting one cancels it on the admin's behalf."""
    ensure_can_manage(admin)
    order = await load_order(db, admin, order_id)
    reason = "Cancelled by super admin" if is_super_admin(admin) else "Cancelled by admin"
    data = await change_status(db, admin, order, OrderStatus.CANCELLED, {"cancel_reason": reason})
    return ok("Order cancelled successfully", data)
