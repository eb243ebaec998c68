"""
Order status transitions and role-scoped order visibility.
"""
from typing import Any, Dict, FrozenSet

from fastapi import HTTPException

from ..models.admin import admin_vendor_ids, has_vendor_access, is_super_admin
from ..models.cart import OrderStatus

TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.NEW: frozenset({OrderStatus.PLACED}),
    OrderStatus.PLACED: frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED, OrderStatus.REFUNDED}),
    OrderStatus.DELIVERED: frozenset({OrderStatus.REFUNDED}),
    OrderStatus.CANCELLED: frozenset({OrderStatus.REFUNDED}),
    OrderStatus.REFUNDED: frozenset(),
}


def can_transition(current: str, target: str) -> bool:
    try:
        return OrderStatus(target) in TRANSITIONS[OrderStatus(current)]
    except ValueError:
        return False


def ensure_transition(current: str, target: str) -> None:
    """Raise 400 unless ``current -> target`` is an allowed move."""
    if current == target:
        raise HTTPException(status_code=400, detail=f"Order is already {current}")
    if not can_transition(current, target):
        raise HTTPException(status_code=400, detail=f"Cannot move order from {current} to {target}")


def admin_order_scope(admin: Dict[str, Any]) -> Dict[str, Any]:
    """Mongo filter restricting orders to the vendors an admin may see."""
    if is_super_admin(admin):
        return {}
    return {"vendor": {"$in": admin_vendor_ids(admin)}}


def ensure_order_access(admin: Dict[str, Any], order: Dict[str, Any]) -> None:
    vendor = order.get("vendor")
    if isinstance(vendor, dict):
        vendor = vendor.get("_id")
    if not has_vendor_access(admin, vendor):
        raise HTTPException(status_code=403, detail="You do not have access to this order")
