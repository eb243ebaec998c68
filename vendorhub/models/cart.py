"""
Cart / order data models for database documents.

A cart is scoped to one user and one vendor. It stays a cart while its status
is ``New``; placing it turns the same document into an order.
"""
from enum import Enum
from typing import List, Optional
from datetime import datetime
from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field

from .base import MongoDocument


class OrderStatus(str, Enum):
    NEW = "New"
    PLACED = "Placed"
    CANCELLED = "Cancelled"
    DELIVERED = "Delivered"
    REFUNDED = "Refunded"


class PaymentStatus(str, Enum):
    PENDING = "Pending"
    PAID = "Paid"
    FAILED = "Failed"
    REFUNDED = "Refunded"


# Statuses that count towards revenue
REVENUE_STATUSES = [OrderStatus.PLACED.value, OrderStatus.DELIVERED.value]


class CartItemDocument(BaseModel):
    """Line item snapshot taken at checkout time."""
    product: ObjectId = Field(..., description="Product reference")
    name: Optional[str] = Field(None, description="Product name at checkout")
    quantity: int = Field(..., ge=1)
    main_price: float = Field(..., ge=0)
    special_price: Optional[float] = Field(None, ge=0)
    item_total: float = Field(..., ge=0, description="quantity * effective price")

    model_config = ConfigDict(arbitrary_types_allowed=True)


class CartDocument(MongoDocument):
    """Cart document as stored in the ``carts`` collection."""
    user: ObjectId = Field(...)
    vendor: ObjectId = Field(...)
    address: Optional[ObjectId] = Field(None)
    delivery_date: Optional[datetime] = Field(None)
    delivery_time: Optional[str] = Field(None)

    items: List[CartItemDocument] = Field(default_factory=list)

    # price breakdown
    subtotal: float = Field(default=0, ge=0)
    discount: float = Field(default=0, ge=0)
    packaging_charge: float = Field(default=0, ge=0)
    delivery_charge: float = Field(default=0, ge=0)
    convenience_charge: float = Field(default=0, ge=0)

    # totals
    total_quantity: int = Field(default=0, ge=0)
    total_payable_amount: float = Field(default=0, ge=0)

    # payment info
    payment_status: PaymentStatus = Field(default=PaymentStatus.PENDING)
    stripe_session_id: Optional[str] = Field(None)
    stripe_payment_intent: Optional[str] = Field(None)

    status: OrderStatus = Field(default=OrderStatus.NEW)

    # set when the order leaves Placed
    cancel_reason: Optional[str] = Field(None)
    cancelled_by: Optional[ObjectId] = Field(None, description="Admin who cancelled the order")
    cancelled_at: Optional[datetime] = Field(None)
    delivered_at: Optional[datetime] = Field(None)
