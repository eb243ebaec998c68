"""
Cart checkout, order placement and order status schemas.
"""
from datetime import datetime
from typing import List, Optional
from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator

from ..models.cart import OrderStatus


class CartLineRequest(BaseModel):
    """One product line inside a vendor block."""
    product_id: Optional[str] = Field(None, validation_alias=AliasChoices("product_id", "product"))
    quantity: int = Field(default=0, description="Units ordered (must be positive)")

    @model_validator(mode="after")
    def require_product_and_quantity(self):
        if not self.product_id or self.quantity <= 0:
            raise ValueError("Invalid product or quantity")
        return self


class CartBlockRequest(BaseModel):
    """All lines bought from one vendor."""
    vendor: Optional[str] = Field(None, description="Vendor ID")
    products: List[CartLineRequest] = Field(default_factory=list)

    @model_validator(mode="after")
    def require_vendor_and_products(self):
        if not self.vendor or not self.products:
            raise ValueError("Each cart entry must include vendor and products")
        return self


class CheckoutRequest(BaseModel):
    """Request schema for ``POST /checkout``."""
    cart: List[CartBlockRequest] = Field(default_factory=list, validate_default=True)

    @field_validator("cart")
    @classmethod
    def require_blocks(cls, v):
        if not v:
            raise ValueError("Cart must be a non-empty array")
        return v


class PlaceOrderRequest(BaseModel):
    """Request schema for ``POST /place-order`` and ``POST /create-stripe-checkout``."""
    selected_address_id: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("selected_address_id", "selectedAddressId"),
        description="Delivery address ID",
    )
    cart_ids: List[str] = Field(
        default_factory=list, validation_alias=AliasChoices("cart_ids", "cartIds"), description="Carts to place"
    )
    delivery_date: Optional[datetime] = Field(
        None, validation_alias=AliasChoices("delivery_date", "deliveryDate"), description="Requested delivery date"
    )
    delivery_type: str = Field(
        default="today",
        validation_alias=AliasChoices("delivery_type", "deliveryType"),
        description="Delivery slot, e.g. today / tomorrow",
    )

    @model_validator(mode="after")
    def require_order_details(self):
        if not self.selected_address_id:
            raise ValueError("Address is required")
        if not self.cart_ids:
            raise ValueError("Cart IDs must be a non-empty array")
        if self.delivery_date is None:
            raise ValueError("Delivery date is required")
        return self


class VerifyPaymentRequest(BaseModel):
    """Request schema for ``POST /verify-stripe-payment``."""
    session_id: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("session_id", "sessionId"),
        description="Stripe Checkout Session ID",
    )


class UpdateOrderStatusRequest(BaseModel):
    """Request schema for an admin status change."""
    status: OrderStatus = Field(..., description="New, Placed, Cancelled, Delivered or Refunded")


class CancelOrderRequest(BaseModel):
    """Request schema for cancelling an order from the portal."""
    cancel_reason: str = Field(..., min_length=1, max_length=500, description="Why the order was cancelled")

    @field_validator("cancel_reason")
    @classmethod
    def strip_reason(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Cancel reason is required")
        return v
