"""
Cart checkout, order placement and Stripe Checkout payments.
"""
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Header, Request
from motor.motor_asyncio import AsyncIOMotorDatabase

from ...config import get_database
from ...schemas.checkout import CheckoutRequest, PlaceOrderRequest, VerifyPaymentRequest
from ...schemas.common import SuccessResponse, ok
from ...services import checkout_service, payment_service
from ...utils.dependencies import get_current_user
from ...utils.serializers import serialize_docs

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Checkout"])


@router.post("/checkout", status_code=201, response_model=SuccessResponse)
async def checkout(
    payload: CheckoutRequest,
    user: Dict[str, Any] = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """Price the client's cart and store one open cart per vendor."""
    carts = await checkout_service.checkout(db, user["_id"], payload.cart)
    return ok("Cart(s) saved", serialize_docs(carts), count=len(carts))


@router.post("/place-order", response_model=SuccessResponse)
async def place_order(
    payload: PlaceOrderRequest,
    user: Dict[str, Any] = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    orders = await checkout_service.place_order(db, user["_id"], payload)
    return ok("Order placed successfully", serialize_docs(orders), count=len(orders))


@router.post("/create-stripe-checkout", response_model=SuccessResponse)
async def create_stripe_checkout(
    payload: PlaceOrderRequest,
    user: Dict[str, Any] = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """Open a hosted payment page for the selected carts."""
    session = await checkout_service.start_payment(db, user["_id"], payload)
    return ok("Stripe checkout session created", session)


@router.post("/stripe-webhook", response_model=SuccessResponse)
async def stripe_webhook(
    request: Request,
    stripe_signature: str = Header("", alias="Stripe-Signature"),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """Stripe calls this with the raw event body; the signature is checked first."""
    payload = await request.body()
    event = payment_service.construct_event(payload, stripe_signature)
    outcome = await checkout_service.handle_webhook_event(db, event)
    return ok(f"Webhook received: {outcome}", {"received": True})


@router.post("/verify-stripe-payment", response_model=SuccessResponse)
async def verify_stripe_payment(
    payload: VerifyPaymentRequest,
    user: Dict[str, Any] = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """Confirm a payment when the user returns from Stripe; safe to repeat."""
    result = await checkout_service.verify_payment(db, user["_id"], payload.session_id)
    paid = result["payment_status"] == "paid"
    message = "Payment verified successfully" if paid else "Payment not completed yet"
    return ok(
        message,
        {"payment_status": result["payment_status"], "orders": serialize_docs(result["orders"])},
    )
