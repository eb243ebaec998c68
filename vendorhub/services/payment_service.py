"""
Hosted payment integration (Stripe Checkout).

The Stripe SDK is synchronous, so calls run in the threadpool. Payment is
optional: without ``STRIPE_SECRET_KEY`` every entry point answers 503.
"""
import logging
from typing import Any, Dict, List

import stripe
from fastapi import HTTPException
from starlette.concurrency import run_in_threadpool

from ..config import settings

logger = logging.getLogger(__name__)

COMPLETED_EVENTS = {"checkout.session.completed", "checkout.session.async_payment_succeeded"}
FAILED_EVENTS = {"checkout.session.expired", "checkout.session.async_payment_failed"}


def to_minor_units(amount: float) -> int:
    """Stripe amounts are integers in the currency's smallest unit."""
    return int(round(float(amount) * 100))


def ensure_payments_enabled() -> None:
    if not settings.payments_enabled:
        raise HTTPException(status_code=503, detail="Payment integration is not configured")


def build_line_items(carts: List[Dict[str, Any]], vendor_names: Dict[str, str]) -> List[Dict[str, Any]]:
    """One Checkout line item per cart, priced at its payable total."""
    line_items = []
    for cart in carts:
        vendor_name = vendor_names.get(str(cart["vendor"]), "Vendor")
        line_items.append({
            "quantity": 1,
            "price_data": {
                "currency": settings.stripe_currency,
                "unit_amount": to_minor_units(cart["total_payable_amount"]),
                "product_data": {
                    "name": f"Order from {vendor_name}",
                    "description": f"{cart.get('total_quantity', 0)} item(s)",
                },
            },
        })
    return line_items


async def create_checkout_session(
    carts: List[Dict[str, Any]],
    vendor_names: Dict[str, str],
    user_id: str,
) -> Any:
    """Create a Checkout Session covering the given carts."""
    ensure_payments_enabled()
    cart_ids = ",".join(str(cart["_id"]) for cart in carts)
    base_url = settings.frontend_url.rstrip("/")

    session = await run_in_threadpool(
        stripe.checkout.Session.create,
        api_key=settings.stripe_secret_key,
        mode="payment",
        line_items=build_line_items(carts, vendor_names),
        success_url=f"{base_url}/payment-success?session_id={{CHECKOUT_SESSION_ID}}",
        cancel_url=f"{base_url}/cart",
        client_reference_id=user_id,
        metadata={"cart_ids": cart_ids, "user_id": user_id},
    )
    logger.info(f"Stripe session {session.id} created for carts {cart_ids}")
    return session


async def retrieve_session(session_id: str) -> Any:
    ensure_payments_enabled()
    try:
        return await run_in_threadpool(
            stripe.checkout.Session.retrieve, session_id, api_key=settings.stripe_secret_key
        )
    except stripe.InvalidRequestError as e:
        raise HTTPException(status_code=404, detail=f"Payment session not found: {session_id}") from e


def construct_event(payload: bytes, signature: str) -> Any:
    """Verify a webhook payload against the endpoint secret."""
    ensure_payments_enabled()
    if not settings.stripe_webhook_secret:
        raise HTTPException(status_code=503, detail="Stripe webhook secret is not configured")
    try:
        return stripe.Webhook.construct_event(payload, signature, settings.stripe_webhook_secret)
    except ValueError as e:
        raise HTTPException(status_code=400, detail="Invalid webhook payload") from e
    except stripe.SignatureVerificationError as e:
        raise HTTPException(status_code=400, detail="Invalid webhook signature") from e
