"""
Cart checkout and order placement.

``checkout`` turns the client's cart into one stored cart per vendor,
``place_order`` moves carts to ``Placed`` for cash orders and the payment
helpers do the same once Stripe confirms a Checkout Session.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List

from bson import ObjectId
from fastapi import HTTPException
from pymongo import ReturnDocument

from ..models.cart import CartDocument, OrderStatus, PaymentStatus
from ..schemas.checkout import CartBlockRequest, PlaceOrderRequest
from ..utils.dependencies import validate_object_id
from . import payment_service
from .order_lifecycle import ensure_transition
from .pricing import price_cart

logger = logging.getLogger(__name__)


async def _price_block(db, user_id: ObjectId, block: CartBlockRequest) -> Dict[str, Any]:
    vendor_id = validate_object_id(block.vendor, "vendor")
    vendor = await db.vendors.find_one({"_id": vendor_id})
    if not vendor:
        raise HTTPException(status_code=404, detail=f"Vendor not found: {block.vendor}")

    lines = []
    for line in block.products:
        product_id = validate_object_id(line.product_id, "product")
        product = await db.products.find_one({"_id": product_id})
        if not product:
            raise HTTPException(status_code=404, detail=f"Product not found: {line.product_id}")
        if product.get("vendor_id") != vendor_id:
            raise HTTPException(
                status_code=400,
                detail=f"Product {line.product_id} is not sold by vendor {block.vendor}"
            )
        lines.append((product, line.quantity))

    pricing = price_cart(vendor, lines)
    return CartDocument(user=user_id, vendor=vendor_id, **pricing.as_document()).to_mongo()


async def checkout(db, user_id: ObjectId, blocks: List[CartBlockRequest]) -> List[Dict[str, Any]]:
    """
    Replace the user's open carts with freshly priced ones.

    Every block is validated and priced before anything is written, so a bad
    request leaves the previous carts untouched.
    """
    cart_docs = [await _price_block(db, user_id, block) for block in blocks]

    removed = await db.carts.delete_many({"user": user_id, "status": OrderStatus.NEW.value})
    result = await db.carts.insert_many(cart_docs)
    for cart_doc, inserted_id in zip(cart_docs, result.inserted_ids):
        cart_doc["_id"] = inserted_id

    logger.info(
        f"🛒 Checkout for user {user_id}: {len(cart_docs)} cart(s) saved, "
        f"{removed.deleted_count} old cart(s) replaced"
    )
    return cart_docs


async def _load_open_carts(db, user_id: ObjectId, payload: PlaceOrderRequest) -> Dict[str, Any]:
    """Resolve the address and carts of a place-order style request."""
    address_id = validate_object_id(payload.selected_address_id, "address")
    address = await db.addresses.find_one({"_id": address_id, "user": user_id})
    if not address:
        raise HTTPException(status_code=404, detail="Address not found")

    carts = []
    for raw_id in payload.cart_ids:
        cart_id = validate_object_id(raw_id, "cart")
        cart = await db.carts.find_one({"_id": cart_id, "user": user_id})
        if not cart:
            raise HTTPException(status_code=404, detail=f"Cart not found or unauthorized: {raw_id}")
        ensure_transition(cart.get("status"), OrderStatus.PLACED.value)
        carts.append(cart)

    return {"address": address, "carts": carts}


def _delivery_fields(address_id: ObjectId, payload: PlaceOrderRequest) -> Dict[str, Any]:
    return {
        "address": address_id,
        "delivery_date": payload.delivery_date,
        "delivery_time": payload.delivery_type or "today",
        "updated_at": datetime.utcnow(),
    }


async def place_order(db, user_id: ObjectId, payload: PlaceOrderRequest) -> List[Dict[str, Any]]:
    """Attach delivery details and move every cart ``New -> Placed``."""
    loaded = await _load_open_carts(db, user_id, payload)
    update = {**_delivery_fields(loaded["address"]["_id"], payload), "status": OrderStatus.PLACED.value}

    orders = []
    for cart in loaded["carts"]:
        order = await db.carts.find_one_and_update(
            {"_id": cart["_id"], "status": OrderStatus.NEW.value},
            {"$set": update},
            return_document=ReturnDocument.AFTER,
        )
        if order is None:
            raise HTTPException(status_code=409, detail=f"Cart {cart['_id']} was modified, please retry")
        orders.append(order)

    logger.info(f"📦 User {user_id} placed {len(orders)} order(s)")
    return orders


async def start_payment(db, user_id: ObjectId, payload: PlaceOrderRequest) -> Dict[str, Any]:
    """Store delivery details on the carts and open a Stripe Checkout Session for them."""
    payment_service.ensure_payments_enabled()
    loaded = await _load_open_carts(db, user_id, payload)
    carts = loaded["carts"]

    vendor_ids = list({cart["vendor"] for cart in carts})
    vendors = await db.vendors.find({"_id": {"$in": vendor_ids}}, {"name": 1}).to_list(length=None)
    vendor_names = {str(vendor["_id"]): vendor.get("name") for vendor in vendors}

    session = await payment_service.create_checkout_session(carts, vendor_names, str(user_id))

    cart_ids = [cart["_id"] for cart in carts]
    await db.carts.update_many(
        {"_id": {"$in": cart_ids}},
        {"$set": {
            **_delivery_fields(loaded["address"]["_id"], payload),
            "stripe_session_id": session.id,
            "payment_status": PaymentStatus.PENDING.value,
        }},
    )
    return {"session_id": session.id, "url": session.url}


async def complete_payment(db, session_id: str, payment_intent: Any = None) -> int:
    """
    Mark a paid session's carts ``Paid`` and move them ``New -> Placed``.

    Carts that already left ``New`` are not touched, so repeated webhooks and
    verify calls are harmless. Returns the number of carts placed.
    """
    result = await db.carts.update_many(
        {"stripe_session_id": session_id, "status": OrderStatus.NEW.value},
        {"$set": {
            "payment_status": PaymentStatus.PAID.value,
            "status": OrderStatus.PLACED.value,
            "stripe_payment_intent": str(payment_intent) if payment_intent else None,
            "updated_at": datetime.utcnow(),
        }},
    )
    if result.modified_count:
        logger.info(f"💳 Payment completed for session {session_id}: {result.modified_count} order(s) placed")
    return result.modified_count


async def fail_payment(db, session_id: str) -> int:
    """Record a failed or expired session on carts still waiting for it."""
    result = await db.carts.update_many(
        {"stripe_session_id": session_id, "status": OrderStatus.NEW.value},
        {"$set": {"payment_status": PaymentStatus.FAILED.value, "updated_at": datetime.utcnow()}},
    )
    logger.warning(f"⚠️  Payment failed for session {session_id} ({result.modified_count} cart(s))")
    return result.modified_count


def _field(obj: Any, key: str) -> Any:
    if isinstance(obj, dict):
        return obj.get(key)
    return getattr(obj, key, None)


async def handle_webhook_event(db, event: Any) -> str:
    """Apply a verified Stripe event; returns what was done for the response message."""
    event_type = _field(event, "type")
    session = _field(_field(event, "data"), "object")
    session_id = _field(session, "id")

    if event_type in payment_service.COMPLETED_EVENTS:
        if _field(session, "payment_status") != "paid":
            return "awaiting payment"
        await complete_payment(db, session_id, _field(session, "payment_intent"))
        return "payment completed"

    if event_type in payment_service.FAILED_EVENTS:
        await fail_payment(db, session_id)
        return "payment failed"

    logger.info(f"Ignoring Stripe event {event_type}")
    return "ignored"


async def verify_payment(db, user_id: ObjectId, session_id: str) -> Dict[str, Any]:
    """Check a session with Stripe and complete the caller's carts when it is paid."""
    session = await payment_service.retrieve_session(session_id)

    carts = await db.carts.find({"stripe_session_id": session_id}).to_list(length=None)
    if not carts or any(cart.get("user") != user_id for cart in carts):
        raise HTTPException(status_code=404, detail="No orders found for this payment session")

    payment_status = _field(session, "payment_status")
    if payment_status == "paid":
        await complete_payment(db, session_id, _field(session, "payment_intent"))
        carts = await db.carts.find({"stripe_session_id": session_id}).to_list(length=None)

    return {"payment_status": payment_status, "orders": carts}
