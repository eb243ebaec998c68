"""
Checkout, order placement and payment completion against a mocked database.
"""
from datetime import datetime
from types import SimpleNamespace

import pytest
from bson import ObjectId
from fastapi import HTTPException

from conftest import make_cursor
from vendorhub.schemas.checkout import CartBlockRequest, PlaceOrderRequest
from vendorhub.services import checkout_service


@pytest.fixture
def shop(mock_db):
    """One vendor with two products, wired into ``find_one`` lookups."""
    vendor = {"_id": ObjectId(), "name": "Fresh Mart", "packaging_charge": 5, "delivery_charge": 20}
    products = {
        oid: {"_id": oid, "vendor_id": vendor["_id"], "name": name, "main_price": price, "special_price": special}
        for oid, name, price, special in [
            (ObjectId(), "Apples", 100, 80),
            (ObjectId(), "Bread", 40, None),
        ]
    }

    async def find_vendor(query, *args, **kwargs):
        return vendor if query.get("_id") == vendor["_id"] else None

    async def find_product(query, *args, **kwargs):
        return products.get(query.get("_id"))

    mock_db.vendors.find_one.side_effect = find_vendor
    mock_db.products.find_one.side_effect = find_product
    mock_db.carts.insert_many.side_effect = _inserted
    return SimpleNamespace(vendor=vendor, products=list(products.values()))


def _inserted(docs):
    return SimpleNamespace(inserted_ids=[ObjectId() for _ in docs])


def block(vendor_id, *lines):
    return CartBlockRequest.model_validate({
        "vendor": str(vendor_id),
        "products": [{"product_id": str(pid), "quantity": qty} for pid, qty in lines],
    })


class TestCheckout:
    async def test_prices_and_stores_one_cart_per_block(self, mock_db, shop):
        user_id = ObjectId()
        apples, bread = shop.products

        carts = await checkout_service.checkout(
            mock_db, user_id, [block(shop.vendor["_id"], (apples["_id"], 2), (bread["_id"], 1))]
        )

        assert len(carts) == 1
        cart = carts[0]
        assert cart["user"] == user_id
        assert cart["status"] == "New"
        assert cart["subtotal"] == 240.0
        assert cart["discount"] == 40.0
        assert cart["total_payable_amount"] == 225.0
        assert "_id" in cart
        mock_db.carts.delete_many.assert_awaited_once_with({"user": user_id, "status": "New"})

    async def test_unknown_vendor_leaves_old_carts(self, mock_db, shop):
        apples = shop.products[0]
        with pytest.raises(HTTPException) as exc_info:
            await checkout_service.checkout(mock_db, ObjectId(), [block(ObjectId(), (apples["_id"], 1))])

        assert exc_info.value.status_code == 404
        assert exc_info.value.detail.startswith("Vendor not found")
        mock_db.carts.delete_many.assert_not_awaited()
        mock_db.carts.insert_many.assert_not_awaited()

    async def test_unknown_product(self, mock_db, shop):
        with pytest.raises(HTTPException) as exc_info:
            await checkout_service.checkout(mock_db, ObjectId(), [block(shop.vendor["_id"], (ObjectId(), 1))])
        assert exc_info.value.status_code == 404
        assert exc_info.value.detail.startswith("Product not found")

    async def test_product_of_other_vendor_rejected(self, mock_db, shop):
        shop.products[0]["vendor_id"] = ObjectId()
        with pytest.raises(HTTPException) as exc_info:
            await checkout_service.checkout(
                mock_db, ObjectId(), [block(shop.vendor["_id"], (shop.products[0]["_id"], 1))]
            )
        assert exc_info.value.status_code == 400
        mock_db.carts.delete_many.assert_not_awaited()


def place_request(address_id, *cart_ids):
    return PlaceOrderRequest(
        selected_address_id=str(address_id),
        cart_ids=[str(cid) for cid in cart_ids],
        delivery_date=datetime(2024, 5, 2),
        delivery_type="tomorrow",
    )


class TestPlaceOrder:
    async def test_moves_cart_to_placed(self, mock_db):
        user_id, address_id, cart_id = ObjectId(), ObjectId(), ObjectId()
        mock_db.addresses.find_one.return_value = {"_id": address_id, "user": user_id}
        mock_db.carts.find_one.return_value = {"_id": cart_id, "user": user_id, "status": "New"}
        mock_db.carts.find_one_and_update.return_value = {"_id": cart_id, "status": "Placed"}

        orders = await checkout_service.place_order(mock_db, user_id, place_request(address_id, cart_id))

        assert orders == [{"_id": cart_id, "status": "Placed"}]
        query, update = mock_db.carts.find_one_and_update.await_args.args
        assert query == {"_id": cart_id, "status": "New"}
        assert update["$set"]["status"] == "Placed"
        assert update["$set"]["address"] == address_id
        assert update["$set"]["delivery_time"] == "tomorrow"

    async def test_address_of_other_user(self, mock_db):
        mock_db.addresses.find_one.return_value = None
        with pytest.raises(HTTPException) as exc_info:
            await checkout_service.place_order(mock_db, ObjectId(), place_request(ObjectId(), ObjectId()))
        assert exc_info.value.status_code == 404
        assert exc_info.value.detail == "Address not found"

    async def test_cart_of_other_user(self, mock_db):
        mock_db.addresses.find_one.return_value = {"_id": ObjectId()}
        mock_db.carts.find_one.return_value = None
        cart_id = ObjectId()
        with pytest.raises(HTTPException) as exc_info:
            await checkout_service.place_order(mock_db, ObjectId(), place_request(ObjectId(), cart_id))
        assert exc_info.value.detail == f"Cart not found or unauthorized: {cart_id}"

    async def test_already_placed_cart(self, mock_db):
        mock_db.addresses.find_one.return_value = {"_id": ObjectId()}
        mock_db.carts.find_one.return_value = {"_id": ObjectId(), "status": "Placed"}
        with pytest.raises(HTTPException) as exc_info:
            await checkout_service.place_order(mock_db, ObjectId(), place_request(ObjectId(), ObjectId()))
        assert exc_info.value.status_code == 400
        mock_db.carts.find_one_and_update.assert_not_awaited()

    async def test_concurrent_change_is_conflict(self, mock_db):
        mock_db.addresses.find_one.return_value = {"_id": ObjectId()}
        mock_db.carts.find_one.return_value = {"_id": ObjectId(), "status": "New"}
        mock_db.carts.find_one_and_update.return_value = None
        with pytest.raises(HTTPException) as exc_info:
            await checkout_service.place_order(mock_db, ObjectId(), place_request(ObjectId(), ObjectId()))
        assert exc_info.value.status_code == 409


class TestPayments:
    async def test_complete_payment_only_touches_new_carts(self, mock_db):
        mock_db.carts.update_many.return_value = SimpleNamespace(modified_count=2)

        placed = await checkout_service.complete_payment(mock_db, "cs_1", "pi_1")

        assert placed == 2
        query, update = mock_db.carts.update_many.await_args.args
        assert query == {"stripe_session_id": "cs_1", "status": "New"}
        assert update["$set"]["payment_status"] == "Paid"
        assert update["$set"]["status"] == "Placed"
        assert update["$set"]["stripe_payment_intent"] == "pi_1"

    async def test_webhook_completed_and_paid(self, mock_db):
        event = {
            "type": "checkout.session.completed",
            "data": {"object": {"id": "cs_1", "payment_status": "paid", "payment_intent": "pi_1"}},
        }
        assert await checkout_service.handle_webhook_event(mock_db, event) == "payment completed"
        mock_db.carts.update_many.assert_awaited_once()

    async def test_webhook_completed_but_unpaid(self, mock_db):
        event = {"type": "checkout.session.completed", "data": {"object": {"id": "cs_1", "payment_status": "unpaid"}}}
        assert await checkout_service.handle_webhook_event(mock_db, event) == "awaiting payment"
        mock_db.carts.update_many.assert_not_awaited()

    async def test_webhook_expired_marks_failed(self, mock_db):
        event = {"type": "checkout.session.expired", "data": {"object": {"id": "cs_1"}}}
        assert await checkout_service.handle_webhook_event(mock_db, event) == "payment failed"
        update = mock_db.carts.update_many.await_args.args[1]
        assert update["$set"]["payment_status"] == "Failed"

    async def test_webhook_other_events_ignored(self, mock_db):
        event = {"type": "customer.created", "data": {"object": {"id": "cus_1"}}}
        assert await checkout_service.handle_webhook_event(mock_db, event) == "ignored"

    async def test_verify_payment_for_someone_else(self, mock_db, monkeypatch):
        async def fake_retrieve(session_id):
            return {"id": session_id, "payment_status": "paid"}

        monkeypatch.setattr(checkout_service.payment_service, "retrieve_session", fake_retrieve)
        mock_db.carts.find.side_effect = lambda *a, **k: make_cursor([{"_id": ObjectId(), "user": ObjectId()}])

        with pytest.raises(HTTPException) as exc_info:
            await checkout_service.verify_payment(mock_db, ObjectId(), "cs_1")
        assert exc_info.value.status_code == 404
        mock_db.carts.update_many.assert_not_awaited()

    async def test_verify_payment_completes_paid_session(self, mock_db, monkeypatch):
        user_id = ObjectId()

        async def fake_retrieve(session_id):
            return {"id": session_id, "payment_status": "paid", "payment_intent": "pi_9"}

        monkeypatch.setattr(checkout_service.payment_service, "retrieve_session", fake_retrieve)
        mock_db.carts.find.side_effect = lambda *a, **k: make_cursor([{"_id": ObjectId(), "user": user_id}])

        result = await checkout_service.verify_payment(mock_db, user_id, "cs_1")

        assert result["payment_status"] == "paid"
        assert len(result["orders"]) == 1
        mock_db.carts.update_many.assert_awaited_once()
