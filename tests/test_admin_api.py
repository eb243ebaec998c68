"""
HTTP-level tests for the admin portal: admins, modules, vendors, products,
customers and the dashboard.
"""
import pytest
from bson import ObjectId

from conftest import login_admin, make_cursor

FORBIDDEN_ROLE = "Access denied. Insufficient permissions."


@pytest.fixture
def vendor(vendor_id):
    return {
        "_id": vendor_id,
        "name": "Spice Route",
        "email": "spice@example.com",
        "latitude": "18.5",
        "longitude": "73.8",
        "status": 1,
    }


@pytest.fixture
def product(vendor_id):
    return {
        "_id": ObjectId(),
        "vendor_id": vendor_id,
        "name": "Thali",
        "main_price": 100.0,
        "special_price": 80.0,
        "is_active": True,
    }


def vendor_payload(**overrides):
    payload = {
        "name": "Spice Route",
        "email": "spice@example.com",
        "mobile_number": 9876543210,
        "address": "12 Market Street",
        "latitude": "18.5",
        "longitude": "73.8",
        "open_time": "09:00",
        "close_time": "22:00",
        "module": str(ObjectId()),
    }
    payload.update(overrides)
    return payload


class TestAdminManagement:
    async def test_listing_needs_super_admin(self, client, mock_db, vendor_admin):
        headers = login_admin(mock_db, vendor_admin)

        response = await client.get("/api/admin/admins", headers=headers)

        assert response.status_code == 403
        assert response.json()["message"] == FORBIDDEN_ROLE

    async def test_creating_needs_super_admin(self, client, mock_db, vendor_admin):
        headers = login_admin(mock_db, vendor_admin)
        payload = {"name": "New Admin", "email": "new@example.com", "password": "secret1"}

        response = await client.post("/api/admin/admins", json=payload, headers=headers)

        assert response.status_code == 403
        mock_db.admins.insert_one.assert_not_awaited()

    async def test_duplicate_email(self, client, mock_db, super_admin):
        # every admins.find_one resolves to an existing account
        headers = login_admin(mock_db, super_admin)
        payload = {"name": "New Admin", "email": "Store@Example.com", "password": "secret1"}

        response = await client.post("/api/admin/admins", json=payload, headers=headers)

        assert response.status_code == 409
        assert response.json()["message"] == "Admin with this email already exists"
        assert mock_db.admins.find_one.await_args.args[0] == {"email": "store@example.com"}
        mock_db.admins.insert_one.assert_not_awaited()

    async def test_assign_vendors_adds_each_once(self, client, mock_db, super_admin, vendor_id):
        headers = login_admin(mock_db, super_admin)
        target_id = ObjectId()
        mock_db.vendors.count_documents.return_value = 1
        mock_db.admins.find_one_and_update.return_value = {
            "_id": target_id,
            "email": "store@example.com",
            "role": "admin",
            "vendor_ids": [vendor_id],
        }

        response = await client.post(
            f"/api/admin/admins/{target_id}/assign-vendors",
            json={"vendor_ids": [str(vendor_id), str(vendor_id)]},
            headers=headers,
        )

        assert response.status_code == 200
        query, update = mock_db.admins.find_one_and_update.await_args.args
        assert query == {"_id": target_id}
        assert update["$addToSet"] == {"vendor_ids": {"$each": [vendor_id]}}
        assert "vendor_ids" not in update["$set"]

    async def test_assign_unknown_vendor(self, client, mock_db, super_admin):
        headers = login_admin(mock_db, super_admin)

        response = await client.post(
            f"/api/admin/admins/{ObjectId()}/assign-vendors",
            json={"vendor_ids": [str(ObjectId())]},
            headers=headers,
        )

        assert response.status_code == 404
        assert response.json()["message"] == "One or more vendor IDs are invalid"
        mock_db.admins.find_one_and_update.assert_not_awaited()


class TestVerifyVendor:
    async def test_caller_needs_permission(self, client, mock_db, vendor_admin, vendor_id):
        headers = login_admin(mock_db, vendor_admin)

        response = await client.put(
            f"/api/admin/admins/{ObjectId()}/verify-vendor/{vendor_id}", headers=headers
        )

        assert response.status_code == 403
        assert response.json()["message"] == "You don't have permission to verify vendors"

    async def test_target_needs_permission(self, client, mock_db, super_admin, vendor_admin, vendor_id):
        headers = login_admin(mock_db, super_admin)
        mock_db.admins.find_one.side_effect = [dict(super_admin), dict(vendor_admin)]

        response = await client.put(
            f"/api/admin/admins/{vendor_admin['_id']}/verify-vendor/{vendor_id}", headers=headers
        )

        assert response.status_code == 403
        assert response.json()["message"] == "You do not have permission to verify vendors"
        mock_db.vendors.find_one_and_update.assert_not_awaited()

    async def test_target_needs_vendor_access(self, client, mock_db, super_admin, vendor_admin):
        headers = login_admin(mock_db, super_admin)
        target = dict(vendor_admin, permissions={"can_verify_vendors": True})
        mock_db.admins.find_one.side_effect = [dict(super_admin), target]

        response = await client.put(
            f"/api/admin/admins/{target['_id']}/verify-vendor/{ObjectId()}", headers=headers
        )

        assert response.status_code == 403
        assert response.json()["message"] == "You do not have access to this vendor"

    async def test_activates_vendor(self, client, mock_db, super_admin, vendor_admin, vendor):
        headers = login_admin(mock_db, super_admin)
        target = dict(vendor_admin, permissions={"can_verify_vendors": True})
        mock_db.admins.find_one.side_effect = [dict(super_admin), target]
        mock_db.vendors.find_one_and_update.return_value = vendor

        response = await client.put(
            f"/api/admin/admins/{target['_id']}/verify-vendor/{vendor['_id']}", headers=headers
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Vendor verified successfully"
        query, update = mock_db.vendors.find_one_and_update.await_args.args
        assert query == {"_id": vendor["_id"]}
        assert update["$set"]["status"] == 1


class TestModules:
    async def test_duplicate_name_ignores_case(self, client, mock_db, super_admin):
        headers = login_admin(mock_db, super_admin)
        mock_db.modules.find_one.return_value = {"_id": ObjectId(), "name": "Food"}

        response = await client.post("/api/admin/modules", json={"name": "  FOOD "}, headers=headers)

        assert response.status_code == 409
        assert response.json()["message"] == "Module with this name already exists"
        query = mock_db.modules.find_one.await_args.args[0]
        assert query == {"name": {"$regex": "^FOOD$", "$options": "i"}}
        mock_db.modules.insert_one.assert_not_awaited()

    async def test_rename_onto_existing_module(self, client, mock_db, super_admin):
        headers = login_admin(mock_db, super_admin)
        module_id = ObjectId()
        mock_db.modules.find_one.side_effect = [{"_id": module_id, "name": "Food"}, {"_id": ObjectId()}]

        response = await client.put(f"/api/admin/modules/{module_id}", json={"name": "grocery"}, headers=headers)

        assert response.status_code == 409
        mock_db.modules.find_one_and_update.assert_not_awaited()

    async def test_changing_only_case_skips_clash_check(self, client, mock_db, super_admin):
        headers = login_admin(mock_db, super_admin)
        module_id = ObjectId()
        mock_db.modules.find_one.return_value = {"_id": module_id, "name": "Food"}
        mock_db.modules.find_one_and_update.return_value = {"_id": module_id, "name": "FOOD"}

        response = await client.put(f"/api/admin/modules/{module_id}", json={"name": "FOOD"}, headers=headers)

        assert response.status_code == 200
        assert mock_db.modules.find_one.await_count == 1

    async def test_needs_login(self, client):
        response = await client.get("/api/admin/modules")
        assert response.status_code == 401


class TestVendors:
    @pytest.mark.parametrize(
        "overrides, message",
        [
            ({"latitude": "200"}, "Latitude must be between -90 and 90"),
            ({"latitude": "nan"}, "Latitude must be between -90 and 90"),
            ({"longitude": "-180.5"}, "Longitude must be between -180 and 180"),
            ({"longitude": "east"}, "Latitude and longitude must be numeric"),
        ],
    )
    async def test_create_rejects_bad_coordinates(self, client, mock_db, super_admin, overrides, message):
        headers = login_admin(mock_db, super_admin)

        response = await client.post("/api/admin/vendors", json=vendor_payload(**overrides), headers=headers)

        assert response.status_code == 400
        assert response.json()["message"] == message
        mock_db.vendors.insert_one.assert_not_awaited()

    async def test_update_rejects_infinite_longitude(self, client, mock_db, super_admin, vendor):
        headers = login_admin(mock_db, super_admin)
        mock_db.vendors.find_one.return_value = vendor

        response = await client.put(f"/api/admin/vendors/{vendor['_id']}", json={"longitude": "inf"}, headers=headers)

        assert response.status_code == 400
        mock_db.vendors.find_one_and_update.assert_not_awaited()

    async def test_location_rebuilt_from_one_coordinate(self, client, mock_db, super_admin, vendor):
        headers = login_admin(mock_db, super_admin)
        mock_db.vendors.find_one.return_value = vendor
        mock_db.vendors.find_one_and_update.return_value = dict(vendor, latitude="19.0")

        response = await client.put(f"/api/admin/vendors/{vendor['_id']}", json={"latitude": "19.0"}, headers=headers)

        assert response.status_code == 200
        changes = mock_db.vendors.find_one_and_update.await_args.args[1]["$set"]
        assert changes["latitude"] == "19.0"
        assert changes["location"] == {"type": "Point", "coordinates": [73.8, 19.0]}

    async def test_location_untouched_without_coordinates(self, client, mock_db, super_admin, vendor):
        headers = login_admin(mock_db, super_admin)
        mock_db.vendors.find_one.return_value = vendor
        mock_db.vendors.find_one_and_update.return_value = dict(vendor, name="Spice Route 2")

        response = await client.put(
            f"/api/admin/vendors/{vendor['_id']}", json={"name": "Spice Route 2"}, headers=headers
        )

        assert response.status_code == 200
        assert "location" not in mock_db.vendors.find_one_and_update.await_args.args[1]["$set"]

    async def test_update_needs_permission(self, client, mock_db, vendor_admin, vendor):
        headers = login_admin(mock_db, vendor_admin)
        mock_db.vendors.find_one.return_value = vendor

        response = await client.put(f"/api/admin/vendors/{vendor['_id']}", json={"name": "X"}, headers=headers)

        assert response.status_code == 403
        assert response.json()["message"] == "You don't have permission to update vendor"

    async def test_delete_unassigns_vendor_from_admins(self, client, mock_db, super_admin, vendor):
        headers = login_admin(mock_db, super_admin)
        mock_db.vendors.find_one_and_delete.return_value = vendor

        response = await client.delete(f"/api/admin/vendors/{vendor['_id']}", headers=headers)

        assert response.status_code == 200
        query, update = mock_db.admins.update_many.await_args.args
        assert query == {"vendor_ids": vendor["_id"]}
        assert update == {"$pull": {"vendor_ids": vendor["_id"]}}

    async def test_delete_needs_super_admin(self, client, mock_db, vendor_admin, vendor_id):
        headers = login_admin(mock_db, vendor_admin)

        response = await client.delete(f"/api/admin/vendors/{vendor_id}", headers=headers)

        assert response.status_code == 403
        mock_db.vendors.find_one_and_delete.assert_not_awaited()

    async def test_delete_unknown_vendor(self, client, mock_db, super_admin):
        headers = login_admin(mock_db, super_admin)

        response = await client.delete(f"/api/admin/vendors/{ObjectId()}", headers=headers)

        assert response.status_code == 404
        mock_db.admins.update_many.assert_not_awaited()


class TestProducts:
    async def test_create_special_above_main(self, client, mock_db, super_admin, vendor_id):
        headers = login_admin(mock_db, super_admin)
        payload = {"vendor_id": str(vendor_id), "name": "Thali", "main_price": 100, "special_price": 120}

        response = await client.post("/api/admin/products", json=payload, headers=headers)

        assert response.status_code == 400
        assert response.json()["message"] == "Special price cannot exceed main price"
        mock_db.products.insert_one.assert_not_awaited()

    async def test_create_inherits_vendor_module(self, client, mock_db, super_admin, vendor):
        headers = login_admin(mock_db, super_admin)
        vendor["module"] = ObjectId()
        mock_db.vendors.find_one.return_value = vendor
        payload = {"vendor_id": str(vendor["_id"]), "name": " Thali ", "main_price": 100, "special_price": 90}

        response = await client.post("/api/admin/products", json=payload, headers=headers)

        assert response.status_code == 201
        inserted = mock_db.products.insert_one.await_args.args[0]
        assert inserted["name"] == "Thali"
        assert inserted["vendor_id"] == vendor["_id"]
        assert inserted["module_id"] == vendor["module"]

    async def test_update_special_above_stored_main(self, client, mock_db, super_admin, product):
        headers = login_admin(mock_db, super_admin)
        mock_db.products.find_one.return_value = product

        response = await client.put(f"/api/admin/products/{product['_id']}", json={"special_price": 150}, headers=headers)

        assert response.status_code == 400
        assert response.json()["message"] == "Special price cannot exceed main price"
        mock_db.products.find_one_and_update.assert_not_awaited()

    async def test_update_main_below_stored_special(self, client, mock_db, super_admin, product):
        headers = login_admin(mock_db, super_admin)
        mock_db.products.find_one.return_value = product

        response = await client.put(f"/api/admin/products/{product['_id']}", json={"main_price": 50}, headers=headers)

        assert response.status_code == 400
        mock_db.products.find_one_and_update.assert_not_awaited()

    async def test_null_main_price_keeps_stored_price(self, client, mock_db, super_admin, product):
        headers = login_admin(mock_db, super_admin)
        mock_db.products.find_one.return_value = product
        mock_db.products.find_one_and_update.return_value = product

        response = await client.put(f"/api/admin/products/{product['_id']}", json={"main_price": None}, headers=headers)

        assert response.status_code == 200
        changes = mock_db.products.find_one_and_update.await_args.args[1]["$set"]
        assert "main_price" not in changes

    async def test_null_fields_are_not_written(self, client, mock_db, super_admin, product):
        headers = login_admin(mock_db, super_admin)
        mock_db.products.find_one.return_value = product
        mock_db.products.find_one_and_update.return_value = dict(product, packaging_charge=5)

        response = await client.put(
            f"/api/admin/products/{product['_id']}",
            json={"name": None, "is_active": None, "packaging_charge": 5},
            headers=headers,
        )

        assert response.status_code == 200
        changes = mock_db.products.find_one_and_update.await_args.args[1]["$set"]
        assert "name" not in changes
        assert "is_active" not in changes
        assert changes["packaging_charge"] == 5

    async def test_null_special_price_clears_offer(self, client, mock_db, super_admin, product):
        headers = login_admin(mock_db, super_admin)
        mock_db.products.find_one.return_value = product
        mock_db.products.find_one_and_update.return_value = dict(product, special_price=None)

        response = await client.put(
            f"/api/admin/products/{product['_id']}", json={"special_price": None}, headers=headers
        )

        assert response.status_code == 200
        changes = mock_db.products.find_one_and_update.await_args.args[1]["$set"]
        assert changes["special_price"] is None

    async def test_needs_manage_permission(self, client, mock_db, vendor_admin, product):
        headers = login_admin(mock_db, vendor_admin)

        response = await client.put(f"/api/admin/products/{product['_id']}", json={"name": "X"}, headers=headers)

        assert response.status_code == 403
        assert response.json()["message"] == "You don't have permission to manage products"

    async def test_foreign_vendor_product(self, client, mock_db, vendor_admin, product):
        headers = login_admin(mock_db, dict(vendor_admin, permissions={"can_manage_products": True}))
        mock_db.products.find_one.return_value = dict(product, vendor_id=ObjectId())

        response = await client.put(f"/api/admin/products/{product['_id']}", json={"name": "X"}, headers=headers)

        assert response.status_code == 403
        assert response.json()["message"] == "You do not have access to this vendor"


class TestCustomers:
    async def test_needs_super_admin(self, client, mock_db, vendor_admin):
        headers = login_admin(mock_db, vendor_admin)

        response = await client.get("/api/admin/users", headers=headers)

        assert response.status_code == 403
        assert response.json()["message"] == FORBIDDEN_ROLE

    async def test_email_clash(self, client, mock_db, super_admin, app_user):
        headers = login_admin(mock_db, super_admin)
        mock_db.users.find_one.side_effect = [dict(app_user), {"_id": ObjectId()}]

        response = await client.put(
            f"/api/admin/users/{app_user['_id']}", json={"email": "Taken@Example.com"}, headers=headers
        )

        assert response.status_code == 409
        assert response.json()["message"] == "Email is already in use by another user"
        clash_query = mock_db.users.find_one.await_args.args[0]
        assert clash_query == {"email": "taken@example.com", "_id": {"$ne": app_user["_id"]}}
        mock_db.users.find_one_and_update.assert_not_awaited()

    async def test_toggle_block(self, client, mock_db, super_admin, app_user):
        headers = login_admin(mock_db, super_admin)
        mock_db.users.find_one.return_value = dict(app_user)
        mock_db.users.find_one_and_update.return_value = dict(app_user, is_blocked=True)

        response = await client.put(f"/api/admin/users/{app_user['_id']}/toggle-block", headers=headers)

        assert response.status_code == 200
        assert response.json()["message"] == "User blocked successfully"
        update = mock_db.users.find_one_and_update.await_args.args[1]
        assert update["$set"]["is_blocked"] is True

    async def test_toggle_unblocks(self, client, mock_db, super_admin, app_user):
        headers = login_admin(mock_db, super_admin)
        mock_db.users.find_one.return_value = dict(app_user, is_blocked=True)
        mock_db.users.find_one_and_update.return_value = dict(app_user, is_blocked=False)

        response = await client.put(f"/api/admin/users/{app_user['_id']}/toggle-block", headers=headers)

        assert response.json()["message"] == "User unblocked successfully"


class TestDashboard:
    async def test_overview(self, client, mock_db, super_admin):
        headers = login_admin(mock_db, super_admin)
        mock_db.users.count_documents.return_value = 3

        response = await client.get("/api/admin/dashboard/overview", headers=headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["overview"]["total_users"] == 3
        assert data["overview"]["total_revenue"] == 0
        assert len(data["daily_orders"]) == 7
        assert data["recent_orders"] == []

    async def test_overview_is_scoped(self, client, mock_db, vendor_admin, vendor_id):
        headers = login_admin(mock_db, vendor_admin)

        response = await client.get("/api/admin/dashboard/overview", headers=headers)

        assert response.status_code == 200
        assert mock_db.vendors.count_documents.await_args.args[0] == {"status": 1, "_id": {"$in": [vendor_id]}}
        for call in mock_db.carts.count_documents.await_args_list:
            assert call.args[0]["vendor"] == {"$in": [vendor_id]}

    async def test_revenue_stats(self, client, mock_db, vendor_admin, vendor_id):
        headers = login_admin(mock_db, vendor_admin)
        mock_db.carts.aggregate.side_effect = lambda pipeline: make_cursor(
            [{"_id": "2024-03-15", "revenue": 10.5, "orders": 2}]
        )

        response = await client.get("/api/admin/dashboard/revenue-stats?period=30days", headers=headers)

        assert response.status_code == 200
        body = response.json()
        assert body["period"] == "30days"
        assert body["data"] == [{"date": "2024-03-15", "revenue": 10.5, "orders": 2}]
        match = mock_db.carts.aggregate.call_args.args[0][0]["$match"]
        assert match["vendor"] == {"$in": [vendor_id]}

    async def test_unknown_period_falls_back(self, client, mock_db, super_admin):
        headers = login_admin(mock_db, super_admin)

        response = await client.get("/api/admin/dashboard/revenue-stats?period=forever", headers=headers)

        assert response.status_code == 200
        assert response.json()["period"] == "7days"
