"""
Shared fixtures.

The app is imported with test settings and a mocked Motor database, so no
MongoDB server or Stripe account is needed.
"""
import os
import tempfile

os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("UPLOAD_PATH", tempfile.mkdtemp(prefix="vendorhub-uploads-"))
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from httpx import ASGITransport, AsyncClient

from vendorhub.config import get_database
from vendorhub.main import app
from vendorhub.services.auth_service import auth_service

COLLECTIONS = ("admins", "modules", "vendors", "products", "users", "addresses", "carts")


def make_cursor(docs=None):
    """Stand-in for a Motor cursor: chainable, with an async ``to_list``."""
    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.skip.return_value = cursor
    cursor.limit.return_value = cursor
    cursor.to_list = AsyncMock(return_value=list(docs or []))
    return cursor


def make_collection():
    collection = MagicMock()
    collection.find_one = AsyncMock(return_value=None)
    collection.insert_one = AsyncMock(return_value=SimpleNamespace(inserted_id=ObjectId()))
    collection.insert_many = AsyncMock()
    collection.update_one = AsyncMock(return_value=SimpleNamespace(matched_count=1, modified_count=1))
    collection.update_many = AsyncMock(return_value=SimpleNamespace(matched_count=0, modified_count=0))
    collection.delete_one = AsyncMock(return_value=SimpleNamespace(deleted_count=1))
    collection.delete_many = AsyncMock(return_value=SimpleNamespace(deleted_count=0))
    collection.count_documents = AsyncMock(return_value=0)
    collection.find_one_and_update = AsyncMock(return_value=None)
    collection.find_one_and_delete = AsyncMock(return_value=None)
    collection.find = MagicMock(side_effect=lambda *args, **kwargs: make_cursor())
    collection.aggregate = MagicMock(side_effect=lambda *args, **kwargs: make_cursor())
    return collection


@pytest.fixture
def mock_db():
    db = MagicMock()
    for name in COLLECTIONS:
        setattr(db, name, make_collection())
    db.command = AsyncMock(return_value={"ok": 1})
    return db


@pytest.fixture
async def client(mock_db):
    """HTTP client bound to the app with the database dependency overridden."""
    app.dependency_overrides[get_database] = lambda: mock_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def vendor_id():
    return ObjectId()


@pytest.fixture
def super_admin():
    return {
        "_id": ObjectId(),
        "name": "Root",
        "email": "root@example.com",
        "role": "super_admin",
        "vendor_ids": [],
        "permissions": {},
        "is_active": True,
        "is_blocked": False,
    }


@pytest.fixture
def vendor_admin(vendor_id):
    """Non-super admin assigned to ``vendor_id`` and allowed to manage orders."""
    return {
        "_id": ObjectId(),
        "name": "Store Admin",
        "email": "store@example.com",
        "role": "admin",
        "vendor_ids": [vendor_id],
        "permissions": {"can_manage_orders": True},
        "is_active": True,
        "is_blocked": False,
    }


@pytest.fixture
def app_user():
    return {
        "_id": ObjectId(),
        "mobile_number": "9876543210",
        "name": "Asha",
        "email": "asha@example.com",
        "is_verified": True,
        "is_blocked": False,
        "created_at": datetime(2024, 1, 1),
    }


def admin_headers(admin):
    token = auth_service.create_admin_token(str(admin["_id"]), admin["email"], admin["role"])
    return {"Authorization": f"Bearer {token}"}


def user_headers(user):
    token = auth_service.create_user_token(str(user["_id"]))
    return {"Authorization": f"Bearer {token}"}


def login_admin(mock_db, admin):
    """Make ``get_current_admin`` resolve to ``admin``; vendor refs stay as ids."""
    mock_db.admins.find_one.return_value = dict(admin)
    mock_db.vendors.find.side_effect = lambda *args, **kwargs: make_cursor(
        [{"_id": vid, "name": "Vendor", "status": "Active"} for vid in admin.get("vendor_ids", [])]
    )
    return admin_headers(admin)


def login_user(mock_db, user):
    mock_db.users.find_one.return_value = dict(user)
    return user_headers(user)
