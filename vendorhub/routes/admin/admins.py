"""
Admin login and admin account management (super admin only).
"""
import logging
from datetime import datetime
from typing import Any, Dict, List

from bson import ObjectId
from fastapi import APIRouter, Depends, HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from ...config import get_database
from ...models.admin import (
    AdminDocument,
    AdminPermissions,
    AdminRole,
    admin_status_text,
    has_vendor_access,
)
from ...schemas.admin import AdminLoginRequest, CreateAdminRequest, UpdateAdminRequest, VendorIdsRequest
from ...schemas.common import SuccessResponse, ok
from ...services.auth_service import auth_service
from ...utils.dependencies import (
    find_or_404,
    get_current_admin,
    has_permission,
    require_role,
    validate_object_id,
    validate_object_ids,
)
from ...utils.errors import conflict_from, server_error
from ...utils.populate import populate
from ...utils.serializers import serialize_doc

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Admins"])

super_admin_only = require_role(AdminRole.SUPER_ADMIN.value)

VENDOR_SUMMARY = {"name": 1, "email": 1, "status": 1}


def present_admin(admin: Dict[str, Any]) -> Dict[str, Any]:
    """Serialized admin with its derived status text; the password never leaves."""
    data = serialize_doc(admin)
    data["status_text"] = admin_status_text(admin)
    return data


async def ensure_vendors_exist(db: AsyncIOMotorDatabase, vendor_ids: List[ObjectId]) -> None:
    if not vendor_ids:
        return
    found = await db.vendors.count_documents({"_id": {"$in": vendor_ids}})
    if found != len(set(vendor_ids)):
        raise HTTPException(status_code=404, detail="One or more vendor IDs are invalid")


async def load_admin(db: AsyncIOMotorDatabase, admin_id: str) -> Dict[str, Any]:
    """Admin with populated vendors, for responses."""
    admin = await find_or_404(db.admins, admin_id, "Admin", {"password": 0})
    await _populate_vendor_ids([admin], db)
    return admin


async def _populate_vendor_ids(admins: List[Dict[str, Any]], db: AsyncIOMotorDatabase) -> None:
    ids = {vid for admin in admins for vid in admin.get("vendor_ids") or []}
    if not ids:
        return
    vendors = await db.vendors.find({"_id": {"$in": list(ids)}}, VENDOR_SUMMARY).to_list(length=None)
    by_id = {vendor["_id"]: vendor for vendor in vendors}
    for admin in admins:
        admin["vendor_ids"] = [by_id[vid] for vid in admin.get("vendor_ids") or [] if vid in by_id]


@router.post("/login", response_model=SuccessResponse)
async def login(credentials: AdminLoginRequest, db: AsyncIOMotorDatabase = Depends(get_database)):
    """Exchange email and password for a portal token."""
    try:
        admin = await db.admins.find_one({"email": credentials.email})
        if not admin:
            raise HTTPException(status_code=401, detail="Invalid email or password")

        if admin.get("is_blocked"):
            raise HTTPException(status_code=403, detail="Your account has been blocked. Please contact support.")
        if not admin.get("is_active", True):
            raise HTTPException(status_code=403, detail="Your account is inactive. Please contact support.")

        if not auth_service.verify_password(credentials.password, admin.get("password")):
            raise HTTPException(status_code=401, detail="Invalid email or password")

        now = datetime.utcnow()
        await db.admins.update_one({"_id": admin["_id"]}, {"$set": {"last_login": now}})
        admin["last_login"] = now
        await _populate_vendor_ids([admin], db)

        token = auth_service.create_admin_token(str(admin["_id"]), admin["email"], admin["role"])
        logger.info(f"🔐 Admin logged in: {admin['email']}")
        return ok("Login successful", {"admin": present_admin(admin), "token": token})

    except HTTPException:
        raise
    except Exception as e:
        raise server_error("log in", e)


@router.get("/admins", response_model=SuccessResponse)
async def list_admins(
    _: Dict[str, Any] = Depends(super_admin_only),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    try:
        admins = await db.admins.find({}, {"password": 0}).sort("created_at", -1).to_list(length=None)
        await _populate_vendor_ids(admins, db)
        return ok("Admins retrieved successfully", [present_admin(a) for a in admins], count=len(admins))
    except Exception as e:
        raise server_error("fetch admins", e)


@router.get("/admins/{admin_id}", response_model=SuccessResponse)
async def get_admin(
    admin_id: str,
    _: Dict[str, Any] = Depends(super_admin_only),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    admin = await load_admin(db, admin_id)
    return ok("Admin retrieved successfully", present_admin(admin))


@router.post("/admins", status_code=201, response_model=SuccessResponse)
async def create_admin(
    payload: CreateAdminRequest,
    _: Dict[str, Any] = Depends(super_admin_only),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """Create an admin account; vendor ids must reference existing vendors."""
    try:
        if await db.admins.find_one({"email": payload.email}, {"_id": 1}):
            raise HTTPException(status_code=409, detail="Admin with this email already exists")

        vendor_ids = list(dict.fromkeys(validate_object_ids(payload.vendor_ids, "vendor")))
        await ensure_vendors_exist(db, vendor_ids)

        admin_doc = AdminDocument(
            name=payload.name,
            email=payload.email,
            password=auth_service.hash_password(payload.password),
            role=payload.role,
            vendor_ids=vendor_ids,
            permissions=AdminPermissions(**payload.permissions.model_dump(exclude_none=True)),
        ).to_mongo()

        result = await db.admins.insert_one(admin_doc)
        logger.info(f"Admin created: {payload.email} (ID: {result.inserted_id})")
        return ok("Admin created successfully", present_admin(await load_admin(db, result.inserted_id)))

    except HTTPException:
        raise
    except DuplicateKeyError as e:
        raise conflict_from(e, "Admin with this email already exists")
    except Exception as e:
        raise server_error("create admin", e)


@router.put("/admins/{admin_id}", response_model=SuccessResponse)
async def update_admin(
    admin_id: str,
    payload: UpdateAdminRequest,
    _: Dict[str, Any] = Depends(super_admin_only),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """Partial update; permissions are merged into the existing flags."""
    try:
        admin = await find_or_404(db.admins, admin_id, "Admin")
        changes = payload.changes()

        if "email" in changes and changes["email"] != admin.get("email"):
            clash = await db.admins.find_one({"email": changes["email"], "_id": {"$ne": admin["_id"]}}, {"_id": 1})
            if clash:
                raise HTTPException(status_code=409, detail="Admin with this email already exists")

        if changes.get("password"):
            changes["password"] = auth_service.hash_password(changes["password"])

        if changes.get("vendor_ids") is not None:
            vendor_ids = list(dict.fromkeys(validate_object_ids(changes["vendor_ids"], "vendor")))
            await ensure_vendors_exist(db, vendor_ids)
            changes["vendor_ids"] = vendor_ids

        if changes.get("permissions") is not None:
            merged = {**(admin.get("permissions") or {})}
            merged.update({k: v for k, v in changes["permissions"].items() if v is not None})
            changes["permissions"] = AdminPermissions(**merged).model_dump()

        if isinstance(changes.get("role"), AdminRole):
            changes["role"] = changes["role"].value

        changes = {k: v for k, v in changes.items() if v is not None}
        changes["updated_at"] = datetime.utcnow()

        await db.admins.update_one({"_id": admin["_id"]}, {"$set": changes})
        logger.info(f"Admin updated: {admin['_id']}")
        return ok("Admin updated successfully", present_admin(await load_admin(db, admin["_id"])))

    except HTTPException:
        raise
    except DuplicateKeyError as e:
        raise conflict_from(e, "Admin with this email already exists")
    except Exception as e:
        raise server_error("update admin", e)


@router.delete("/admins/{admin_id}", response_model=SuccessResponse)
async def delete_admin(
    admin_id: str,
    current_admin: Dict[str, Any] = Depends(super_admin_only),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    oid = validate_object_id(admin_id, "admin")
    if oid == current_admin["_id"]:
        raise HTTPException(status_code=400, detail="You cannot delete your own account")

    admin = await db.admins.find_one_and_delete({"_id": oid}, {"password": 0})
    if not admin:
        raise HTTPException(status_code=404, detail="Admin not found")

    logger.info(f"🗑️  Admin deleted: {admin.get('email')}")
    return ok("Admin deleted successfully", present_admin(admin))


@router.post("/admins/{admin_id}/assign-vendors", response_model=SuccessResponse)
async def assign_vendors(
    admin_id: str,
    payload: VendorIdsRequest,
    _: Dict[str, Any] = Depends(super_admin_only),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """Add vendors to an admin; already assigned ones are kept once."""
    oid = validate_object_id(admin_id, "admin")
    vendor_ids = list(dict.fromkeys(validate_object_ids(payload.vendor_ids, "vendor")))
    await ensure_vendors_exist(db, vendor_ids)

    admin = await db.admins.find_one_and_update(
        {"_id": oid},
        {"$addToSet": {"vendor_ids": {"$each": vendor_ids}}, "$set": {"updated_at": datetime.utcnow()}},
        projection={"password": 0},
        return_document=ReturnDocument.AFTER,
    )
    if not admin:
        raise HTTPException(status_code=404, detail="Admin not found")

    await _populate_vendor_ids([admin], db)
    return ok("Vendors assigned successfully", present_admin(admin))


@router.post("/admins/{admin_id}/remove-vendors", response_model=SuccessResponse)
async def remove_vendors(
    admin_id: str,
    payload: VendorIdsRequest,
    _: Dict[str, Any] = Depends(super_admin_only),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    oid = validate_object_id(admin_id, "admin")
    vendor_ids = validate_object_ids(payload.vendor_ids, "vendor")

    admin = await db.admins.find_one_and_update(
        {"_id": oid},
        {"$pull": {"vendor_ids": {"$in": vendor_ids}}, "$set": {"updated_at": datetime.utcnow()}},
        projection={"password": 0},
        return_document=ReturnDocument.AFTER,
    )
    if not admin:
        raise HTTPException(status_code=404, detail="Admin not found")

    await _populate_vendor_ids([admin], db)
    return ok("Vendors removed successfully", present_admin(admin))


@router.put("/admins/{admin_id}/verify-vendor/{vendor_id}", response_model=SuccessResponse)
async def verify_vendor(
    admin_id: str,
    vendor_id: str,
    current_admin: Dict[str, Any] = Depends(get_current_admin),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """
    Activate a vendor on behalf of an admin.

    The caller needs ``can_verify_vendors``; the target admin needs the same
    permission and access to the vendor.
    """
    if not has_permission(current_admin, "can_verify_vendors"):
        raise HTTPException(status_code=403, detail="You don't have permission to verify vendors")

    target = await find_or_404(db.admins, admin_id, "Admin", {"password": 0})
    if not has_permission(target, "can_verify_vendors"):
        raise HTTPException(status_code=403, detail="You do not have permission to verify vendors")

    vendor_oid = validate_object_id(vendor_id, "vendor")
    if not has_vendor_access(target, vendor_oid):
        raise HTTPException(status_code=403, detail="You do not have access to this vendor")

    vendor = await db.vendors.find_one_and_update(
        {"_id": vendor_oid},
        {"$set": {"status": 1, "updated_at": datetime.utcnow()}},
        return_document=ReturnDocument.AFTER,
    )
    if not vendor:
        raise HTTPException(status_code=404, detail="Vendor not found")

    await populate(db.modules, [vendor], "module", {"name": 1})
    logger.info(f"✅ Vendor {vendor_oid} verified by admin {current_admin['_id']}")
    return ok("Vendor verified successfully", serialize_doc(vendor))
