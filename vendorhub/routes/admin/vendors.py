"""
Vendor management for the admin portal.

Create and update accept JSON or multipart forms; a ``vendor_image`` file part
is stored and its URL saved on the vendor.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Request
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from ...config import get_database
from ...models.admin import AdminRole, admin_vendor_ids, has_vendor_access, is_super_admin
from ...models.vendor import VendorDocument, VendorStatus, build_location, vendor_status_text
from ...schemas.catalog import CreateVendorRequest, UpdateVendorRequest
from ...schemas.common import SuccessResponse, ok
from ...utils.dependencies import (
    find_or_404,
    get_current_admin,
    has_permission,
    require_role,
    validate_object_id,
)
from ...utils.errors import server_error
from ...utils.populate import populate
from ...utils.requests import parse_body
from ...utils.serializers import serialize_doc

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/vendors", tags=["Vendors"])

MODULE_SUMMARY = {"name": 1}


async def present_vendors(db: AsyncIOMotorDatabase, vendors: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Embed ``module`` as ``{_id, name}`` and add ``status_text``."""
    await populate(db.modules, vendors, "module", MODULE_SUMMARY)
    presented = []
    for vendor in vendors:
        data = serialize_doc(vendor)
        data["status_text"] = vendor_status_text(vendor)
        presented.append(data)
    return presented


async def present_vendor(db: AsyncIOMotorDatabase, vendor: Dict[str, Any]) -> Dict[str, Any]:
    return (await present_vendors(db, [vendor]))[0]


def visible_vendors(admin: Dict[str, Any]) -> Dict[str, Any]:
    """Non-super admins only see the vendors assigned to them."""
    if is_super_admin(admin):
        return {}
    return {"_id": {"$in": admin_vendor_ids(admin)}}


async def ensure_module(db: AsyncIOMotorDatabase, module_id: str):
    module = await find_or_404(db.modules, module_id, "Module")
    return module["_id"]


@router.post("", status_code=201, response_model=SuccessResponse)
async def create_vendor(
    request: Request,
    admin: Dict[str, Any] = Depends(get_current_admin),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """Create a vendor; ``location`` is derived from latitude and longitude."""
    payload = await parse_body(request, CreateVendorRequest, upload_fields=("vendor_image",))
    try:
        if await db.vendors.find_one({"email": payload.email}, {"_id": 1}):
            raise HTTPException(status_code=409, detail="Vendor with this email already exists")

        fields = payload.model_dump()
        fields["module"] = await ensure_module(db, payload.module)
        fields["location"] = build_location(payload.latitude, payload.longitude)

        vendor_doc = VendorDocument(**fields).to_mongo()
        result = await db.vendors.insert_one(vendor_doc)
        vendor_doc["_id"] = result.inserted_id

        logger.info(f"Vendor created: {payload.name} (ID: {result.inserted_id}) by {admin.get('email')}")
        return ok("Vendor created successfully", await present_vendor(db, vendor_doc))

    except HTTPException:
        raise
    except Exception as e:
        raise server_error("create vendor", e)


@router.get("", response_model=SuccessResponse)
async def list_vendors(
    admin: Dict[str, Any] = Depends(get_current_admin),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    vendors = await db.vendors.find(visible_vendors(admin)).sort("created_at", -1).to_list(length=None)
    return ok("Vendors retrieved successfully", await present_vendors(db, vendors), count=len(vendors))


@router.get("/active/list", response_model=SuccessResponse)
async def list_active_vendors(
    admin: Dict[str, Any] = Depends(get_current_admin),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    query = {**visible_vendors(admin), "status": VendorStatus.ACTIVE.value}
    vendors = await db.vendors.find(query).sort("created_at", -1).to_list(length=None)
    return ok("Active vendors retrieved successfully", await present_vendors(db, vendors), count=len(vendors))


@router.get("/module/{module_id}", response_model=SuccessResponse)
async def list_vendors_by_module(
    module_id: str,
    admin: Dict[str, Any] = Depends(get_current_admin),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    query = {**visible_vendors(admin), "module": validate_object_id(module_id, "module")}
    vendors = await db.vendors.find(query).sort("created_at", -1).to_list(length=None)
    return ok("Vendors retrieved successfully", await present_vendors(db, vendors), count=len(vendors))


@router.get("/{vendor_id}", response_model=SuccessResponse)
async def get_vendor(
    vendor_id: str,
    admin: Dict[str, Any] = Depends(get_current_admin),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    vendor = await find_or_404(db.vendors, vendor_id, "Vendor")
    if not has_vendor_access(admin, vendor["_id"]):
        raise HTTPException(status_code=403, detail="You do not have access to this vendor")
    return ok("Vendor retrieved successfully", await present_vendor(db, vendor))


@router.put("/{vendor_id}", response_model=SuccessResponse)
async def update_vendor(
    vendor_id: str,
    request: Request,
    admin: Dict[str, Any] = Depends(get_current_admin),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """Partial update; the GeoJSON point is rebuilt when a coordinate changes."""
    vendor = await find_or_404(db.vendors, vendor_id, "Vendor")
    if not is_super_admin(admin):
        if not has_permission(admin, "can_update_vendor"):
            raise HTTPException(status_code=403, detail="You don't have permission to update vendor")
        if not has_vendor_access(admin, vendor["_id"]):
            raise HTTPException(status_code=403, detail="You do not have access to this vendor")

    payload = await parse_body(request, UpdateVendorRequest, upload_fields=("vendor_image",))
    try:
        changes = {k: v for k, v in payload.changes().items() if v is not None}

        if "email" in changes and changes["email"] != vendor.get("email"):
            clash = await db.vendors.find_one({"email": changes["email"], "_id": {"$ne": vendor["_id"]}}, {"_id": 1})
            if clash:
                raise HTTPException(status_code=409, detail="Vendor with this email already exists")

        if "module" in changes:
            changes["module"] = await ensure_module(db, changes["module"])

        if "latitude" in changes or "longitude" in changes:
            changes["location"] = build_location(
                changes.get("latitude", vendor.get("latitude")),
                changes.get("longitude", vendor.get("longitude")),
            )

        for key in ("status", "timezone"):
            if key in changes and hasattr(changes[key], "value"):
                changes[key] = changes[key].value

        changes["updated_at"] = datetime.utcnow()
        updated = await db.vendors.find_one_and_update(
            {"_id": vendor["_id"]}, {"$set": changes}, return_document=ReturnDocument.AFTER
        )
        logger.info(f"Vendor updated: {vendor['_id']}")
        return ok("Vendor updated successfully", await present_vendor(db, updated))

    except HTTPException:
        raise
    except Exception as e:
        raise server_error("update vendor", e)


@router.delete("/{vendor_id}", response_model=SuccessResponse)
async def delete_vendor(
    vendor_id: str,
    _: Dict[str, Any] = Depends(require_role(AdminRole.SUPER_ADMIN.value)),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    oid = validate_object_id(vendor_id, "vendor")
    vendor = await db.vendors.find_one_and_delete({"_id": oid})
    if not vendor:
        raise HTTPException(status_code=404, detail="Vendor not found")

    await db.admins.update_many({"vendor_ids": oid}, {"$pull": {"vendor_ids": oid}})
    logger.info(f"🗑️  Vendor deleted: {vendor.get('name')}")
    return ok("Vendor deleted successfully", await present_vendor(db, vendor))
