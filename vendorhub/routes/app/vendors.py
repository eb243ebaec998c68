"""
Vendor discovery for the customer app.
"""
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Query
from motor.motor_asyncio import AsyncIOMotorDatabase

from ...config import get_database
from ...models.vendor import VendorStatus
from ...schemas.common import SuccessResponse, ok
from ...services.vendor_discovery import find_nearby_vendors
from ...utils.dependencies import get_current_user, validate_object_id
from ...utils.errors import server_error
from ...utils.populate import populate
from ...utils.serializers import serialize_doc, serialize_docs

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/vendors", tags=["App Vendors"])


async def delivery_point(db: AsyncIOMotorDatabase, user: Dict[str, Any]) -> Dict[str, Any]:
    """The user's default address, else the newest one; it must carry coordinates."""
    address = await db.addresses.find_one({"user": user["_id"], "is_default": True})
    if not address:
        address = await db.addresses.find_one({"user": user["_id"]}, sort=[("created_at", -1)])

    if not address or address.get("latitude") is None or address.get("longitude") is None:
        raise HTTPException(status_code=400, detail="Default address with latitude/longitude required")
    return address


@router.get("/active", response_model=SuccessResponse)
async def active_vendors(
    user: Dict[str, Any] = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """Active vendors nearest first, plus the ones added recently."""
    address = await delivery_point(db, user)
    try:
        found = await find_nearby_vendors(db, float(address["latitude"]), float(address["longitude"]))
        return ok(
            "Active vendors fetched successfully",
            serialize_docs(found["vendors"]),
            count=len(found["vendors"]),
            whats_new=serialize_docs(found["whats_new"]),
            new_count=len(found["whats_new"]),
        )
    except Exception as e:
        raise server_error("fetch active vendors", e)


@router.get("/products", response_model=SuccessResponse)
async def vendor_with_products(
    vendor_id: str = Query(..., description="Vendor ID"),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """An active vendor with its active products."""
    oid = validate_object_id(vendor_id, "vendor")
    vendor = await db.vendors.find_one({"_id": oid, "status": VendorStatus.ACTIVE.value})
    if not vendor:
        raise HTTPException(status_code=404, detail="Vendor not found")

    await populate(db.modules, [vendor], "module", {"name": 1})
    products = await (
        db.products.find({"vendor_id": oid, "is_active": True})
        .sort("created_at", -1)
        .to_list(length=None)
    )

    data = serialize_doc(vendor)
    data["products"] = serialize_docs(products)
    return ok("Vendor fetched successfully", data, count=len(products))
