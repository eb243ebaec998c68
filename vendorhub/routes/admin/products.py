"""
Product catalog management for the admin portal.
"""
import logging
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from ...config import get_database, settings
from ...models.admin import admin_vendor_ids, has_vendor_access, is_super_admin
from ...models.product import ProductDocument
from ...schemas.catalog import CreateProductRequest, UpdateProductRequest
from ...schemas.common import PaginationMeta, SuccessResponse, ok
from ...utils.dependencies import (
    find_or_404,
    get_current_admin,
    require_permission,
    search_regex,
    validate_object_id,
)
from ...utils.errors import server_error
from ...utils.populate import populate
from ...utils.requests import parse_body
from ...utils.serializers import serialize_doc, serialize_docs

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["Products"])

can_manage_products = require_permission("can_manage_products")


def ensure_vendor_access(admin: Dict[str, Any], vendor_id: Any) -> None:
    if not has_vendor_access(admin, vendor_id):
        raise HTTPException(status_code=403, detail="You do not have access to this vendor")


def ensure_special_price(main_price: float, special_price: Optional[float]) -> None:
    if special_price is not None and special_price > main_price:
        raise HTTPException(status_code=400, detail="Special price cannot exceed main price")


@router.post("", status_code=201, response_model=SuccessResponse)
async def create_product(
    request: Request,
    admin: Dict[str, Any] = Depends(can_manage_products),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """Create a product for a vendor; the product inherits the vendor's module."""
    payload = await parse_body(request, CreateProductRequest, upload_fields=("image",))
    vendor = await find_or_404(db.vendors, payload.vendor_id, "Vendor")
    ensure_vendor_access(admin, vendor["_id"])

    try:
        fields = payload.model_dump()
        fields.update(vendor_id=vendor["_id"], module_id=vendor.get("module"))
        product_doc = ProductDocument(**fields).to_mongo()

        result = await db.products.insert_one(product_doc)
        product_doc["_id"] = result.inserted_id

        logger.info(f"Product created: {payload.name} (ID: {result.inserted_id}) for vendor {vendor['_id']}")
        return ok("Product created successfully", serialize_doc(product_doc))

    except Exception as e:
        raise server_error("create product", e)


@router.get("", response_model=SuccessResponse)
async def list_products(
    vendor_id: Optional[str] = Query(None, description="Filter by vendor"),
    is_active: Optional[bool] = Query(None, description="Filter by active flag"),
    search: Optional[str] = Query(None, description="Filter by product name (partial match)"),
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size, description="Products per page"),
    admin: Dict[str, Any] = Depends(get_current_admin),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """List products with optional filtering and pagination"""
    filter_query: Dict[str, Any] = {}

    if vendor_id:
        vendor_oid = validate_object_id(vendor_id, "vendor")
        ensure_vendor_access(admin, vendor_oid)
        filter_query["vendor_id"] = vendor_oid
    elif not is_super_admin(admin):
        filter_query["vendor_id"] = {"$in": admin_vendor_ids(admin)}

    if is_active is not None:
        filter_query["is_active"] = is_active
    if search:
        filter_query["name"] = search_regex(search)

    try:
        total = await db.products.count_documents(filter_query)
        products = await (
            db.products.find(filter_query)
            .sort("created_at", -1)
            .skip((page - 1) * limit)
            .limit(limit)
            .to_list(length=limit)
        )
        await populate(db.vendors, products, "vendor_id", {"name": 1}, target="vendor")

        return ok(
            "Products retrieved successfully",
            serialize_docs(products),
            count=len(products),
            pagination=PaginationMeta.build(page, limit, total).as_dict(),
        )
    except Exception as e:
        raise server_error("fetch products", e)


@router.get("/{product_id}", response_model=SuccessResponse)
async def get_product(
    product_id: str,
    admin: Dict[str, Any] = Depends(get_current_admin),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    product = await find_or_404(db.products, product_id, "Product")
    ensure_vendor_access(admin, product["vendor_id"])
    return ok("Product retrieved successfully", serialize_doc(product))


@router.put("/{product_id}", response_model=SuccessResponse)
async def update_product(
    product_id: str,
    request: Request,
    admin: Dict[str, Any] = Depends(can_manage_products),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    product = await find_or_404(db.products, product_id, "Product")
    ensure_vendor_access(admin, product["vendor_id"])

    payload = await parse_body(request, UpdateProductRequest, upload_fields=("image",))
    # null clears the offer price; any other null leaves the stored value alone
    changes = {k: v for k, v in payload.changes().items() if v is not None or k == "special_price"}

    main_price = changes.get("main_price", product.get("main_price") or 0)
    special_price = changes["special_price"] if "special_price" in changes else product.get("special_price")
    ensure_special_price(main_price, special_price)

    changes["updated_at"] = datetime.utcnow()
    updated = await db.products.find_one_and_update(
        {"_id": product["_id"]}, {"$set": changes}, return_document=ReturnDocument.AFTER
    )
    logger.info(f"Product updated: {product['_id']}")
    return ok("Product updated successfully", serialize_doc(updated))


@router.patch("/{product_id}/toggle", response_model=SuccessResponse)
async def toggle_product(
    product_id: str,
    admin: Dict[str, Any] = Depends(can_manage_products),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """Flip ``is_active``."""
    product = await find_or_404(db.products, product_id, "Product")
    ensure_vendor_access(admin, product["vendor_id"])

    updated = await db.products.find_one_and_update(
        {"_id": product["_id"]},
        {"$set": {"is_active": not product.get("is_active", True), "updated_at": datetime.utcnow()}},
        return_document=ReturnDocument.AFTER,
    )
    state = "activated" if updated["is_active"] else "deactivated"
    return ok(f"Product {state} successfully", serialize_doc(updated))


@router.delete("/{product_id}", response_model=SuccessResponse)
async def delete_product(
    product_id: str,
    admin: Dict[str, Any] = Depends(can_manage_products),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    product = await find_or_404(db.products, product_id, "Product")
    ensure_vendor_access(admin, product["vendor_id"])

    await db.products.delete_one({"_id": product["_id"]})
    logger.info(f"🗑️  Product deleted: {product.get('name')}")
    return ok("Product deleted successfully", serialize_doc(product))
