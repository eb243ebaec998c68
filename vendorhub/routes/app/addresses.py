"""
Address book for app users.

A user has at most one default address. Making an address default clears
the flag on the others; deleting the default promotes the newest remaining one.
"""
import logging
from datetime import datetime
from typing import Any, Dict

from bson import ObjectId
from fastapi import APIRouter, Depends, HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from ...config import get_database
from ...models.address import AddressDocument
from ...schemas.common import SuccessResponse, ok
from ...schemas.customer import CreateAddressRequest, UpdateAddressRequest
from ...utils.dependencies import find_or_404, get_current_user
from ...utils.serializers import serialize_doc, serialize_docs

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/addresses", tags=["Addresses"])


async def load_own_address(db: AsyncIOMotorDatabase, user: Dict[str, Any], address_id: str) -> Dict[str, Any]:
    address = await find_or_404(db.addresses, address_id, "Address")
    if address.get("user") != user["_id"]:
        raise HTTPException(status_code=403, detail="Forbidden")
    return address


async def clear_default(db: AsyncIOMotorDatabase, user_id: ObjectId, keep: Any = None) -> None:
    query: Dict[str, Any] = {"user": user_id, "is_default": True}
    if keep is not None:
        query["_id"] = {"$ne": keep}
    await db.addresses.update_many(query, {"$set": {"is_default": False}})


@router.get("", response_model=SuccessResponse)
async def list_addresses(
    user: Dict[str, Any] = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    addresses = await (
        db.addresses.find({"user": user["_id"]})
        .sort([("is_default", -1), ("created_at", -1)])
        .to_list(length=None)
    )
    return ok("Addresses fetched", serialize_docs(addresses), count=len(addresses))


@router.post("", status_code=201, response_model=SuccessResponse)
async def add_address(
    payload: CreateAddressRequest,
    user: Dict[str, Any] = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    address_doc = AddressDocument(user=user["_id"], **payload.model_dump()).to_mongo()
    if address_doc["is_default"]:
        await clear_default(db, user["_id"])

    result = await db.addresses.insert_one(address_doc)
    address_doc["_id"] = result.inserted_id

    logger.info(f"Address added for user {user['_id']} (ID: {result.inserted_id})")
    return ok("Address added", serialize_doc(address_doc))


@router.put("/{address_id}", response_model=SuccessResponse)
async def update_address(
    address_id: str,
    payload: UpdateAddressRequest,
    user: Dict[str, Any] = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    address = await load_own_address(db, user, address_id)
    changes = {k: v for k, v in payload.changes().items() if v is not None}
    if hasattr(changes.get("type"), "value"):
        changes["type"] = changes["type"].value

    if changes.get("is_default"):
        await clear_default(db, user["_id"], keep=address["_id"])

    changes["updated_at"] = datetime.utcnow()
    updated = await db.addresses.find_one_and_update(
        {"_id": address["_id"]}, {"$set": changes}, return_document=ReturnDocument.AFTER
    )
    return ok("Address updated", serialize_doc(updated))


@router.delete("/{address_id}", response_model=SuccessResponse)
async def delete_address(
    address_id: str,
    user: Dict[str, Any] = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    address = await load_own_address(db, user, address_id)
    await db.addresses.delete_one({"_id": address["_id"]})

    if address.get("is_default"):
        newest = await db.addresses.find_one({"user": user["_id"]}, sort=[("created_at", -1)])
        if newest:
            await db.addresses.update_one({"_id": newest["_id"]}, {"$set": {"is_default": True}})
            logger.info(f"Address {newest['_id']} promoted to default for user {user['_id']}")

    return ok("Address deleted")
