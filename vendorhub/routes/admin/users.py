"""
Customer management for super admins.
"""
import logging
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from ...config import get_database, settings
from ...models.admin import AdminRole
from ...schemas.common import PaginationMeta, SuccessResponse, ok
from ...schemas.customer import AdminUpdateUserRequest
from ...services.stats_service import month_range
from ...utils.dependencies import find_or_404, require_role, search_regex, validate_object_id
from ...utils.errors import conflict_from, server_error
from ...utils.serializers import serialize_doc, serialize_docs

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/users",
    tags=["Users"],
    dependencies=[Depends(require_role(AdminRole.SUPER_ADMIN.value))],
)

HIDDEN = {"otp": 0, "otp_expire": 0}


@router.get("/stats", response_model=SuccessResponse)
async def get_user_stats(db: AsyncIOMotorDatabase = Depends(get_database)):
    month_start, month_end = month_range(datetime.utcnow())
    stats = {
        "total_users": await db.users.count_documents({}),
        "verified_users": await db.users.count_documents({"is_verified": True}),
        "blocked_users": await db.users.count_documents({"is_blocked": True}),
        "new_users_this_month": await db.users.count_documents(
            {"created_at": {"$gte": month_start, "$lt": month_end}}
        ),
    }
    return ok("User statistics fetched successfully", stats)


@router.get("", response_model=SuccessResponse)
async def list_users(
    search: Optional[str] = Query(None, description="Match name, email or mobile number"),
    is_blocked: Optional[bool] = Query(None),
    is_verified: Optional[bool] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    filter_query: Dict[str, Any] = {}
    if search:
        pattern = search_regex(search)
        filter_query["$or"] = [{"name": pattern}, {"email": pattern}, {"mobile_number": pattern}]
    if is_blocked is not None:
        filter_query["is_blocked"] = is_blocked
    if is_verified is not None:
        filter_query["is_verified"] = is_verified

    try:
        total = await db.users.count_documents(filter_query)
        users = await (
            db.users.find(filter_query, HIDDEN)
            .sort("created_at", -1)
            .skip((page - 1) * limit)
            .limit(limit)
            .to_list(length=limit)
        )
        return ok(
            "Users fetched successfully",
            serialize_docs(users),
            count=len(users),
            pagination=PaginationMeta.build(page, limit, total).as_dict("total_users"),
        )
    except Exception as e:
        raise server_error("fetch users", e)


@router.get("/{user_id}", response_model=SuccessResponse)
async def get_user(user_id: str, db: AsyncIOMotorDatabase = Depends(get_database)):
    user = await find_or_404(db.users, user_id, "User", HIDDEN)
    data = serialize_doc(user)
    data["order_count"] = await db.carts.count_documents({"user": user["_id"], "status": {"$ne": "New"}})
    data["address_count"] = await db.addresses.count_documents({"user": user["_id"]})
    return ok("User fetched successfully", data)


@router.put("/{user_id}", response_model=SuccessResponse)
async def update_user(
    user_id: str,
    payload: AdminUpdateUserRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    try:
        user = await find_or_404(db.users, user_id, "User", HIDDEN)
        changes = {k: v for k, v in payload.changes().items() if v is not None}

        if "email" in changes and changes["email"] != user.get("email"):
            clash = await db.users.find_one({"email": changes["email"], "_id": {"$ne": user["_id"]}}, {"_id": 1})
            if clash:
                raise HTTPException(status_code=409, detail="Email is already in use by another user")

        changes["updated_at"] = datetime.utcnow()
        updated = await db.users.find_one_and_update(
            {"_id": user["_id"]},
            {"$set": changes},
            projection=HIDDEN,
            return_document=ReturnDocument.AFTER,
        )
        logger.info(f"User updated by admin: {user['_id']}")
        return ok("User updated successfully", serialize_doc(updated))

    except HTTPException:
        raise
    except DuplicateKeyError as e:
        raise conflict_from(e, "Email is already in use by another user")
    except Exception as e:
        raise server_error("update user", e)


@router.delete("/{user_id}", response_model=SuccessResponse)
async def delete_user(user_id: str, db: AsyncIOMotorDatabase = Depends(get_database)):
    """Remove a user with their address book and open carts; placed orders are kept."""
    oid = validate_object_id(user_id, "user")
    user = await db.users.find_one_and_delete({"_id": oid}, projection=HIDDEN)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    await db.addresses.delete_many({"user": oid})
    await db.carts.delete_many({"user": oid, "status": "New"})
    logger.info(f"🗑️  User deleted: {user.get('mobile_number')}")
    return ok("User deleted successfully", serialize_doc(user))


@router.put("/{user_id}/toggle-block", response_model=SuccessResponse)
async def toggle_block(user_id: str, db: AsyncIOMotorDatabase = Depends(get_database)):
    user = await find_or_404(db.users, user_id, "User", HIDDEN)
    blocked = not user.get("is_blocked", False)

    updated = await db.users.find_one_and_update(
        {"_id": user["_id"]},
        {"$set": {"is_blocked": blocked, "updated_at": datetime.utcnow()}},
        projection=HIDDEN,
        return_document=ReturnDocument.AFTER,
    )
    state = "blocked" if blocked else "unblocked"
    logger.info(f"User {user['_id']} {state}")
    return ok(f"User {state} successfully", serialize_doc(updated))
