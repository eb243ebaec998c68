"""
OTP login / registration, profile and order history for app users.
"""
import logging
from datetime import datetime
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from ...config import get_database, settings
from ...models.cart import OrderStatus
from ...models.user import UserDocument
from ...schemas.common import SuccessResponse, ok
from ...schemas.customer import SendOtpRequest, UpdateProfileRequest, VerifyOtpRequest
from ...services import otp_service
from ...services.auth_service import auth_service
from ...utils.dependencies import get_current_user
from ...utils.errors import conflict_from, server_error
from ...utils.populate import populate, populate_items
from ...utils.serializers import serialize_doc, serialize_docs

logger = logging.getLogger(__name__)

router = APIRouter(tags=["App Auth"])


async def ensure_email_free(db: AsyncIOMotorDatabase, email: str, user_id: Any = None) -> None:
    query: Dict[str, Any] = {"email": email}
    if user_id is not None:
        query["_id"] = {"$ne": user_id}
    if await db.users.find_one(query, {"_id": 1}):
        raise HTTPException(status_code=409, detail="Email is already in use by another user")


@router.post("/auth/send-otp", response_model=SuccessResponse)
async def send_otp(payload: SendOtpRequest, db: AsyncIOMotorDatabase = Depends(get_database)):
    """
    Start a login or registration.

    Unknown mobile numbers get a new unverified user; known ones may update
    their name and email on the way.
    """
    try:
        user = await db.users.find_one({"mobile_number": payload.mobile_number})
        if user and user.get("is_blocked"):
            raise HTTPException(status_code=403, detail="Your account has been blocked. Please contact support.")

        if payload.email:
            await ensure_email_free(db, payload.email, user["_id"] if user else None)

        otp = otp_service.generate_otp()
        otp_fields = {"otp": otp, "otp_expire": otp_service.otp_expiry(), "updated_at": datetime.utcnow()}

        if user is None:
            user_doc = UserDocument(
                mobile_number=payload.mobile_number,
                name=payload.name,
                email=payload.email,
            ).to_mongo()
            user_doc.update(otp_fields)
            result = await db.users.insert_one(user_doc)
            logger.info(f"👤 New user registered: {payload.mobile_number} (ID: {result.inserted_id})")
        else:
            changes = dict(otp_fields)
            if payload.name:
                changes["name"] = payload.name
            if payload.email:
                changes["email"] = payload.email
            await db.users.update_one({"_id": user["_id"]}, {"$set": changes})

        await otp_service.send_otp(payload.mobile_number, otp)

        return ok("OTP sent successfully", {
            "mobile_number": payload.mobile_number,
            "otp_expire_in": f"{settings.otp_expire_minutes} minutes",
        })

    except HTTPException:
        raise
    except DuplicateKeyError as e:
        raise conflict_from(e, "Email is already in use by another user")
    except Exception as e:
        raise server_error("send OTP", e)


@router.post("/auth/verify-otp", response_model=SuccessResponse)
async def verify_otp(payload: VerifyOtpRequest, db: AsyncIOMotorDatabase = Depends(get_database)):
    """Check the code, mark the user verified and hand out an app token."""
    user = await db.users.find_one({"mobile_number": payload.mobile_number})
    if not user:
        raise HTTPException(status_code=404, detail="User not found. Please send OTP first.")
    if user.get("is_blocked"):
        raise HTTPException(status_code=403, detail="Your account has been blocked. Please contact support.")

    check = otp_service.check_otp(user, payload.otp)
    if not check.success:
        raise HTTPException(status_code=400, detail=check.message)

    # single use
    await db.users.update_one(
        {"_id": user["_id"]},
        {"$set": {"is_verified": True, "updated_at": datetime.utcnow()}, "$unset": {"otp": "", "otp_expire": ""}},
    )

    is_new_user = not (user.get("name") or "").strip()
    token = auth_service.create_user_token(str(user["_id"]))
    logger.info(f"🔐 User verified: {user['mobile_number']}")

    return ok("Registration successful" if is_new_user else "Login successful", {
        "user_id": str(user["_id"]),
        "mobile_number": user["mobile_number"],
        "name": user.get("name") or None,
        "email": user.get("email") or None,
        "is_verified": True,
        "token": token,
        "token_type": "Bearer",
    })


@router.post("/auth/logout", response_model=SuccessResponse)
async def logout(user: Dict[str, Any] = Depends(get_current_user)):
    """Tokens are stateless; the client drops its copy."""
    logger.info(f"User logged out: {user['_id']}")
    return ok("Logged out successfully")


@router.get("/profile", response_model=SuccessResponse)
async def get_profile(user: Dict[str, Any] = Depends(get_current_user)):
    return ok("Profile fetched successfully", serialize_doc(user))


@router.put("/profile/update", response_model=SuccessResponse)
async def update_profile(
    payload: UpdateProfileRequest,
    user: Dict[str, Any] = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    try:
        changes = {k: v for k, v in payload.changes().items() if v is not None}
        if "email" in changes and changes["email"] != user.get("email"):
            await ensure_email_free(db, changes["email"], user["_id"])

        changes["updated_at"] = datetime.utcnow()
        updated = await db.users.find_one_and_update(
            {"_id": user["_id"]},
            {"$set": changes},
            projection={"otp": 0, "otp_expire": 0},
            return_document=ReturnDocument.AFTER,
        )
        logger.info(f"Profile updated: {user['_id']}")
        return ok("Profile updated successfully", serialize_doc(updated))

    except HTTPException:
        raise
    except DuplicateKeyError as e:
        raise conflict_from(e, "Email is already in use by another user")
    except Exception as e:
        raise server_error("update profile", e)


@router.get("/my-orders", response_model=SuccessResponse)
async def my_orders(
    user: Dict[str, Any] = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """Every order of the user except open carts, newest first."""
    try:
        orders = await (
            db.carts.find({"user": user["_id"], "status": {"$ne": OrderStatus.NEW.value}})
            .sort("created_at", -1)
            .to_list(length=None)
        )
        await populate(db.vendors, orders, "vendor", {"name": 1, "vendor_image": 1, "address": 1, "mobile_number": 1})
        await populate(db.addresses, orders, "address", {"name": 1, "address": 1, "city": 1, "pincode": 1, "type": 1})
        await populate_items(db.products, orders, {"name": 1, "image": 1})
        return ok("Orders retrieved successfully", serialize_docs(orders), count=len(orders))
    except Exception as e:
        raise server_error("fetch orders", e)
