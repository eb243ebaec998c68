"""
FastAPI dependencies for database access, authentication and common validations
"""
import logging
import re
from typing import Any, Callable, Dict, List, Optional

import jwt
from bson import ObjectId
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from motor.motor_asyncio import AsyncIOMotorDatabase

from ..config import get_database
from ..models.admin import is_super_admin
from ..services.auth_service import auth_service

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def validate_object_id(object_id: Any, resource_name: str = "resource") -> ObjectId:
    """
    Validate and convert a string to ObjectId

    Args:
        object_id: String representation of ObjectId
        resource_name: Name of the resource for error messages

    Returns:
        Valid ObjectId instance

    Raises:
        HTTPException: If ObjectId format is invalid
    """
    if isinstance(object_id, ObjectId):
        return object_id
    if not isinstance(object_id, str) or not ObjectId.is_valid(object_id):
        raise HTTPException(
            status_code=400,
            detail=f"Invalid {resource_name} ID format"
        )
    return ObjectId(object_id)


def validate_object_ids(object_ids: List[str], resource_name: str = "resource") -> List[ObjectId]:
    return [validate_object_id(object_id, resource_name) for object_id in object_ids]


async def find_or_404(
    collection,
    object_id: Any,
    resource_name: str,
    projection: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Fetch a document by id or fail

    Raises:
        HTTPException: 400 on a malformed id, 404 when the document does not exist
    """
    oid = validate_object_id(object_id, resource_name.lower())
    document = await collection.find_one({"_id": oid}, projection)
    if not document:
        raise HTTPException(status_code=404, detail=f"{resource_name} not found")
    return document


def search_regex(term: str) -> Dict[str, str]:
    """Case-insensitive substring match on user input."""
    return {"$regex": re.escape(term), "$options": "i"}


def _bearer_token(credentials: Optional[HTTPAuthorizationCredentials], missing_message: str) -> str:
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=401, detail=missing_message)
    return credentials.credentials


def _decode(token: str, expired_message: str, invalid_message: str) -> Dict[str, Any]:
    try:
        return auth_service.decode_token(token)
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail=expired_message)
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail=invalid_message)


async def get_current_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncIOMotorDatabase = Depends(get_database),
) -> Dict[str, Any]:
    """
    Resolve the admin behind a portal request

    Returns:
        Admin document without password, ``vendor_ids`` populated with
        ``{_id, name, email, status}``

    Raises:
        HTTPException: 401 for missing/expired/invalid tokens or unknown admins,
        403 for blocked or inactive accounts
    """
    token = _bearer_token(credentials, "No token provided. Please login.")
    payload = _decode(token, "Token has expired. Please login again.", "Invalid token. Please login again.")

    admin_id = payload.get("id")
    if not admin_id or not ObjectId.is_valid(str(admin_id)):
        raise HTTPException(status_code=401, detail="Invalid token payload")

    admin = await db.admins.find_one({"_id": ObjectId(str(admin_id))}, {"password": 0})
    if not admin:
        raise HTTPException(status_code=401, detail="Admin not found")

    if admin.get("is_blocked"):
        raise HTTPException(status_code=403, detail="Your account has been blocked. Please contact support.")
    if not admin.get("is_active", True):
        raise HTTPException(status_code=403, detail="Your account is inactive. Please contact support.")

    vendor_ids = admin.get("vendor_ids") or []
    if vendor_ids:
        cursor = db.vendors.find({"_id": {"$in": vendor_ids}}, {"name": 1, "email": 1, "status": 1})
        admin["vendor_ids"] = await cursor.to_list(length=None)

    return admin


def require_role(*allowed_roles: str) -> Callable:
    """Dependency factory: only admins with one of ``allowed_roles`` pass."""

    async def dependency(admin: Dict[str, Any] = Depends(get_current_admin)) -> Dict[str, Any]:
        if admin.get("role") not in allowed_roles:
            raise HTTPException(status_code=403, detail="Access denied. Insufficient permissions.")
        return admin

    return dependency


def permission_words(permission_name: str) -> str:
    """``can_manage_orders`` -> ``manage orders``"""
    return permission_name.replace("can_", "", 1).replace("_", " ")


def has_permission(admin: Dict[str, Any], permission_name: str) -> bool:
    if is_super_admin(admin):
        return True
    return bool((admin.get("permissions") or {}).get(permission_name))


def require_permission(permission_name: str) -> Callable:
    """Dependency factory: super admins always pass, others need the flag."""

    async def dependency(admin: Dict[str, Any] = Depends(get_current_admin)) -> Dict[str, Any]:
        if not has_permission(admin, permission_name):
            raise HTTPException(
                status_code=403,
                detail=f"You don't have permission to {permission_words(permission_name)}"
            )
        return admin

    return dependency


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncIOMotorDatabase = Depends(get_database),
) -> Dict[str, Any]:
    """
    Resolve the customer behind an app request

    Raises:
        HTTPException: 401 for missing/expired/invalid tokens or unknown users,
        403 for blocked users
    """
    token = _bearer_token(credentials, "No token provided")
    payload = _decode(token, "Token has expired", "Invalid token")

    user_id = payload.get("userId")
    if not user_id or not ObjectId.is_valid(str(user_id)):
        raise HTTPException(status_code=401, detail="Invalid token payload")

    user = await db.users.find_one({"_id": ObjectId(str(user_id))}, {"otp": 0, "otp_expire": 0})
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    if user.get("is_blocked"):
        raise HTTPException(status_code=403, detail="Your account has been blocked. Please contact support.")

    return user
