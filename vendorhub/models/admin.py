"""
Admin data models for database documents.
"""
from enum import Enum
from typing import Any, Dict, List, Optional
from datetime import datetime
from bson import ObjectId
from pydantic import BaseModel, Field

from .base import MongoDocument


class AdminRole(str, Enum):
    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"


class AdminPermissions(BaseModel):
    """Feature flags granted to a non-super admin."""
    can_manage_orders: bool = Field(default=False, description="May change order status")
    can_manage_products: bool = Field(default=False, description="May create and edit products")
    can_update_vendor: bool = Field(default=False, description="May edit assigned vendors")
    can_verify_vendors: bool = Field(default=False, description="May activate assigned vendors")


class AdminDocument(MongoDocument):
    """Admin document as stored in the ``admins`` collection."""
    name: str = Field(..., min_length=2, max_length=50, description="Admin name")
    email: str = Field(..., description="Login email (unique, lower-case)")
    password: str = Field(..., description="bcrypt hash of the password")
    role: AdminRole = Field(default=AdminRole.ADMIN, description="Admin role")
    vendor_ids: List[ObjectId] = Field(default_factory=list, description="Vendors this admin may manage")
    permissions: AdminPermissions = Field(default_factory=AdminPermissions)
    is_active: bool = Field(default=True)
    is_blocked: bool = Field(default=False)
    last_login: Optional[datetime] = Field(None)
    profile_image: Optional[str] = Field(None)


def is_super_admin(admin: Dict[str, Any]) -> bool:
    return admin.get("role") == AdminRole.SUPER_ADMIN.value


def admin_vendor_ids(admin: Dict[str, Any]) -> List[ObjectId]:
    """Vendor ids assigned to an admin, whether stored raw or populated."""
    ids = []
    for vendor in admin.get("vendor_ids") or []:
        if isinstance(vendor, dict):
            vendor = vendor.get("_id")
        ids.append(ObjectId(str(vendor)))
    return ids


def has_vendor_access(admin: Dict[str, Any], vendor_id: Any) -> bool:
    """Super admins reach every vendor; others only their assigned ones."""
    if is_super_admin(admin):
        return True
    return str(vendor_id) in {str(v) for v in admin_vendor_ids(admin)}


def admin_status_text(admin: Dict[str, Any]) -> str:
    if admin.get("is_blocked"):
        return "Blocked"
    if not admin.get("is_active", True):
        return "Inactive"
    return "Active"
