"""
Admin API schemas for request validation.
"""
from typing import List, Optional
from pydantic import BaseModel, EmailStr, Field, field_validator

from ..models.admin import AdminRole
from .common import PartialUpdateRequest


def _object_id_string(value: str) -> str:
    if len(value) != 24:
        raise ValueError("Vendor ID must be 24 characters")
    try:
        int(value, 16)
    except ValueError:
        raise ValueError("Invalid vendor ID format")
    return value


class PermissionsRequest(BaseModel):
    can_manage_orders: Optional[bool] = None
    can_manage_products: Optional[bool] = None
    can_update_vendor: Optional[bool] = None
    can_verify_vendors: Optional[bool] = None


class AdminLoginRequest(BaseModel):
    """Request schema for admin login."""
    email: EmailStr = Field(..., description="Login email")
    password: str = Field(..., min_length=1, description="Password")

    @field_validator("email")
    @classmethod
    def lower_email(cls, v):
        return v.lower()


class CreateAdminRequest(BaseModel):
    """Request schema for creating an admin (super admin only)."""
    name: str = Field(..., min_length=2, max_length=50, description="Admin name")
    email: EmailStr = Field(..., description="Login email")
    password: str = Field(..., min_length=6, description="Password (at least 6 characters)")
    role: AdminRole = Field(default=AdminRole.ADMIN, description="super_admin or admin")
    vendor_ids: List[str] = Field(default_factory=list, description="Assigned vendor IDs")
    permissions: PermissionsRequest = Field(default_factory=PermissionsRequest)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v):
        v = v.strip()
        if len(v) < 2:
            raise ValueError("Name must be at least 2 characters")
        return v

    @field_validator("email")
    @classmethod
    def lower_email(cls, v):
        return v.lower()

    @field_validator("vendor_ids")
    @classmethod
    def validate_vendor_ids(cls, v):
        return [_object_id_string(item) for item in v]


class UpdateAdminRequest(PartialUpdateRequest):
    """Request schema for updating an admin; at least one field is required."""
    name: Optional[str] = Field(None, min_length=2, max_length=50)
    email: Optional[EmailStr] = Field(None)
    password: Optional[str] = Field(None, min_length=6)
    role: Optional[AdminRole] = Field(None)
    vendor_ids: Optional[List[str]] = Field(None)
    permissions: Optional[PermissionsRequest] = Field(None)
    is_active: Optional[bool] = Field(None)
    is_blocked: Optional[bool] = Field(None)
    profile_image: Optional[str] = Field(None)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v):
        return v.lower() if v else v

    @field_validator("vendor_ids")
    @classmethod
    def validate_vendor_ids(cls, v):
        return [_object_id_string(item) for item in v] if v is not None else v


class VendorIdsRequest(BaseModel):
    """Request schema for assigning / removing vendors."""
    vendor_ids: List[str] = Field(..., min_length=1, description="Vendor IDs")

    @field_validator("vendor_ids")
    @classmethod
    def validate_vendor_ids(cls, v):
        return [_object_id_string(item) for item in v]
