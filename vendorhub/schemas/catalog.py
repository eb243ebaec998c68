"""
Catalog API schemas: modules, vendors and products.
"""
import math
from typing import Optional
from pydantic import BaseModel, EmailStr, Field, ValidationInfo, field_validator, model_validator

from ..models.vendor import TIME_PATTERN, VendorStatus, VendorTimezone
from .common import PartialUpdateRequest


COORDINATE_LIMITS = {"latitude": 90, "longitude": 180}


def _coordinate(value: str, field: str) -> str:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError("Latitude and longitude must be numeric")
    limit = COORDINATE_LIMITS[field]
    if not math.isfinite(number) or abs(number) > limit:
        raise ValueError(f"{field.capitalize()} must be between -{limit} and {limit}")
    return str(value).strip()


# Modules

class CreateModuleRequest(BaseModel):
    """Request schema for creating a module."""
    name: str = Field(..., min_length=1, description="Module name")
    active: bool = Field(default=True, description="Whether the module is active")

    @field_validator("name")
    @classmethod
    def strip_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Module name is required")
        return v


class UpdateModuleRequest(BaseModel):
    """Request schema for updating a module."""
    name: Optional[str] = Field(None, min_length=1)
    active: Optional[bool] = Field(None)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if v is not None else v

    @model_validator(mode="after")
    def require_name_or_active(self):
        if self.name is None and self.active is None:
            raise ValueError("At least one field (name or active) is required to update")
        return self


# Vendors

class CreateVendorRequest(BaseModel):
    """Request schema for creating a vendor."""
    name: str = Field(..., min_length=1, max_length=100, description="Vendor name")
    email: EmailStr = Field(..., description="Contact email")
    mobile_number: int = Field(..., description="Contact number")
    address: str = Field(..., min_length=1, description="Street address")
    latitude: str = Field(..., description="Latitude")
    longitude: str = Field(..., description="Longitude")
    open_time: str = Field(..., pattern=TIME_PATTERN, description="Opening time, HH:mm (24-hour)")
    close_time: str = Field(..., pattern=TIME_PATTERN, description="Closing time, HH:mm (24-hour)")
    timezone: VendorTimezone = Field(default=VendorTimezone.KOLKATA)
    preparation_time_minute: float = Field(default=0, ge=0)
    vendor_image: str = Field(default="")
    packaging_charge: float = Field(default=0, ge=0)
    convenience_charge: float = Field(default=0, ge=0)
    delivery_charge: float = Field(default=0, ge=0)
    description: str = Field(default="")
    status: VendorStatus = Field(default=VendorStatus.ACTIVE, description="1 = active, 0 = inactive")
    module: str = Field(..., min_length=1, description="Module ID")

    @field_validator("email")
    @classmethod
    def lower_email(cls, v):
        return v.lower()

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def validate_coordinate(cls, v, info: ValidationInfo):
        return _coordinate(v, info.field_name)


class UpdateVendorRequest(PartialUpdateRequest):
    """Request schema for updating a vendor."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = Field(None)
    mobile_number: Optional[int] = Field(None)
    address: Optional[str] = Field(None, min_length=1)
    latitude: Optional[str] = Field(None)
    longitude: Optional[str] = Field(None)
    open_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    close_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    timezone: Optional[VendorTimezone] = Field(None)
    preparation_time_minute: Optional[float] = Field(None, ge=0)
    vendor_image: Optional[str] = Field(None)
    packaging_charge: Optional[float] = Field(None, ge=0)
    convenience_charge: Optional[float] = Field(None, ge=0)
    delivery_charge: Optional[float] = Field(None, ge=0)
    description: Optional[str] = Field(None)
    status: Optional[VendorStatus] = Field(None)
    module: Optional[str] = Field(None)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v):
        return v.lower() if v else v

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def validate_coordinate(cls, v, info: ValidationInfo):
        return _coordinate(v, info.field_name) if v is not None else v


# Products

class CreateProductRequest(BaseModel):
    """Request schema for creating a product."""
    vendor_id: str = Field(..., description="Vendor ID")
    name: str = Field(..., min_length=1, max_length=200, description="Product name")
    main_price: float = Field(..., ge=0, description="List price")
    special_price: Optional[float] = Field(None, ge=0, description="Offer price")
    preparation_time_minute: float = Field(default=0, ge=0)
    packaging_charge: float = Field(default=0, ge=0, description="Packaging charge per unit")
    image: str = Field(default="")
    is_active: bool = Field(default=True)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v):
        return v.strip()

    @model_validator(mode="after")
    def special_not_above_main(self):
        if self.special_price is not None and self.special_price > self.main_price:
            raise ValueError("Special price cannot exceed main price")
        return self


class UpdateProductRequest(PartialUpdateRequest):
    """Request schema for updating a product."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    main_price: Optional[float] = Field(None, ge=0)
    special_price: Optional[float] = Field(None, ge=0)
    preparation_time_minute: Optional[float] = Field(None, ge=0)
    packaging_charge: Optional[float] = Field(None, ge=0)
    image: Optional[str] = Field(None)
    is_active: Optional[bool] = Field(None)
