"""
Vendor data models for database documents.
"""
from enum import Enum, IntEnum
from typing import Any, Dict, List
from bson import ObjectId
from pydantic import BaseModel, Field

from .base import MongoDocument

TIME_PATTERN = r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$"


class VendorStatus(IntEnum):
    INACTIVE = 0
    ACTIVE = 1


class VendorTimezone(str, Enum):
    KOLKATA = "Asia/Kolkata"
    BANGALORE = "Asia/Bangalore"
    UTC = "UTC"


class GeoPoint(BaseModel):
    """GeoJSON point; coordinates are [longitude, latitude]."""
    type: str = Field(default="Point")
    coordinates: List[float] = Field(..., min_length=2, max_length=2)


def build_location(latitude: Any, longitude: Any) -> Dict[str, Any]:
    """Build the GeoJSON point used by the 2dsphere index."""
    return GeoPoint(coordinates=[float(longitude), float(latitude)]).model_dump()


class VendorDocument(MongoDocument):
    """Vendor document as stored in the ``vendors`` collection."""
    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(...)
    mobile_number: int = Field(...)
    address: str = Field(..., min_length=1)
    latitude: str = Field(...)
    longitude: str = Field(...)
    location: GeoPoint = Field(...)
    description: str = Field(default="")
    vendor_image: str = Field(default="")
    preparation_time_minute: float = Field(default=0)
    open_time: str = Field(..., pattern=TIME_PATTERN)
    close_time: str = Field(..., pattern=TIME_PATTERN)
    timezone: VendorTimezone = Field(default=VendorTimezone.KOLKATA)
    packaging_charge: float = Field(default=0)
    convenience_charge: float = Field(default=0)
    delivery_charge: float = Field(default=0)
    status: VendorStatus = Field(default=VendorStatus.ACTIVE)
    module: ObjectId = Field(..., description="Module reference")


def vendor_status_text(vendor: Dict[str, Any]) -> str:
    return "Active" if vendor.get("status") == VendorStatus.ACTIVE else "Inactive"
