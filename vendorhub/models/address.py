"""
Address book data model.
"""
from enum import Enum
from typing import Optional
from bson import ObjectId
from pydantic import Field

from .base import MongoDocument
from .user import MOBILE_PATTERN


class AddressType(str, Enum):
    HOME = "home"
    WORK = "work"
    OTHER = "other"


class AddressDocument(MongoDocument):
    """A delivery address owned by one user."""
    user: ObjectId = Field(..., description="Owner reference")
    name: str = Field(..., min_length=1, max_length=100)
    mobile_number: str = Field(..., pattern=MOBILE_PATTERN)
    pincode: str = Field(..., min_length=1)
    city: Optional[str] = Field(None)
    address: str = Field(..., min_length=1)
    latitude: Optional[float] = Field(None)
    longitude: Optional[float] = Field(None)
    type: AddressType = Field(default=AddressType.HOME)
    is_default: bool = Field(default=False)
