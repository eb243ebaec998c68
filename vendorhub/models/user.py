"""
User data model for the customer app.
"""
from typing import Optional
from datetime import datetime
from pydantic import Field

from .base import MongoDocument

MOBILE_PATTERN = r"^[6-9]\d{9}$"


class UserDocument(MongoDocument):
    """Customer document; identified by mobile number and logged in by OTP."""
    name: Optional[str] = Field(None, max_length=50)
    email: Optional[str] = Field(None, description="Optional, unique when present")
    mobile_number: str = Field(..., pattern=MOBILE_PATTERN)
    otp: Optional[str] = Field(None)
    otp_expire: Optional[datetime] = Field(None)
    is_verified: bool = Field(default=False)
    is_blocked: bool = Field(default=False)
    profile_image: Optional[str] = Field(None)

    def to_mongo(self):
        doc = super().to_mongo()
        # The sparse unique index only skips documents without the field
        if not doc.get("email"):
            doc.pop("email", None)
        return doc
