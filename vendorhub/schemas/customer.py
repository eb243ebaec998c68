"""
Customer app schemas: OTP auth, profile and addresses.
"""
from typing import Optional
from pydantic import AliasChoices, BaseModel, EmailStr, Field, field_validator

from ..models.address import AddressType
from ..models.user import MOBILE_PATTERN
from .common import PartialUpdateRequest


class SendOtpRequest(BaseModel):
    """Request schema for requesting an OTP (login or registration)."""
    mobile_number: str = Field(..., pattern=MOBILE_PATTERN, description="10-digit mobile number")
    name: Optional[str] = Field(None, min_length=2, max_length=50)
    email: Optional[EmailStr] = Field(None)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v):
        return v.lower() if v else v


class VerifyOtpRequest(BaseModel):
    """Request schema for verifying an OTP."""
    mobile_number: str = Field(..., pattern=MOBILE_PATTERN, description="10-digit mobile number")
    otp: str = Field(..., min_length=6, max_length=6, description="6-digit OTP")


class UpdateProfileRequest(PartialUpdateRequest):
    """Request schema for updating the current user's profile."""
    name: Optional[str] = Field(None, min_length=2, max_length=50)
    email: Optional[EmailStr] = Field(None)
    profile_image: Optional[str] = Field(None)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if v else v

    @field_validator("email")
    @classmethod
    def lower_email(cls, v):
        return v.lower() if v else v


class AdminUpdateUserRequest(PartialUpdateRequest):
    """Request schema for an admin editing a customer."""
    name: Optional[str] = Field(None, min_length=2, max_length=50)
    email: Optional[EmailStr] = Field(None)
    is_verified: Optional[bool] = Field(None)
    is_blocked: Optional[bool] = Field(None)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v):
        return v.lower() if v else v


class CreateAddressRequest(BaseModel):
    """Request schema for adding an address."""
    name: str = Field(..., min_length=1, max_length=100)
    mobile_number: str = Field(..., pattern=MOBILE_PATTERN)
    pincode: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    city: Optional[str] = Field(None)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    type: AddressType = Field(default=AddressType.HOME)
    is_default: bool = Field(default=False, validation_alias=AliasChoices("is_default", "isDefault"))

    @field_validator("name", "pincode", "address", "mobile_number")
    @classmethod
    def strip_text(cls, v):
        return v.strip()


class UpdateAddressRequest(PartialUpdateRequest):
    """Request schema for updating an address."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    mobile_number: Optional[str] = Field(None, pattern=MOBILE_PATTERN)
    pincode: Optional[str] = Field(None, min_length=1)
    address: Optional[str] = Field(None, min_length=1)
    city: Optional[str] = Field(None)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    type: Optional[AddressType] = Field(None)
    is_default: Optional[bool] = Field(None, validation_alias=AliasChoices("is_default", "isDefault"))
