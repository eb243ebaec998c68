"""
Schemas package for API request/response validation.
These models define the structure of data sent to and from the API endpoints.
"""

# Admin schemas
from .admin import (
    AdminLoginRequest,
    CreateAdminRequest,
    UpdateAdminRequest,
    VendorIdsRequest,
    PermissionsRequest,
)

# Catalog schemas
from .catalog import (
    CreateModuleRequest,
    UpdateModuleRequest,
    CreateVendorRequest,
    UpdateVendorRequest,
    CreateProductRequest,
    UpdateProductRequest,
)

# Customer schemas
from .customer import (
    SendOtpRequest,
    VerifyOtpRequest,
    UpdateProfileRequest,
    AdminUpdateUserRequest,
    CreateAddressRequest,
    UpdateAddressRequest,
)

# Checkout / order schemas
from .checkout import (
    CartLineRequest,
    CartBlockRequest,
    CheckoutRequest,
    PlaceOrderRequest,
    VerifyPaymentRequest,
    UpdateOrderStatusRequest,
    CancelOrderRequest,
)

# Common schemas
from .common import (
    HealthCheckResponse,
    RootResponse,
    ErrorResponse,
    PaginationMeta,
    PartialUpdateRequest,
    SuccessResponse,
    ok,
)

__all__ = [
    # Admin schemas
    "AdminLoginRequest",
    "CreateAdminRequest",
    "UpdateAdminRequest",
    "VendorIdsRequest",
    "PermissionsRequest",

    # Catalog schemas
    "CreateModuleRequest",
    "UpdateModuleRequest",
    "CreateVendorRequest",
    "UpdateVendorRequest",
    "CreateProductRequest",
    "UpdateProductRequest",

    # Customer schemas
    "SendOtpRequest",
    "VerifyOtpRequest",
    "UpdateProfileRequest",
    "AdminUpdateUserRequest",
    "CreateAddressRequest",
    "UpdateAddressRequest",

    # Checkout / order schemas
    "CartLineRequest",
    "CartBlockRequest",
    "CheckoutRequest",
    "PlaceOrderRequest",
    "VerifyPaymentRequest",
    "UpdateOrderStatusRequest",
    "CancelOrderRequest",

    # Common schemas
    "HealthCheckResponse",
    "RootResponse",
    "ErrorResponse",
    "PaginationMeta",
    "PartialUpdateRequest",
    "SuccessResponse",
    "ok",
]
