"""
Models package for database document structures.
These models represent how data is stored in MongoDB.
"""
from .base import MongoDocument
from .admin import AdminDocument, AdminPermissions, AdminRole
from .module import ModuleDocument
from .vendor import VendorDocument, VendorStatus, VendorTimezone, GeoPoint, build_location
from .product import ProductDocument
from .user import UserDocument
from .address import AddressDocument, AddressType
from .cart import (
    CartDocument,
    CartItemDocument,
    OrderStatus,
    PaymentStatus,
    REVENUE_STATUSES,
)

__all__ = [
    "MongoDocument",

    # Admin models
    "AdminDocument",
    "AdminPermissions",
    "AdminRole",

    # Catalog models
    "ModuleDocument",
    "VendorDocument",
    "VendorStatus",
    "VendorTimezone",
    "GeoPoint",
    "build_location",
    "ProductDocument",

    # Customer models
    "UserDocument",
    "AddressDocument",
    "AddressType",

    # Cart / order models
    "CartDocument",
    "CartItemDocument",
    "OrderStatus",
    "PaymentStatus",
    "REVENUE_STATUSES",
]
