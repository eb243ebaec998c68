"""
Product data models for database documents.
These represent the actual structure of documents stored in MongoDB.
"""
from typing import Optional
from bson import ObjectId
from pydantic import Field

from .base import MongoDocument


class ProductDocument(MongoDocument):
    """
    Product document model representing the MongoDB document structure.
    A product is sold by exactly one vendor.
    """
    vendor_id: ObjectId = Field(..., description="Vendor reference")
    module_id: Optional[ObjectId] = Field(None, description="Module reference")
    name: str = Field(..., min_length=1, max_length=200, description="Product name")
    main_price: float = Field(..., ge=0, description="List price")
    special_price: Optional[float] = Field(None, ge=0, description="Offer price, if any")
    preparation_time_minute: float = Field(default=0, ge=0)
    packaging_charge: float = Field(default=0, ge=0, description="Packaging charge per unit")
    image: str = Field(default="")
    is_active: bool = Field(default=True)
