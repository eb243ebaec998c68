"""
Module (business vertical) data model.
"""
from pydantic import Field

from .base import MongoDocument


class ModuleDocument(MongoDocument):
    """A catalog vertical such as Food or Grocery that vendors belong to."""
    name: str = Field(..., min_length=1, description="Module name (unique)")
    active: bool = Field(default=True, description="Whether the module is offered")
