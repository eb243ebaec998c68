"""
Shared base for MongoDB document models.
"""
from typing import Any, Dict, Optional
from datetime import datetime
from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field


class MongoDocument(BaseModel):
    """
    Base document model.

    Documents are validated with pydantic before they are written and are
    stored as plain dictionaries; ``to_mongo`` produces that dictionary.
    """
    id: Optional[ObjectId] = Field(None, alias="_id", description="Document ID")
    created_at: datetime = Field(default_factory=datetime.utcnow, description="Creation timestamp")
    updated_at: datetime = Field(default_factory=datetime.utcnow, description="Last update timestamp")

    model_config = ConfigDict(
        populate_by_name=True,
        arbitrary_types_allowed=True,
        use_enum_values=True,
        validate_default=True,
    )

    def to_mongo(self) -> Dict[str, Any]:
        """Dump the model for insertion, leaving ``_id`` to MongoDB when unset."""
        doc = self.model_dump(by_alias=True)
        if doc.get("_id") is None:
            doc.pop("_id", None)
        return doc
