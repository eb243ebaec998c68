"""
Common schemas used across the API.
"""
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator


class SuccessResponse(BaseModel):
    """
    Envelope for every successful response.

    Extra keys (``count``, ``pagination``, ``stats``...) are passed straight
    through to the JSON body.
    """
    success: bool = Field(True, description="Operation success status")
    message: str = Field(..., description="Success message")
    data: Optional[Any] = Field(None, description="Response data")

    model_config = ConfigDict(extra="allow")


class ErrorResponse(BaseModel):
    """Envelope for every failed response."""
    success: bool = Field(False, description="Always false")
    message: str = Field(..., description="Human-readable error message")
    errors: Optional[List[str]] = Field(None, description="Validation messages, when several apply")
    error: Optional[str] = Field(None, description="Underlying error for unexpected failures")


class HealthCheckResponse(BaseModel):
    """Response schema for health check endpoint."""
    success: bool = Field(True)
    message: str = Field(..., description="Server status")
    database: str = Field(..., description="Database connection status")
    timestamp: str = Field(..., description="Health check timestamp")
    version: str = Field(..., description="Application version")


class RootResponse(BaseModel):
    """Response schema for root endpoint."""
    success: bool = Field(True)
    message: str = Field(..., description="Welcome message")
    version: str = Field(..., description="API version")
    docs: str = Field(..., description="Documentation URL")
    health: str = Field(..., description="Health check URL")
    status: str = Field(..., description="Application status")
    timestamp: str = Field(..., description="Response timestamp")


class PaginationMeta(BaseModel):
    """Pagination metadata for page-based list responses."""
    current_page: int = Field(..., description="Current page number")
    total_pages: int = Field(..., description="Total number of pages")
    total: int = Field(..., description="Total number of items")
    limit: int = Field(..., description="Items per page")

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "PaginationMeta":
        return cls(current_page=page, total_pages=-(-total // limit) if limit else 0, total=total, limit=limit)

    def as_dict(self, total_key: str = "total") -> Dict[str, Any]:
        """Dump with the total under a resource-specific key, e.g. ``total_orders``."""
        data = self.model_dump()
        data[total_key] = data.pop("total")
        return data


class PartialUpdateRequest(BaseModel):
    """Base for update payloads where every field is optional but one is required."""

    @model_validator(mode="after")
    def require_one_field(self):
        if not self.model_fields_set:
            raise ValueError("At least one field is required to update")
        return self

    def changes(self) -> Dict[str, Any]:
        """Only the fields the client actually sent."""
        return self.model_dump(exclude_unset=True)


def ok(message: str, data: Any = None, **extra: Any) -> SuccessResponse:
    """Shorthand for building a success envelope."""
    return SuccessResponse(message=message, data=data, **extra)
