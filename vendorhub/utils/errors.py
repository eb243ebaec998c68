"""
Helpers for turning failures into HTTP errors with the standard envelope.
"""
import logging

from fastapi import HTTPException
from pymongo.errors import DuplicateKeyError

logger = logging.getLogger(__name__)


def server_error(action: str, exc: Exception) -> HTTPException:
    """
    Log an unexpected failure and wrap it as a 500.

    The detail is a dict so the exception handler can report both the
    message and the underlying error.
    """
    logger.error(f"❌ Failed to {action}: {exc}")
    return HTTPException(status_code=500, detail={"message": f"Failed to {action}", "error": str(exc)})


def conflict_from(exc: DuplicateKeyError, message: str) -> HTTPException:
    """Unique index violations that slipped past the pre-insert check."""
    logger.warning(f"Duplicate key: {exc.details}")
    return HTTPException(status_code=409, detail=message)
