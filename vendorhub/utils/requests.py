"""
Request body helpers for endpoints that accept JSON or multipart forms.
"""
import logging
from typing import Any, Dict, Iterable, Type, TypeVar

from fastapi import HTTPException, Request
from pydantic import BaseModel
from starlette.datastructures import UploadFile

from ..services.upload_service import upload_service

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

FORM_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


async def read_body(request: Request, upload_fields: Iterable[str] = ()) -> Dict[str, Any]:
    """
    Read a request body as a dictionary.

    Form submissions may carry image files under ``upload_fields``; each one is
    stored through the upload service and replaced by its public URL. Other
    file parts are ignored.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(FORM_TYPES):
        form = await request.form()
        data: Dict[str, Any] = {}
        for key, value in form.multi_items():
            if isinstance(value, UploadFile):
                if key in upload_fields and value.filename:
                    data[key] = await upload_service.save_image(value)
                continue
            data[key] = value
        return data

    raw = await request.body()
    if not raw:
        return {}
    try:
        data = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Request body must be valid JSON")
    if not isinstance(data, dict):
        raise HTTPException(status_code=400, detail="Request body must be a JSON object")
    return data


async def parse_body(request: Request, model: Type[ModelT], upload_fields: Iterable[str] = ()) -> ModelT:
    """Read the body and validate it; pydantic errors surface as 400 responses."""
    data = await read_body(request, upload_fields)
    return model.model_validate(data)
