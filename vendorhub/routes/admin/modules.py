"""
Module (business vertical) management.
"""
import logging
import re
from datetime import datetime
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from ...config import get_database
from ...models.module import ModuleDocument
from ...schemas.catalog import CreateModuleRequest, UpdateModuleRequest
from ...schemas.common import SuccessResponse, ok
from ...utils.dependencies import find_or_404, get_current_admin, validate_object_id
from ...utils.errors import conflict_from, server_error
from ...utils.serializers import serialize_doc, serialize_docs

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/modules", tags=["Modules"], dependencies=[Depends(get_current_admin)])


def _same_name(name: str) -> Dict[str, Any]:
    return {"$regex": f"^{re.escape(name)}$", "$options": "i"}


async def _list_modules(db: AsyncIOMotorDatabase, query: Dict[str, Any]):
    return await db.modules.find(query).sort("created_at", -1).to_list(length=None)


@router.post("", status_code=201, response_model=SuccessResponse)
async def create_module(payload: CreateModuleRequest, db: AsyncIOMotorDatabase = Depends(get_database)):
    try:
        if await db.modules.find_one({"name": _same_name(payload.name)}, {"_id": 1}):
            raise HTTPException(status_code=409, detail="Module with this name already exists")

        module_doc = ModuleDocument(name=payload.name, active=payload.active).to_mongo()
        result = await db.modules.insert_one(module_doc)
        module_doc["_id"] = result.inserted_id

        logger.info(f"Module created: {payload.name} (ID: {result.inserted_id})")
        return ok("Module created successfully", serialize_doc(module_doc))

    except HTTPException:
        raise
    except DuplicateKeyError as e:
        raise conflict_from(e, "Module with this name already exists")
    except Exception as e:
        raise server_error("create module", e)


@router.get("", response_model=SuccessResponse)
async def list_modules(db: AsyncIOMotorDatabase = Depends(get_database)):
    modules = await _list_modules(db, {})
    return ok("Modules retrieved successfully", serialize_docs(modules), count=len(modules))


@router.get("/active/list", response_model=SuccessResponse)
async def list_active_modules(db: AsyncIOMotorDatabase = Depends(get_database)):
    modules = await _list_modules(db, {"active": True})
    return ok("Active modules retrieved successfully", serialize_docs(modules), count=len(modules))


@router.get("/inactive/list", response_model=SuccessResponse)
async def list_inactive_modules(db: AsyncIOMotorDatabase = Depends(get_database)):
    modules = await _list_modules(db, {"active": False})
    return ok("Inactive modules retrieved successfully", serialize_docs(modules), count=len(modules))


@router.get("/{module_id}", response_model=SuccessResponse)
async def get_module(module_id: str, db: AsyncIOMotorDatabase = Depends(get_database)):
    module = await find_or_404(db.modules, module_id, "Module")
    return ok("Module retrieved successfully", serialize_doc(module))


@router.put("/{module_id}", response_model=SuccessResponse)
async def update_module(
    module_id: str,
    payload: UpdateModuleRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """Rename and/or (de)activate a module."""
    try:
        module = await find_or_404(db.modules, module_id, "Module")
        changes = payload.model_dump(exclude_none=True)

        if "name" in changes and changes["name"].lower() != module["name"].lower():
            clash = await db.modules.find_one(
                {"name": _same_name(changes["name"]), "_id": {"$ne": module["_id"]}}, {"_id": 1}
            )
            if clash:
                raise HTTPException(status_code=409, detail="Module with this name already exists")

        changes["updated_at"] = datetime.utcnow()
        updated = await db.modules.find_one_and_update(
            {"_id": module["_id"]}, {"$set": changes}, return_document=ReturnDocument.AFTER
        )
        logger.info(f"Module updated: {module['_id']}")
        return ok("Module updated successfully", serialize_doc(updated))

    except HTTPException:
        raise
    except DuplicateKeyError as e:
        raise conflict_from(e, "Module with this name already exists")
    except Exception as e:
        raise server_error("update module", e)


@router.delete("/{module_id}", response_model=SuccessResponse)
async def delete_module(module_id: str, db: AsyncIOMotorDatabase = Depends(get_database)):
    oid = validate_object_id(module_id, "module")
    module = await db.modules.find_one_and_delete({"_id": oid})
    if not module:
        raise HTTPException(status_code=404, detail="Module not found")

    logger.info(f"🗑️  Module deleted: {module['name']}")
    return ok("Module deleted successfully", serialize_doc(module))
