"""
Reference population for documents that point at other collections.
"""
from typing import Any, Dict, List, Optional

from bson import ObjectId


async def _lookup(collection, ids, projection: Optional[Dict[str, Any]]) -> Dict[ObjectId, Dict[str, Any]]:
    if not ids:
        return {}
    cursor = collection.find({"_id": {"$in": list(ids)}}, projection)
    return {doc["_id"]: doc for doc in await cursor.to_list(length=None)}


async def populate(
    collection,
    docs: List[Dict[str, Any]],
    field: str,
    projection: Optional[Dict[str, Any]] = None,
    target: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    Replace the ObjectId stored in ``doc[field]`` with the referenced document.

    One query is issued per call. Dangling references become ``None``. When
    ``target`` is given the document is written there and ``field`` removed.
    """
    ids = {doc.get(field) for doc in docs if isinstance(doc.get(field), ObjectId)}
    found = await _lookup(collection, ids, projection)

    for doc in docs:
        ref = doc.get(field)
        if not isinstance(ref, ObjectId):
            continue
        if target:
            doc.pop(field)
            doc[target] = found.get(ref)
        else:
            doc[field] = found.get(ref)
    return docs


async def populate_items(
    collection,
    docs: List[Dict[str, Any]],
    projection: Optional[Dict[str, Any]] = None,
) -> List[Dict[str, Any]]:
    """Populate ``items[].product`` on carts and orders, keeping the id when the product is gone."""
    ids = {
        item.get("product")
        for doc in docs
        for item in doc.get("items") or []
        if isinstance(item.get("product"), ObjectId)
    }
    found = await _lookup(collection, ids, projection)

    for doc in docs:
        for item in doc.get("items") or []:
            ref = item.get("product")
            if ref in found:
                item["product"] = found[ref]
    return docs
