"""
MongoDB document serialization utilities
"""
from typing import Dict, Any, Iterable, List, Optional
from bson import ObjectId

# Fields that are stored but must never be returned to a client
SECRET_FIELDS = ("password", "otp", "otp_expire")


def convert_object_ids(value: Any) -> Any:
    """
    Recursively convert ObjectId instances to strings.

    Works on nested documents, populated references and arrays of items.
    """
    if isinstance(value, dict):
        return {key: convert_object_ids(item) for key, item in value.items()}
    if isinstance(value, list):
        return [convert_object_ids(item) for item in value]
    if isinstance(value, ObjectId):
        return str(value)
    return value


def serialize_doc(doc: Optional[Dict[str, Any]], hide: Iterable[str] = SECRET_FIELDS) -> Optional[Dict[str, Any]]:
    """
    Convert a MongoDB document into a JSON-ready dictionary

    Args:
        doc: MongoDB document dictionary
        hide: Field names to drop from the output

    Returns:
        Serialized copy of the document, or None if input is None
    """
    if doc is None:
        return None

    serialized_doc = {key: value for key, value in doc.items() if key not in hide}
    return convert_object_ids(serialized_doc)


def serialize_docs(docs: List[Dict[str, Any]], hide: Iterable[str] = SECRET_FIELDS) -> List[Dict[str, Any]]:
    """Serialize a list of MongoDB documents"""
    return [serialize_doc(doc, hide) for doc in docs if doc is not None]
