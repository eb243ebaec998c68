"""
Nearby vendor search for the customer app.
"""
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from ..config import settings
from ..models.vendor import VendorStatus

# Fields returned to the app; contact details stay, admin-only fields do not
VENDOR_FIELDS = {
    "name": 1,
    "email": 1,
    "mobile_number": 1,
    "address": 1,
    "description": 1,
    "vendor_image": 1,
    "preparation_time_minute": 1,
    "open_time": 1,
    "close_time": 1,
    "timezone": 1,
    "packaging_charge": 1,
    "convenience_charge": 1,
    "delivery_charge": 1,
    "location": 1,
    "module": {"_id": 1, "name": 1},
    "distance": 1,
    "created_at": 1,
}


def new_vendor_cutoff(now: Optional[datetime] = None) -> datetime:
    return (now or datetime.utcnow()) - timedelta(days=settings.new_vendor_days)


def nearby_pipeline(latitude: float, longitude: float, query: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    ``$geoNear`` must be the first stage and uses the 2dsphere index on
    ``vendors.location``; results come back nearest first.
    """
    return [
        {
            "$geoNear": {
                "near": {"type": "Point", "coordinates": [longitude, latitude]},
                "distanceField": "distance",
                "spherical": True,
                "query": query,
            }
        },
        {"$lookup": {"from": "modules", "localField": "module", "foreignField": "_id", "as": "module"}},
        {"$unwind": {"path": "$module", "preserveNullAndEmptyArrays": True}},
        {"$project": VENDOR_FIELDS},
    ]


def with_distance(vendor: Dict[str, Any], cutoff: datetime) -> Dict[str, Any]:
    distance = vendor.get("distance")
    vendor["distance_meters"] = distance
    vendor["distance_km"] = round(distance / 1000, 2) if distance is not None else None
    created_at = vendor.get("created_at")
    vendor["is_new"] = bool(created_at and created_at >= cutoff)
    return vendor


async def find_nearby_vendors(db, latitude: float, longitude: float, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Active vendors by distance plus the recently added subset ("what's new")."""
    cutoff = new_vendor_cutoff(now)
    active = {"status": VendorStatus.ACTIVE.value}

    vendors = await db.vendors.aggregate(nearby_pipeline(latitude, longitude, active)).to_list(length=None)
    new_vendors = await db.vendors.aggregate(
        nearby_pipeline(latitude, longitude, {**active, "created_at": {"$gte": cutoff}})
    ).to_list(length=None)

    return {
        "vendors": [with_distance(vendor, cutoff) for vendor in vendors],
        "whats_new": [with_distance(vendor, cutoff) for vendor in new_vendors],
    }
