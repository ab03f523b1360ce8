"""
Service tracking : journal append-only des mouvements d'un colis.
"""
from datetime import datetime, timezone
from typing import Optional

from core.utils import strip_mongo_id
from database import db


async def record_tracking(
    tracking_id: str,
    status: str,
    parcel_id: Optional[str] = None,
    message: Optional[str] = None,
    updated_by: Optional[str] = None,
) -> dict:
    """Insère un événement dans la collection trackings (jamais modifié ensuite)."""
    event = {
        "tracking_id": tracking_id,
        "parcel_id":   parcel_id,
        "status":      status,
        "message":     message,
        "timestamp":   datetime.now(timezone.utc),
        "updated_by":  updated_by,
    }
    await db.trackings.insert_one(event)
    return strip_mongo_id(event)


async def record_parcel_event(parcel: dict, status: str, message: str, updated_by: Optional[str]) -> None:
    """Trace une transition de colis, si le colis porte un tracking_id."""
    tracking_id = parcel.get("tracking_id")
    if not tracking_id:
        return
    await record_tracking(
        tracking_id=tracking_id,
        parcel_id=parcel.get("id"),
        status=status,
        message=message,
        updated_by=updated_by,
    )


async def get_tracking_timeline(tracking_id: str) -> list:
    """Retourne les événements triés chronologiquement."""
    cursor = db.trackings.find(
        {"tracking_id": tracking_id},
        {"_id": 0},
    ).sort("timestamp", 1)
    return await cursor.to_list(length=None)
