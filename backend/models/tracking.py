from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class TrackingEvent(BaseModel):
    tracking_id: str
    parcel_id:   Optional[str] = None
    status:      str            # "parcel_created", "paid", "rider_assigned", "in_transit", ...
    message:     Optional[str] = None
    timestamp:   datetime
    updated_by:  Optional[str] = None


class TrackingCreate(BaseModel):
    tracking_id: str
    parcel_id:   Optional[str] = None
    status:      str
    message:     Optional[str] = None
    updated_by:  Optional[str] = None   # défaut : email du jeton
