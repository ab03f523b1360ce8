from datetime import datetime
from typing import Optional, Literal
from pydantic import BaseModel
from models.common import RiderStatus, WorkStatus


class Rider(BaseModel):
    id:                str
    name:              str
    email:             str
    phone:             Optional[str] = None
    age:               Optional[int] = None
    region:            Optional[str] = None
    district:          Optional[str] = None
    nid:               Optional[str] = None   # numéro carte d'identité
    bike_brand:        Optional[str] = None
    bike_registration: Optional[str] = None
    note:              Optional[str] = None
    status:            RiderStatus = RiderStatus.PENDING
    work_status:       WorkStatus  = WorkStatus.IDLE
    created_at:        datetime
    updated_at:        Optional[datetime] = None


class RiderApply(BaseModel):
    name:              str
    email:             str
    phone:             Optional[str] = None
    age:               Optional[int] = None
    region:            Optional[str] = None
    district:          Optional[str] = None
    nid:               Optional[str] = None
    bike_brand:        Optional[str] = None
    bike_registration: Optional[str] = None
    note:              Optional[str] = None


class RiderApprove(BaseModel):
    # "approve" accepte aussi le refus direct d'une candidature
    status: Literal["active", "cancelled"]
    email:  str
