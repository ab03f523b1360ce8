from datetime import datetime
from typing import Optional
from pydantic import BaseModel
from models.common import DeliveryStatus, CashoutStatus


class Parcel(BaseModel):
    id:               str
    tracking_id:      str            # "PCL-XXXX-XXXX"
    created_by:       str            # email de l'expéditeur
    created_date:     datetime
    # Colis physique
    type:             Optional[str]   = None   # "document" | "non-document"
    title:            Optional[str]   = None
    weight:           Optional[float] = None   # kg
    cost:             Optional[float] = None
    # Expéditeur
    sender_name:          Optional[str] = None
    sender_contact:       Optional[str] = None
    sender_region:        Optional[str] = None
    sender_center:        Optional[str] = None
    sender_address:       Optional[str] = None
    pickup_instruction:   Optional[str] = None
    # Destinataire
    receiver_name:        Optional[str] = None
    receiver_contact:     Optional[str] = None
    receiver_region:      Optional[str] = None
    receiver_center:      Optional[str] = None
    receiver_address:     Optional[str] = None
    delivery_instruction: Optional[str] = None
    # Paiement
    isPaid:           bool          = False
    paymentMethod:    Optional[str] = None
    # Machine d'états
    delivery_status:  DeliveryStatus = DeliveryStatus.PENDING
    # Livreur assigné
    assigned_rider_id:    Optional[str]      = None
    assigned_rider_email: Optional[str]      = None
    assigned_rider_name:  Optional[str]      = None
    assigned_at:          Optional[datetime] = None
    picked_at:            Optional[datetime] = None
    delivered_at:         Optional[datetime] = None
    # Encaissement livreur
    cashout_status:       CashoutStatus      = CashoutStatus.NONE
    cashout_requested_at: Optional[datetime] = None


class ParcelCreate(BaseModel):
    type:                 Optional[str]   = None
    title:                Optional[str]   = None
    weight:               Optional[float] = None
    cost:                 Optional[float] = None
    sender_name:          Optional[str] = None
    sender_contact:       Optional[str] = None
    sender_region:        Optional[str] = None
    sender_center:        Optional[str] = None
    sender_address:       Optional[str] = None
    pickup_instruction:   Optional[str] = None
    receiver_name:        Optional[str] = None
    receiver_contact:     Optional[str] = None
    receiver_region:      Optional[str] = None
    receiver_center:      Optional[str] = None
    receiver_address:     Optional[str] = None
    delivery_instruction: Optional[str] = None
    created_by:           Optional[str]      = None   # défaut : email du jeton
    created_date:         Optional[datetime] = None   # défaut : heure serveur
    tracking_id:          Optional[str]      = None   # défaut : généré


class AssignRiderRequest(BaseModel):
    parcelId:   str
    riderId:    str
    riderEmail: str
    riderName:  str


class UpdateStatusRequest(BaseModel):
    parcelId: str
    status:   DeliveryStatus


class CashoutRequest(BaseModel):
    parcelId: str
