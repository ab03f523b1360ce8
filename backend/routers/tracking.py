"""
Router tracking : ajout d'événements (authentifié) et suivi public.
"""
from fastapi import APIRouter, Depends

from core.dependencies import get_current_user
from models.tracking import TrackingEvent, TrackingCreate
from services.tracking_service import record_tracking, get_tracking_timeline

router = APIRouter()


@router.post("", response_model=TrackingEvent, summary="Ajouter un événement de suivi")
async def add_tracking(
    body: TrackingCreate,
    current_user: dict = Depends(get_current_user),
):
    return await record_tracking(
        tracking_id=body.tracking_id,
        parcel_id=body.parcel_id,
        status=body.status,
        message=body.message,
        updated_by=body.updated_by or current_user["email"],
    )


@router.get("/{tracking_id}", response_model=list[TrackingEvent], summary="Historique public d'un colis")
async def track_parcel(tracking_id: str):
    return await get_tracking_timeline(tracking_id)
