"""
Router deliveries : historique des livraisons terminées du livreur.
"""
from typing import Optional

from fastapi import APIRouter, Depends

from core.dependencies import require_rider
from models.parcel import Parcel
from services.rider_service import list_completed_deliveries

router = APIRouter()


@router.get("/completed", response_model=list[Parcel], summary="Livraisons terminées (livreur)")
async def completed_deliveries(
    email: Optional[str] = None,
    current_user: dict = Depends(require_rider),
):
    return await list_completed_deliveries(email or current_user["email"])
