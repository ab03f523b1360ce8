"""
Router riders : candidatures livreur et workflow d'approbation.
Workflow : Utilisateur postule → Admin approuve (rôle rider) ou refuse → désactivation éventuelle
"""
from typing import Optional

from fastapi import APIRouter, Depends

from core.dependencies import get_current_user, require_admin
from models.common import RiderStatus
from models.rider import Rider, RiderApply, RiderApprove
from services import rider_service

router = APIRouter()


@router.post("", summary="Soumettre candidature livreur")
async def apply_rider(
    body: RiderApply,
    _user: dict = Depends(get_current_user),
):
    return await rider_service.apply(body)


# ── Endpoints admin ───────────────────────────────────────────────────────────

@router.get("/pending", response_model=list[Rider], summary="Candidatures en attente (admin)")
async def pending_riders(_admin=Depends(require_admin)):
    return await rider_service.list_pending()


@router.get("/active", response_model=list[Rider], summary="Livreurs actifs (admin)")
async def active_riders(
    district: Optional[str] = None,
    _admin=Depends(require_admin),
):
    return await rider_service.list_active(district)


@router.patch("/approve/{rider_id}", summary="Approuver / refuser candidature")
async def approve_rider(
    rider_id: str,
    body: RiderApprove,
    _admin=Depends(require_admin),
):
    return await rider_service.approve(rider_id, RiderStatus(body.status), body.email)


@router.patch("/cancel/{rider_id}", summary="Refuser candidature")
async def cancel_rider(rider_id: str, _admin=Depends(require_admin)):
    return await rider_service.cancel(rider_id)


@router.patch("/deactivate/{rider_id}", summary="Désactiver un livreur")
async def deactivate_rider(rider_id: str, _admin=Depends(require_admin)):
    return await rider_service.deactivate(rider_id)
