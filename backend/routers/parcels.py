"""
Router parcels : CRUD colis + actions de transition de la machine d'états.
"""
from typing import Optional

from fastapi import APIRouter, Depends

from core.dependencies import get_current_user, get_role_store, require_admin, require_rider
from models.common import DeliveryStatus, UserRole
from models.parcel import Parcel, ParcelCreate, AssignRiderRequest, UpdateStatusRequest, CashoutRequest
from services import parcel_service, rider_service
from services.user_service import RoleStore

router = APIRouter()


@router.get("", response_model=list[Parcel], summary="Tous les colis")
async def list_parcels(
    email: Optional[str] = None,
    delivery_status: Optional[DeliveryStatus] = None,
    isPaid: Optional[bool] = None,
    _user: dict = Depends(get_current_user),
):
    return await parcel_service.list_parcels(email, delivery_status, isPaid)


@router.get("/user", response_model=list[Parcel], summary="Colis d'un utilisateur (filtrés)")
async def list_user_parcels(
    email: Optional[str] = None,
    delivery_status: Optional[DeliveryStatus] = None,
    isPaid: Optional[bool] = None,
    current_user: dict = Depends(get_current_user),
):
    return await parcel_service.list_parcels(
        email or current_user["email"], delivery_status, isPaid,
    )


@router.get("/rider/pending", response_model=list[Parcel], summary="Livraisons en cours du livreur")
async def rider_pending_deliveries(
    email: Optional[str] = None,
    current_user: dict = Depends(require_rider),
):
    return await rider_service.list_pending_deliveries(email or current_user["email"])


@router.get("/{parcel_id}", response_model=Parcel, summary="Détail d'un colis")
async def get_parcel(parcel_id: str, _user: dict = Depends(get_current_user)):
    return await parcel_service.get_parcel(parcel_id)


@router.post("", summary="Créer un colis")
async def create_parcel(
    body: ParcelCreate,
    current_user: dict = Depends(get_current_user),
    roles: RoleStore = Depends(get_role_store),
):
    # seul un admin peut créer pour le compte d'un autre expéditeur
    if body.created_by and await roles.get_role(current_user["email"]) != UserRole.ADMIN.value:
        body = body.model_copy(update={"created_by": None})
    parcel = await parcel_service.create_parcel(body, created_by=current_user["email"])
    return {"insertedId": parcel["id"], "parcel": parcel}


# ── Actions admin ─────────────────────────────────────────────────────────────
@router.patch("/assignRider", summary="Affecter un livreur (admin)")
async def assign_rider(
    body: AssignRiderRequest,
    current_user: dict = Depends(require_admin),
):
    return await parcel_service.assign_rider(
        body.parcelId, body.riderId, body.riderEmail, body.riderName,
        actor_email=current_user["email"],
    )


# ── Actions livreurs ──────────────────────────────────────────────────────────
@router.patch("/updateStatus", summary="Avancer le statut de livraison (livreur)")
async def update_status(
    body: UpdateStatusRequest,
    current_user: dict = Depends(require_rider),
):
    return await parcel_service.update_status(
        body.parcelId, body.status, actor_email=current_user["email"],
    )


@router.patch("/requestCashout", summary="Demander l'encaissement (livreur)")
async def request_cashout(
    body: CashoutRequest,
    _rider: dict = Depends(require_rider),
):
    return await parcel_service.request_cashout(body.parcelId)


@router.delete("/{parcel_id}", summary="Supprimer un colis")
async def delete_parcel(parcel_id: str, _user: dict = Depends(get_current_user)):
    return await parcel_service.delete_parcel(parcel_id)
