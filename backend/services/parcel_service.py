"""
Service colis : machine d'états, affectation livreur, paiement, encaissement.

Les opérations qui touchent deux documents (paiement, affectation livreur)
ne sont pas transactionnelles : chaque écriture est tentée dans l'ordre et
son résultat est renvoyé à l'appelant, sans compensation en cas d'échec
partiel.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from core.exceptions import not_found_exception, bad_request_exception
from core.security import generate_tracking_id
from core.utils import new_id, strip_mongo_id, update_outcome, no_match
from database import db
from models.common import DeliveryStatus, CashoutStatus, WorkStatus
from models.parcel import ParcelCreate
from services.tracking_service import record_parcel_event

logger = logging.getLogger(__name__)

# ── Machine d'états ───────────────────────────────────────────────────────────
# Uniquement des transitions vers l'avant ; aucune API ne revient en arrière.
ALLOWED_TRANSITIONS: dict[DeliveryStatus, list[DeliveryStatus]] = {
    DeliveryStatus.PENDING: [
        DeliveryStatus.RIDER_ASSIGNED,      # seulement via assign_rider
    ],
    DeliveryStatus.RIDER_ASSIGNED: [
        DeliveryStatus.IN_TRANSIT,
    ],
    DeliveryStatus.IN_TRANSIT: [
        DeliveryStatus.DELIVERED,
        DeliveryStatus.DELIVERED_TO_CENTER,
    ],
    DeliveryStatus.DELIVERED: [
        DeliveryStatus.DELIVERED_TO_CENTER,
    ],
    # État terminal
    DeliveryStatus.DELIVERED_TO_CENTER: [],
}

# Statuts qu'un livreur peut fixer via update_status
RIDER_SETTABLE = {
    DeliveryStatus.IN_TRANSIT,
    DeliveryStatus.DELIVERED,
    DeliveryStatus.DELIVERED_TO_CENTER,
}

# Horodatage posé une seule fois, à la première entrée dans le statut
FIRST_ENTRY_STAMPS = {
    DeliveryStatus.IN_TRANSIT: "picked_at",
    DeliveryStatus.DELIVERED:  "delivered_at",
}

COMPLETED_STATUSES = {DeliveryStatus.DELIVERED, DeliveryStatus.DELIVERED_TO_CENTER}


def can_transition(current: DeliveryStatus, target: DeliveryStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, [])


async def create_parcel(data: ParcelCreate, created_by: str) -> dict:
    """Crée un colis en attente, non payé, avec son tracking_id."""
    now = datetime.now(timezone.utc)
    parcel_doc = data.model_dump(exclude={"created_by", "created_date", "tracking_id"})
    parcel_doc.update({
        "id":                   new_id("prc"),
        "tracking_id":          data.tracking_id or generate_tracking_id(),
        "created_by":           (data.created_by or created_by).lower(),
        "created_date":         data.created_date or now,
        "delivery_status":      DeliveryStatus.PENDING.value,
        "isPaid":               False,
        "paymentMethod":        None,
        "assigned_rider_id":    None,
        "assigned_rider_email": None,
        "assigned_rider_name":  None,
        "assigned_at":          None,
        "picked_at":            None,
        "delivered_at":         None,
        "cashout_status":       CashoutStatus.NONE.value,
        "cashout_requested_at": None,
    })
    await db.parcels.insert_one(parcel_doc)
    await record_parcel_event(
        parcel_doc, "parcel_created", "Parcel created, waiting for payment", created_by,
    )
    logger.info(f"Colis créé : {parcel_doc['id']} ({parcel_doc['tracking_id']})")
    return strip_mongo_id(parcel_doc)


async def list_parcels(
    email: Optional[str] = None,
    delivery_status: Optional[DeliveryStatus] = None,
    is_paid: Optional[bool] = None,
) -> list:
    query: dict = {}
    if email:
        query["created_by"] = email.lower()
    if delivery_status:
        query["delivery_status"] = delivery_status.value
    if is_paid is not None:
        query["isPaid"] = is_paid
    cursor = db.parcels.find(query, {"_id": 0}).sort("created_date", -1)
    return await cursor.to_list(length=None)


async def get_parcel(parcel_id: str) -> dict:
    parcel = await db.parcels.find_one({"id": parcel_id}, {"_id": 0})
    if not parcel:
        raise not_found_exception("Parcel")
    return parcel


async def record_payment(
    parcel_id: str,
    email: str,
    amount: float,
    payment_method: str,
    transaction_id: str,
) -> dict:
    """
    Marque le colis payé puis ajoute l'entrée au registre des paiements.
    Un colis inconnu est refusé avant toute écriture.
    """
    parcel = await db.parcels.find_one({"id": parcel_id}, {"_id": 0})
    if not parcel:
        raise not_found_exception("Parcel")

    parcel_result = await db.parcels.update_one(
        {"id": parcel_id},
        {"$set": {"isPaid": True, "paymentMethod": payment_method}},
    )

    payment_doc = {
        "id":            new_id("pay"),
        "parcelId":      parcel_id,
        "email":         email.lower(),
        "amount":        amount,
        "paymentMethod": payment_method,
        "transactionId": transaction_id,
        "paid_at":       datetime.now(timezone.utc),
    }
    await db.payments.insert_one(payment_doc)
    await record_parcel_event(
        parcel, "paid", f"Payment received ({payment_method})", email,
    )
    logger.info(f"Paiement enregistré : colis {parcel_id}, transaction {transaction_id}")
    return {
        "parcelUpdate": update_outcome(parcel_result),
        "insertedId":   payment_doc["id"],
        "payment":      strip_mongo_id(payment_doc),
    }


async def assign_rider(
    parcel_id: str,
    rider_id: str,
    rider_email: str,
    rider_name: str,
    actor_email: Optional[str] = None,
) -> dict:
    """
    pending → rider_assigned, puis le livreur passe en livraison.
    Un colis inconnu rapporte zéro modification.
    """
    parcel = await db.parcels.find_one({"id": parcel_id}, {"_id": 0})
    if not parcel:
        logger.warning(f"Affectation ignorée : colis {parcel_id} introuvable")
        return {**no_match(), "riderUpdate": None}

    current = DeliveryStatus(parcel["delivery_status"])
    if not can_transition(current, DeliveryStatus.RIDER_ASSIGNED):
        raise bad_request_exception(
            f"Transition not allowed: {current.value} → {DeliveryStatus.RIDER_ASSIGNED.value}"
        )

    now = datetime.now(timezone.utc)
    parcel_result = await db.parcels.update_one(
        # le filtre sur le statut courant évite d'écraser une transition concurrente
        {"id": parcel_id, "delivery_status": current.value},
        {"$set": {
            "delivery_status":      DeliveryStatus.RIDER_ASSIGNED.value,
            "assigned_rider_id":    rider_id,
            "assigned_rider_email": rider_email.lower(),
            "assigned_rider_name":  rider_name,
            "assigned_at":          now,
        }},
    )
    rider_result = await db.riders.update_one(
        {"id": rider_id},
        {"$set": {"work_status": WorkStatus.IN_DELIVERY.value}},
    )
    await record_parcel_event(
        parcel, DeliveryStatus.RIDER_ASSIGNED.value, f"Assigned to rider {rider_name}", actor_email,
    )
    logger.info(f"Colis {parcel_id} affecté au livreur {rider_id}")
    return {**update_outcome(parcel_result), "riderUpdate": update_outcome(rider_result)}


async def update_status(
    parcel_id: str,
    new_status: DeliveryStatus,
    actor_email: Optional[str] = None,
) -> dict:
    """
    Transition livreur. Répéter le statut courant est accepté et ne
    réécrit jamais picked_at / delivered_at.
    """
    if new_status not in RIDER_SETTABLE:
        raise bad_request_exception(f"Status '{new_status.value}' cannot be set by a rider")

    parcel = await db.parcels.find_one({"id": parcel_id}, {"_id": 0})
    if not parcel:
        logger.warning(f"Mise à jour ignorée : colis {parcel_id} introuvable")
        return no_match()

    current = DeliveryStatus(parcel["delivery_status"])
    if current != new_status and not can_transition(current, new_status):
        raise bad_request_exception(
            f"Transition not allowed: {current.value} → {new_status.value}"
        )

    now = datetime.now(timezone.utc)
    result = await db.parcels.update_one(
        {"id": parcel_id, "delivery_status": current.value},
        {"$set": {"delivery_status": new_status.value}},
    )
    if result.matched_count == 0:
        logger.warning(f"Colis {parcel_id} : statut modifié entre-temps, transition {new_status.value} ignorée")
        return update_outcome(result)

    stamp_field = FIRST_ENTRY_STAMPS.get(new_status)
    if stamp_field:
        # ne matche que si le champ est absent ou null
        await db.parcels.update_one(
            {"id": parcel_id, stamp_field: None},
            {"$set": {stamp_field: now}},
        )

    if current != new_status:
        if new_status in COMPLETED_STATUSES and parcel.get("assigned_rider_id"):
            await db.riders.update_one(
                {"id": parcel["assigned_rider_id"]},
                {"$set": {"work_status": WorkStatus.IDLE.value}},
            )
        await record_parcel_event(
            parcel, new_status.value, f"Status changed to {new_status.value}", actor_email,
        )
        logger.info(f"Colis {parcel_id} : {current.value} → {new_status.value}")

    return update_outcome(result)


async def request_cashout(parcel_id: str) -> dict:
    # Aucun contrôle sur le statut du colis (à clarifier côté produit)
    result = await db.parcels.update_one(
        {"id": parcel_id},
        {"$set": {
            "cashout_status":       CashoutStatus.CASHED_OUT.value,
            "cashout_requested_at": datetime.now(timezone.utc),
        }},
    )
    return update_outcome(result)


async def delete_parcel(parcel_id: str) -> dict:
    result = await db.parcels.delete_one({"id": parcel_id})
    if result.deleted_count:
        logger.info(f"Colis supprimé : {parcel_id}")
    return {"deletedCount": result.deleted_count}
