"""
Service livreurs : candidature → approbation / refus → désactivation.
L'approbation en `active` accorde le rôle `rider` à l'utilisateur lié.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from pymongo.errors import PyMongoError

from core.exceptions import not_found_exception, bad_request_exception
from core.utils import new_id, strip_mongo_id, update_outcome
from database import db
from models.common import RiderStatus, WorkStatus, UserRole, DeliveryStatus
from models.rider import RiderApply

logger = logging.getLogger(__name__)

# ── Machine d'états ───────────────────────────────────────────────────────────
ALLOWED_TRANSITIONS: dict[RiderStatus, list[RiderStatus]] = {
    RiderStatus.PENDING: [
        RiderStatus.ACTIVE,
        RiderStatus.CANCELLED,
    ],
    RiderStatus.ACTIVE: [
        RiderStatus.DEACTIVATED,
    ],
    # États terminaux
    RiderStatus.CANCELLED:   [],
    RiderStatus.DEACTIVATED: [],
}

PENDING_DELIVERY_STATUSES = [
    DeliveryStatus.RIDER_ASSIGNED.value,
    DeliveryStatus.IN_TRANSIT.value,
]
COMPLETED_DELIVERY_STATUSES = [
    DeliveryStatus.DELIVERED.value,
    DeliveryStatus.DELIVERED_TO_CENTER.value,
]


async def apply(data: RiderApply) -> dict:
    email = data.email.lower()
    existing = await db.riders.find_one({"email": email, "status": RiderStatus.PENDING.value})
    if existing:
        raise bad_request_exception("You already have a pending rider application")

    doc = data.model_dump()
    doc.update({
        "id":          new_id("rdr"),
        "email":       email,
        "status":      RiderStatus.PENDING.value,
        "work_status": WorkStatus.IDLE.value,
        "created_at":  datetime.now(timezone.utc),
    })
    await db.riders.insert_one(doc)
    logger.info(f"Candidature livreur reçue : {email}")
    return {"insertedId": doc["id"], "rider": strip_mongo_id(doc)}


async def list_pending() -> list:
    cursor = db.riders.find(
        {"status": RiderStatus.PENDING.value}, {"_id": 0},
    ).sort("created_at", -1)
    return await cursor.to_list(length=None)


async def list_active(district: Optional[str] = None) -> list:
    query: dict = {"status": RiderStatus.ACTIVE.value}
    if district:
        query["district"] = district
    cursor = db.riders.find(query, {"_id": 0}).sort("created_at", -1)
    return await cursor.to_list(length=None)


async def list_pending_deliveries(rider_email: str) -> list:
    cursor = db.parcels.find(
        {
            "assigned_rider_email": rider_email.lower(),
            "delivery_status": {"$in": PENDING_DELIVERY_STATUSES},
        },
        {"_id": 0},
    ).sort("created_date", -1)
    return await cursor.to_list(length=None)


async def list_completed_deliveries(rider_email: str) -> list:
    cursor = db.parcels.find(
        {
            "assigned_rider_email": rider_email.lower(),
            "delivery_status": {"$in": COMPLETED_DELIVERY_STATUSES},
        },
        {"_id": 0},
    ).sort("created_date", -1)
    return await cursor.to_list(length=None)


async def _transition(rider_id: str, new_status: RiderStatus) -> dict:
    rider = await db.riders.find_one({"id": rider_id}, {"_id": 0})
    if not rider:
        raise not_found_exception("Rider")

    current = RiderStatus(rider["status"])
    if new_status not in ALLOWED_TRANSITIONS.get(current, []):
        raise bad_request_exception(
            f"Transition not allowed: {current.value} → {new_status.value}"
        )

    result = await db.riders.update_one(
        {"id": rider_id, "status": current.value},
        {"$set": {"status": new_status.value, "updated_at": datetime.now(timezone.utc)}},
    )
    logger.info(f"Livreur {rider_id} : {current.value} → {new_status.value}")
    return update_outcome(result)


async def approve(rider_id: str, new_status: RiderStatus, email: str) -> dict:
    """
    Pose le nouveau statut puis, si `active`, passe l'utilisateur en `rider`.
    Les deux écritures ne sont pas atomiques : les deux résultats sont
    renvoyés, y compris l'erreur éventuelle sur l'attribution du rôle.
    """
    rider_update = await _transition(rider_id, new_status)

    role_update = None
    if new_status == RiderStatus.ACTIVE and rider_update["modifiedCount"]:
        try:
            result = await db.users.update_one(
                {"email": email.lower()},
                {"$set": {"role": UserRole.RIDER.value}},
            )
            role_update = update_outcome(result)
            if result.matched_count == 0:
                logger.warning(f"Approbation {rider_id} : aucun utilisateur {email} pour le rôle rider")
        except PyMongoError as e:
            logger.error(f"Approbation {rider_id} : échec attribution rôle rider à {email} : {e}")
            role_update = {"matchedCount": 0, "modifiedCount": 0, "error": str(e)}

    return {"riderUpdate": rider_update, "roleUpdate": role_update}


async def cancel(rider_id: str) -> dict:
    return await _transition(rider_id, RiderStatus.CANCELLED)


async def deactivate(rider_id: str) -> dict:
    return await _transition(rider_id, RiderStatus.DEACTIVATED)
