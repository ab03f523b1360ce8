"""
Service utilisateurs : enregistrement idempotent, recherche, rôles.
"""
import logging
import re
from datetime import datetime, timezone
from typing import Optional

from pymongo.errors import DuplicateKeyError

from core.exceptions import not_found_exception
from core.utils import new_id, strip_mongo_id, update_outcome
from database import db
from models.common import UserRole

logger = logging.getLogger(__name__)


class RoleStore:
    """Accès en lecture au rôle d'un utilisateur, par email."""

    def __init__(self, users_collection):
        self.users = users_collection

    async def get_role(self, email: str) -> Optional[str]:
        user = await self.users.find_one({"email": email.lower()}, {"_id": 0, "role": 1})
        if not user:
            return None
        return user.get("role")


async def register_user(email: str) -> dict:
    """
    Crée l'utilisateur au premier appel. Un email déjà connu ne crée rien :
    on rafraîchit seulement last_log_in et on répond inserted=False.
    """
    now = datetime.now(timezone.utc)
    existing = await db.users.find_one({"email": email}, {"_id": 0})
    if existing:
        await db.users.update_one({"email": email}, {"$set": {"last_log_in": now}})
        return {"message": "User already exist", "inserted": False}

    doc = {
        "id":          new_id("usr"),
        "email":       email,
        "role":        UserRole.USER.value,
        "created_at":  now,
        "last_log_in": now,
    }
    try:
        await db.users.insert_one(doc)
    except DuplicateKeyError:
        # Deux enregistrements simultanés : l'index unique sur email tranche
        return {"message": "User already exist", "inserted": False}

    logger.info(f"Utilisateur enregistré : {email}")
    return {"inserted": True, "insertedId": doc["id"], "user": strip_mongo_id(doc)}


async def search_users(email_fragment: str, limit: int = 10) -> list:
    query = {"email": {"$regex": re.escape(email_fragment), "$options": "i"}}
    cursor = db.users.find(query, {"_id": 0}).sort("created_at", -1).limit(limit)
    return await cursor.to_list(length=limit)


async def get_user_role(email: str) -> dict:
    role = await RoleStore(db.users).get_role(email)
    if role is None:
        raise not_found_exception("User")
    return {"email": email.lower(), "role": role}


async def set_user_role(user_id: str, role: UserRole) -> dict:
    result = await db.users.update_one({"id": user_id}, {"$set": {"role": role.value}})
    if result.matched_count == 0:
        raise not_found_exception("User")
    logger.info(f"Rôle mis à jour : {user_id} → {role.value}")
    return update_outcome(result)
