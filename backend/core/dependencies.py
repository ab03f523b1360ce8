from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from core.exceptions import credentials_exception, invalid_credential_exception, forbidden_exception
from core.security import IdentityVerifier, get_identity_verifier
from database import db
from models.common import UserRole
from services.user_service import RoleStore

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
) -> dict:
    # En-tête absent ou schéma autre que Bearer → 401
    if not credentials or not credentials.credentials:
        raise credentials_exception()
    identity = verifier.verify(credentials.credentials)
    # Jeton rejeté par le fournisseur → 403
    if not identity:
        raise invalid_credential_exception()
    return identity


def get_role_store() -> RoleStore:
    return RoleStore(db.users)


class RoleGuard:
    """
    Dépendance qui vérifie, après authentification, que le rôle stocké de
    l'utilisateur est exactement `role`.
    Usage : Depends(RoleGuard(UserRole.ADMIN))
    """

    def __init__(self, role: UserRole):
        self.role = role

    async def __call__(
        self,
        current_user: dict = Depends(get_current_user),
        roles: RoleStore = Depends(get_role_store),
    ) -> dict:
        role = await roles.get_role(current_user["email"])
        if role != self.role.value:
            raise forbidden_exception()
        return {**current_user, "role": role}


# Raccourcis pratiques
require_admin = RoleGuard(UserRole.ADMIN)
require_rider = RoleGuard(UserRole.RIDER)
