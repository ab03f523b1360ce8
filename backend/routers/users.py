"""
Router users : enregistrement, recherche et gestion des rôles.
"""
from fastapi import APIRouter, Depends, Query

from core.dependencies import get_current_user, require_admin
from models.common import UserRole
from models.user import User, UserCreate
from services import user_service

router = APIRouter()


@router.get("/search", response_model=list[User], summary="Recherche par email (admin)")
async def search_users(
    email: str = Query(..., min_length=1),
    _admin=Depends(require_admin),
):
    return await user_service.search_users(email)


@router.get("/role", summary="Rôle d'un utilisateur")
async def get_role(
    email: str = Query(..., min_length=1),
    _user: dict = Depends(get_current_user),
):
    return await user_service.get_user_role(email)


@router.post("", summary="Enregistrer un utilisateur (idempotent)")
async def register_user(body: UserCreate):
    return await user_service.register_user(body.email)


@router.patch("/make-admin/{user_id}", summary="Promouvoir admin")
async def make_admin(user_id: str, _admin=Depends(require_admin)):
    return await user_service.set_user_role(user_id, UserRole.ADMIN)


@router.patch("/remove-admin/{user_id}", summary="Retirer le rôle admin")
async def remove_admin(user_id: str, _admin=Depends(require_admin)):
    return await user_service.set_user_role(user_id, UserRole.USER)
