"""
Admin-only user management endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from auth.dependencies import require_roles
from auth.schemas import Role
from core.dependencies import get_store
from core.resources import USERS
from core.store import Store
from query.results import advanced_results

from . import schemas, service

router = APIRouter(
    prefix="/api/v1/users",
    dependencies=[Depends(require_roles(Role.ADMIN))],
)


@router.get("")
async def list_users(results: dict = Depends(advanced_results(USERS))) -> dict:
    return results


@router.get("/{user_id}")
async def get_user(user_id: int, store: Store = Depends(get_store)) -> dict:
    return {"success": True, "data": await service.get_user(store, user_id)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(payload: schemas.UserCreate, store: Store = Depends(get_store)) -> dict:
    return {"success": True, "data": await service.create_user(store, payload)}


@router.put("/{user_id}")
async def update_user(
    user_id: int,
    payload: schemas.UserUpdate,
    store: Store = Depends(get_store),
) -> dict:
    return {"success": True, "data": await service.update_user(store, user_id, payload)}


@router.delete("/{user_id}")
async def delete_user(user_id: int, store: Store = Depends(get_store)) -> dict:
    await service.delete_user(store, user_id)
    return {"success": True, "data": {}}
