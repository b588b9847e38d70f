"""
Bootcamp API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from auth.dependencies import require_roles
from auth.schemas import Role
from core.dependencies import get_store
from core.resources import BOOTCAMPS
from core.store import Store
from query.results import advanced_results

from . import schemas, service

router = APIRouter(prefix="/api/v1/bootcamps")

can_publish = require_roles(Role.PUBLISHER, Role.ADMIN)


@router.get("")
async def list_bootcamps(results: dict = Depends(advanced_results(BOOTCAMPS, "courses"))) -> dict:
    return results


@router.get("/{bootcamp_id}")
async def get_bootcamp(bootcamp_id: int, store: Store = Depends(get_store)) -> dict:
    return {"success": True, "data": await service.get_bootcamp(store, bootcamp_id)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_bootcamp(
    payload: schemas.BootcampCreate,
    current_user: dict = Depends(can_publish),
    store: Store = Depends(get_store),
) -> dict:
    return {"success": True, "data": await service.create_bootcamp(store, current_user, payload)}


@router.put("/{bootcamp_id}")
async def update_bootcamp(
    bootcamp_id: int,
    payload: schemas.BootcampUpdate,
    current_user: dict = Depends(can_publish),
    store: Store = Depends(get_store),
) -> dict:
    row = await service.update_bootcamp(store, current_user, bootcamp_id, payload)
    return {"success": True, "data": row}


@router.delete("/{bootcamp_id}")
async def delete_bootcamp(
    bootcamp_id: int,
    current_user: dict = Depends(can_publish),
    store: Store = Depends(get_store),
) -> dict:
    await service.delete_bootcamp(store, current_user, bootcamp_id)
    return {"success": True, "data": {}}
