"""
Review API endpoints.

    /api/v1/reviews                          list (advanced results)
    /api/v1/bootcamps/{bootcamp_id}/reviews  list for one bootcamp, add
    /api/v1/reviews/{review_id}              get, update, delete
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from auth.dependencies import require_roles
from auth.schemas import Role
from core.dependencies import get_store
from core.resources import REVIEWS
from core.store import Store
from query.results import advanced_results

from . import schemas, service

router = APIRouter()

can_review = require_roles(Role.USER, Role.ADMIN)


@router.get("/api/v1/reviews")
async def list_reviews(results: dict = Depends(advanced_results(REVIEWS, "bootcamp"))) -> dict:
    return results


@router.get("/api/v1/bootcamps/{bootcamp_id}/reviews")
async def list_bootcamp_reviews(bootcamp_id: int, store: Store = Depends(get_store)) -> dict:
    return await service.list_for_bootcamp(store, bootcamp_id)


@router.get("/api/v1/reviews/{review_id}")
async def get_review(review_id: int, store: Store = Depends(get_store)) -> dict:
    return {"success": True, "data": await service.get_review(store, review_id)}


@router.post("/api/v1/bootcamps/{bootcamp_id}/reviews", status_code=status.HTTP_201_CREATED)
async def add_review(
    bootcamp_id: int,
    payload: schemas.ReviewCreate,
    current_user: dict = Depends(can_review),
    store: Store = Depends(get_store),
) -> dict:
    return {"success": True, "data": await service.add_review(store, current_user, bootcamp_id, payload)}


@router.put("/api/v1/reviews/{review_id}")
async def update_review(
    review_id: int,
    payload: schemas.ReviewUpdate,
    current_user: dict = Depends(can_review),
    store: Store = Depends(get_store),
) -> dict:
    return {"success": True, "data": await service.update_review(store, current_user, review_id, payload)}


@router.delete("/api/v1/reviews/{review_id}")
async def delete_review(
    review_id: int,
    current_user: dict = Depends(can_review),
    store: Store = Depends(get_store),
) -> dict:
    await service.delete_review(store, current_user, review_id)
    return {"success": True, "data": {}}
