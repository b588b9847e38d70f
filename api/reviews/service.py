"""
Review business logic.
"""

from __future__ import annotations

from typing import Any

from fastapi import HTTPException, status

from auth.permissions import ensure_owner
from bootcamps import service as bootcamp_service
from core.resources import REVIEWS
from core.store import INT64_MAX, Condition, DuplicateKeyError, Store

from . import schemas


def _not_found(review_id: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"No review found with id of {review_id}.",
    )


async def list_for_bootcamp(store: Store, bootcamp_id: int) -> dict[str, Any]:
    await bootcamp_service.get_bootcamp(store, bootcamp_id)
    rows = await (
        store.collection(REVIEWS)
        .find([Condition("bootcamp", "eq", bootcamp_id)])
        .to_list()
    )
    return {"success": True, "count": len(rows), "data": rows}


async def get_review(store: Store, review_id: int) -> dict[str, Any]:
    if not 0 < review_id <= INT64_MAX:
        raise _not_found(review_id)
    rows = await (
        store.collection(REVIEWS)
        .find([Condition("id", "eq", review_id)])
        .populate("bootcamp")
        .to_list()
    )
    if not rows:
        raise _not_found(review_id)
    return rows[0]


async def add_review(
    store: Store,
    current_user: dict,
    bootcamp_id: int,
    payload: schemas.ReviewCreate,
) -> dict[str, Any]:
    await bootcamp_service.get_bootcamp(store, bootcamp_id)

    doc = payload.model_dump()
    doc["bootcamp"] = bootcamp_id
    doc["user"] = int(current_user["id"])
    try:
        row = await store.collection(REVIEWS).insert(doc)
    except DuplicateKeyError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="You have already reviewed this bootcamp.",
        ) from exc

    await bootcamp_service.refresh_average_rating(store, bootcamp_id)
    return row


async def update_review(
    store: Store,
    current_user: dict,
    review_id: int,
    payload: schemas.ReviewUpdate,
) -> dict[str, Any]:
    reviews = store.collection(REVIEWS)
    review = await reviews.get(review_id)
    if review is None:
        raise _not_found(review_id)
    ensure_owner(review, current_user, action=f"update review {review_id}")

    changes = payload.model_dump(exclude_none=True)
    row = await reviews.update(review_id, changes)
    if row is None:
        raise _not_found(review_id)
    if "rating" in changes:
        await bootcamp_service.refresh_average_rating(store, int(review["bootcamp"]))
    return row


async def delete_review(store: Store, current_user: dict, review_id: int) -> None:
    reviews = store.collection(REVIEWS)
    review = await reviews.get(review_id)
    if review is None:
        raise _not_found(review_id)
    ensure_owner(review, current_user, action=f"delete review {review_id}")

    await reviews.delete(review_id)
    await bootcamp_service.refresh_average_rating(store, int(review["bootcamp"]))
