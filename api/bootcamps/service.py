"""
Bootcamp business logic.

Deleting a bootcamp removes its courses and reviews first, then the bootcamp.
Course and review services call `refresh_average_cost` /
`refresh_average_rating` after each of their writes.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Any

from fastapi import HTTPException, status

from auth.permissions import ensure_owner, is_admin
from core.resources import BOOTCAMPS, COURSES, REVIEWS
from core.store import Condition, Store

from . import schemas

logger = logging.getLogger(__name__)

_slug_pattern = re.compile(r"[^a-z0-9]+")

NULLABLE_FIELDS = {"website", "phone", "email"}


def slugify(value: str) -> str:
    value = (value or "").lower().strip()
    value = _slug_pattern.sub("-", value)
    return value.strip("-") or "bootcamp"


def _round_half_up(value: float, digits: int = 0) -> float:
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


async def get_bootcamp(store: Store, bootcamp_id: int) -> dict[str, Any]:
    row = await store.collection(BOOTCAMPS).get(bootcamp_id)
    if row is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Bootcamp not found with id of {bootcamp_id}.",
        )
    return row


async def create_bootcamp(store: Store, current_user: dict, payload: schemas.BootcampCreate) -> dict[str, Any]:
    bootcamps = store.collection(BOOTCAMPS)
    user_id = int(current_user["id"])

    # Publishers get one bootcamp; admins are not limited.
    if not is_admin(current_user):
        existing = await bootcamps.find_one([Condition("user", "eq", user_id)])
        if existing is not None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"The user with id {user_id} has already published a bootcamp.",
            )

    doc = payload.model_dump()
    doc["user"] = user_id
    doc["slug"] = slugify(payload.name)
    row = await bootcamps.insert(doc)
    logger.info("bootcamp_created bootcamp_id=%s user_id=%s", row["id"], user_id)
    return row


async def update_bootcamp(
    store: Store,
    current_user: dict,
    bootcamp_id: int,
    payload: schemas.BootcampUpdate,
) -> dict[str, Any]:
    bootcamp = await get_bootcamp(store, bootcamp_id)
    ensure_owner(bootcamp, current_user, action=f"update bootcamp {bootcamp_id}")

    changes = {
        key: value
        for key, value in payload.model_dump(exclude_unset=True).items()
        if value is not None or key in NULLABLE_FIELDS
    }
    if "name" in changes:
        changes["slug"] = slugify(changes["name"])

    row = await store.collection(BOOTCAMPS).update(bootcamp_id, changes)
    if row is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Bootcamp not found with id of {bootcamp_id}.",
        )
    return row


async def delete_bootcamp(store: Store, current_user: dict, bootcamp_id: int) -> None:
    bootcamp = await get_bootcamp(store, bootcamp_id)
    ensure_owner(bootcamp, current_user, action=f"delete bootcamp {bootcamp_id}")

    dependents = [Condition("bootcamp", "eq", bootcamp_id)]
    courses_removed = await store.collection(COURSES).delete_many(dependents)
    reviews_removed = await store.collection(REVIEWS).delete_many(dependents)
    await store.collection(BOOTCAMPS).delete(bootcamp_id)
    logger.info(
        "bootcamp_deleted bootcamp_id=%s courses_removed=%s reviews_removed=%s",
        bootcamp_id,
        courses_removed,
        reviews_removed,
    )


async def refresh_average_cost(store: Store, bootcamp_id: int) -> float | None:
    rows = await (
        store.collection(COURSES)
        .find([Condition("bootcamp", "eq", bootcamp_id)])
        .select(["tuition"])
        .to_list()
    )
    tuitions = [float(row["tuition"]) for row in rows if row.get("tuition") is not None]
    average = _round_half_up(sum(tuitions) / len(tuitions)) if tuitions else None
    await store.collection(BOOTCAMPS).update(bootcamp_id, {"averageCost": average})
    return average


async def refresh_average_rating(store: Store, bootcamp_id: int) -> float | None:
    rows = await (
        store.collection(REVIEWS)
        .find([Condition("bootcamp", "eq", bootcamp_id)])
        .select(["rating"])
        .to_list()
    )
    ratings = [float(row["rating"]) for row in rows if row.get("rating") is not None]
    average = _round_half_up(sum(ratings) / len(ratings), 1) if ratings else None
    await store.collection(BOOTCAMPS).update(bootcamp_id, {"averageRating": average})
    return average
