"""
Admin user management.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import HTTPException, status

from auth import repository as auth_repository
from auth import service as auth_service
from bootcamps import service as bootcamp_service
from core.resources import BOOTCAMPS, COURSES, REVIEWS
from core.store import Condition, DuplicateKeyError, Store

from . import schemas

logger = logging.getLogger(__name__)


def _not_found(user_id: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"No user found with id of {user_id}.",
    )


def _email_taken() -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email is already registered.")


async def get_user(store: Store, user_id: int) -> dict[str, Any]:
    row = await auth_repository.get_user_by_id(store, user_id)
    if row is None:
        raise _not_found(user_id)
    return row


async def create_user(store: Store, payload: schemas.UserCreate) -> dict[str, Any]:
    password_hash = await auth_service.hash_password(payload.password)
    try:
        return await auth_repository.create_user(
            store,
            name=payload.name,
            email=payload.email,
            password_hash=password_hash,
            role=payload.role.value,
        )
    except DuplicateKeyError as exc:
        raise _email_taken() from exc


async def update_user(store: Store, user_id: int, payload: schemas.UserUpdate) -> dict[str, Any]:
    changes = payload.model_dump(exclude_none=True)
    if "role" in changes:
        changes["role"] = changes["role"].value
    try:
        row = await auth_repository.update_details(store, user_id, changes)
    except DuplicateKeyError as exc:
        raise _email_taken() from exc
    if row is None:
        raise _not_found(user_id)
    return row


async def delete_user(store: Store, user_id: int) -> None:
    """
    Remove a user and their reviews. Users who still own bootcamps or courses
    are refused until those are deleted or reassigned.
    """
    await get_user(store, user_id)

    owned = [Condition("user", "eq", user_id)]
    if await store.collection(BOOTCAMPS).count(owned) or await store.collection(COURSES).count(owned):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"User {user_id} still owns bootcamps or courses.",
        )

    reviews = store.collection(REVIEWS)
    reviewed = await reviews.find(owned).select(["bootcamp"]).to_list()
    await reviews.delete_many(owned)
    for bootcamp_id in sorted({int(row["bootcamp"]) for row in reviewed}):
        await bootcamp_service.refresh_average_rating(store, bootcamp_id)

    await auth_repository.delete_user(store, user_id)
    logger.info("user_deleted user_id=%s reviews_removed=%s", user_id, len(reviewed))
