"""
Course business logic.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import HTTPException, status

from auth.permissions import ensure_owner
from bootcamps import service as bootcamp_service
from core.resources import COURSES
from core.store import INT64_MAX, Condition, Store

from . import schemas

logger = logging.getLogger(__name__)


def _not_found(course_id: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"No course found with id of {course_id}.",
    )


async def list_for_bootcamp(store: Store, bootcamp_id: int) -> dict[str, Any]:
    await bootcamp_service.get_bootcamp(store, bootcamp_id)
    rows = await (
        store.collection(COURSES)
        .find([Condition("bootcamp", "eq", bootcamp_id)])
        .to_list()
    )
    return {"success": True, "count": len(rows), "data": rows}


async def get_course(store: Store, course_id: int) -> dict[str, Any]:
    if not 0 < course_id <= INT64_MAX:
        raise _not_found(course_id)
    rows = await (
        store.collection(COURSES)
        .find([Condition("id", "eq", course_id)])
        .populate("bootcamp")
        .to_list()
    )
    if not rows:
        raise _not_found(course_id)
    return rows[0]


async def add_course(
    store: Store,
    current_user: dict,
    bootcamp_id: int,
    payload: schemas.CourseCreate,
) -> dict[str, Any]:
    bootcamp = await bootcamp_service.get_bootcamp(store, bootcamp_id)
    ensure_owner(bootcamp, current_user, action=f"add a course to bootcamp {bootcamp_id}")

    doc = payload.model_dump()
    doc["bootcamp"] = bootcamp_id
    doc["user"] = int(current_user["id"])
    row = await store.collection(COURSES).insert(doc)
    await bootcamp_service.refresh_average_cost(store, bootcamp_id)
    logger.info("course_created course_id=%s bootcamp_id=%s", row["id"], bootcamp_id)
    return row


async def update_course(
    store: Store,
    current_user: dict,
    course_id: int,
    payload: schemas.CourseUpdate,
) -> dict[str, Any]:
    courses = store.collection(COURSES)
    course = await courses.get(course_id)
    if course is None:
        raise _not_found(course_id)
    ensure_owner(course, current_user, action=f"update course {course_id}")

    changes = payload.model_dump(exclude_none=True)
    row = await courses.update(course_id, changes)
    if row is None:
        raise _not_found(course_id)
    if "tuition" in changes:
        await bootcamp_service.refresh_average_cost(store, int(course["bootcamp"]))
    return row


async def delete_course(store: Store, current_user: dict, course_id: int) -> None:
    courses = store.collection(COURSES)
    course = await courses.get(course_id)
    if course is None:
        raise _not_found(course_id)
    ensure_owner(course, current_user, action=f"delete course {course_id}")

    await courses.delete(course_id)
    await bootcamp_service.refresh_average_cost(store, int(course["bootcamp"]))
