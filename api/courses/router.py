"""
Course API endpoints.

    /api/v1/courses                          list (advanced results)
    /api/v1/bootcamps/{bootcamp_id}/courses  list for one bootcamp, add
    /api/v1/courses/{course_id}              get, update, delete
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from auth.dependencies import require_roles
from auth.schemas import Role
from core.dependencies import get_store
from core.resources import COURSES
from core.store import Store
from query.results import advanced_results

from . import schemas, service

router = APIRouter()

can_publish = require_roles(Role.PUBLISHER, Role.ADMIN)


@router.get("/api/v1/courses")
async def list_courses(results: dict = Depends(advanced_results(COURSES, "bootcamp"))) -> dict:
    return results


@router.get("/api/v1/bootcamps/{bootcamp_id}/courses")
async def list_bootcamp_courses(bootcamp_id: int, store: Store = Depends(get_store)) -> dict:
    return await service.list_for_bootcamp(store, bootcamp_id)


@router.get("/api/v1/courses/{course_id}")
async def get_course(course_id: int, store: Store = Depends(get_store)) -> dict:
    return {"success": True, "data": await service.get_course(store, course_id)}


@router.post("/api/v1/bootcamps/{bootcamp_id}/courses", status_code=status.HTTP_201_CREATED)
async def add_course(
    bootcamp_id: int,
    payload: schemas.CourseCreate,
    current_user: dict = Depends(can_publish),
    store: Store = Depends(get_store),
) -> dict:
    return {"success": True, "data": await service.add_course(store, current_user, bootcamp_id, payload)}


@router.put("/api/v1/courses/{course_id}")
async def update_course(
    course_id: int,
    payload: schemas.CourseUpdate,
    current_user: dict = Depends(can_publish),
    store: Store = Depends(get_store),
) -> dict:
    return {"success": True, "data": await service.update_course(store, current_user, course_id, payload)}


@router.delete("/api/v1/courses/{course_id}")
async def delete_course(
    course_id: int,
    current_user: dict = Depends(can_publish),
    store: Store = Depends(get_store),
) -> dict:
    await service.delete_course(store, current_user, course_id)
    return {"success": True, "data": {}}
