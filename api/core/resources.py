"""
Declared schemas of every collection the API serves.

List queries, projections, sorts and populate rules are all validated
against these declarations.
"""

from __future__ import annotations

from datetime import datetime

from .store import FieldSpec, Relation, ResourceSchema

USERS = "users"
BOOTCAMPS = "bootcamps"
COURSES = "courses"
REVIEWS = "reviews"

_BOOTCAMP_SUMMARY = ("name", "description")

USER_SCHEMA = ResourceSchema(
    name=USERS,
    fields=(
        FieldSpec("id", int),
        FieldSpec("name"),
        FieldSpec("email", unique=True),
        FieldSpec("role"),
        FieldSpec("passwordHash", hidden=True),
        FieldSpec("resetPasswordToken", hidden=True),
        FieldSpec("resetPasswordExpire", datetime, hidden=True),
        FieldSpec("createdAt", datetime),
    ),
)

BOOTCAMP_SCHEMA = ResourceSchema(
    name=BOOTCAMPS,
    fields=(
        FieldSpec("id", int),
        FieldSpec("user", int, column="user_id"),
        FieldSpec("name", unique=True),
        FieldSpec("slug"),
        FieldSpec("description"),
        FieldSpec("website"),
        FieldSpec("phone"),
        FieldSpec("email"),
        FieldSpec("address"),
        FieldSpec("averageRating", float),
        FieldSpec("averageCost", float),
        FieldSpec("photo"),
        FieldSpec("housing", bool),
        FieldSpec("jobAssistance", bool),
        FieldSpec("jobGuarantee", bool),
        FieldSpec("acceptGi", bool),
        FieldSpec("createdAt", datetime),
    ),
    relations=(
        Relation("courses", COURSES, local_field="id", foreign_field="bootcamp", many=True),
        Relation("reviews", REVIEWS, local_field="id", foreign_field="bootcamp", many=True),
    ),
)

COURSE_SCHEMA = ResourceSchema(
    name=COURSES,
    fields=(
        FieldSpec("id", int),
        FieldSpec("bootcamp", int, column="bootcamp_id"),
        FieldSpec("user", int, column="user_id"),
        FieldSpec("title"),
        FieldSpec("description"),
        FieldSpec("weeks"),
        FieldSpec("tuition", float),
        FieldSpec("minimumSkill"),
        FieldSpec("scholarshipAvailable", bool),
        FieldSpec("createdAt", datetime),
    ),
    relations=(Relation("bootcamp", BOOTCAMPS, local_field="bootcamp", select=_BOOTCAMP_SUMMARY),),
)

REVIEW_SCHEMA = ResourceSchema(
    name=REVIEWS,
    fields=(
        FieldSpec("id", int),
        FieldSpec("bootcamp", int, column="bootcamp_id"),
        FieldSpec("user", int, column="user_id"),
        FieldSpec("title"),
        FieldSpec("text"),
        FieldSpec("rating", int),
        FieldSpec("createdAt", datetime),
    ),
    relations=(Relation("bootcamp", BOOTCAMPS, local_field="bootcamp", select=_BOOTCAMP_SUMMARY),),
    unique_together=(("bootcamp", "user"),),
)

ALL_SCHEMAS = (USER_SCHEMA, BOOTCAMP_SCHEMA, COURSE_SCHEMA, REVIEW_SCHEMA)
