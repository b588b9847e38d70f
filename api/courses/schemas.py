"""
Pydantic schemas for course endpoints.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

SkillLevel = Literal["beginner", "intermediate", "advanced"]


class CourseCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    weeks: str = Field(..., min_length=1, max_length=20)
    tuition: float = Field(..., ge=0)
    minimumSkill: SkillLevel
    scholarshipAvailable: bool = False


class CourseUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, min_length=1)
    weeks: str | None = Field(default=None, min_length=1, max_length=20)
    tuition: float | None = Field(default=None, ge=0)
    minimumSkill: SkillLevel | None = None
    scholarshipAvailable: bool | None = None
