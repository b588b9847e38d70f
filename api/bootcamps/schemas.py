"""
Pydantic schemas for bootcamp endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, EmailStr, Field

URL_PATTERN = r"^https?://(www\.)?[-a-zA-Z0-9@:%._+~#=]{1,256}\.[a-zA-Z0-9()]{1,6}\b([-a-zA-Z0-9()@:%_+.~#?&/=]*)$"


class BootcampCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1, max_length=50)
    description: str = Field(..., min_length=1, max_length=500)
    website: str | None = Field(default=None, pattern=URL_PATTERN)
    phone: str | None = Field(default=None, max_length=20)
    email: EmailStr | None = None
    address: str = Field(..., min_length=1, max_length=300)
    photo: str = Field(default="no-photo.jpg", max_length=200)
    housing: bool = False
    jobAssistance: bool = False
    jobGuarantee: bool = False
    acceptGi: bool = False


class BootcampUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, min_length=1, max_length=50)
    description: str | None = Field(default=None, min_length=1, max_length=500)
    website: str | None = Field(default=None, pattern=URL_PATTERN)
    phone: str | None = Field(default=None, max_length=20)
    email: EmailStr | None = None
    address: str | None = Field(default=None, min_length=1, max_length=300)
    photo: str | None = Field(default=None, max_length=200)
    housing: bool | None = None
    jobAssistance: bool | None = None
    jobGuarantee: bool | None = None
    acceptGi: bool | None = None
