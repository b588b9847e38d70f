"""
Pydantic schemas for admin user management.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from auth.schemas import Role


class UserCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    role: Role = Role.USER


class UserUpdate(BaseModel):
    # No password field: passwords change only through the auth flows.
    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, min_length=1, max_length=100)
    email: EmailStr | None = None
    role: Role | None = None
