"""
Ownership checks shared by the resource services.
"""

from __future__ import annotations

from fastapi import HTTPException, status

from .schemas import Role


def is_admin(user: dict) -> bool:
    return str(user.get("role") or "") == Role.ADMIN.value


def ensure_owner(record: dict, current_user: dict, *, action: str) -> None:
    """
    Allow the record's owner (`record["user"]`) or any admin; 403 otherwise.
    """
    if is_admin(current_user):
        return None
    if record.get("user") is not None and int(record["user"]) == int(current_user["id"]):
        return None
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail=f"User {current_user['id']} is not authorized to {action}.",
    )
