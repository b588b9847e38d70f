"""
Auth dependencies for protected FastAPI routes.

    current_user: dict = Depends(get_current_user)                       # any signed-in user
    current_user: dict = Depends(require_roles(Role.PUBLISHER, Role.ADMIN))
"""

from __future__ import annotations

from typing import Any, Callable

from fastapi import Depends, Header, HTTPException, status

from core.dependencies import get_store
from core.store import Store

from . import service
from .schemas import Role


def _extract_bearer_token(authorization: str | None) -> str:
    # Missing, malformed and wrong-scheme headers all get the same answer.
    parts = (authorization or "").strip().split(" ", 1)
    if len(parts) != 2:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=service.NOT_AUTHORIZED)

    scheme, token = parts[0].strip().lower(), parts[1].strip()
    if scheme != "bearer" or not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=service.NOT_AUTHORIZED)
    return token


async def get_bearer_token(authorization: str | None = Header(default=None)) -> str:
    return _extract_bearer_token(authorization)


async def get_current_user(
    access_token: str = Depends(get_bearer_token),
    store: Store = Depends(get_store),
) -> dict:
    return await service.get_user_from_access_token(store, access_token)


def require_roles(*roles: Role | str) -> Callable[..., Any]:
    allowed = frozenset(Role(role).value for role in roles)

    async def dependency(current_user: dict = Depends(get_current_user)) -> dict:
        role = str(current_user.get("role") or "")
        if role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Role {role} is not authorized to access this route.",
            )
        return current_user

    return dependency
