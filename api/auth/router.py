"""
Auth API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status

from core.dependencies import get_notifier, get_store
from core.notify import Notifier
from core.store import Store

from . import dependencies, schemas, service

router = APIRouter(prefix="/api/v1/auth")


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    payload: schemas.RegisterRequest,
    store: Store = Depends(get_store),
) -> schemas.TokenResponse:
    return await service.register(store, payload)


@router.post("/login")
async def login(
    payload: schemas.LoginRequest,
    store: Store = Depends(get_store),
) -> schemas.TokenResponse:
    return await service.login(store, payload)


@router.get("/logout")
async def logout() -> dict:
    # Tokens are stateless; the client discards its copy.
    return {"success": True, "data": {}}


@router.get("/me")
async def me(current_user: dict = Depends(dependencies.get_current_user)) -> schemas.UserEnvelope:
    return service.me(current_user)


@router.put("/updatedetails")
async def update_details(
    payload: schemas.UpdateDetailsRequest,
    current_user: dict = Depends(dependencies.get_current_user),
    store: Store = Depends(get_store),
) -> schemas.UserEnvelope:
    return await service.update_details(store, current_user, payload)


@router.put("/updatepassword")
async def update_password(
    payload: schemas.UpdatePasswordRequest,
    current_user: dict = Depends(dependencies.get_current_user),
    store: Store = Depends(get_store),
) -> schemas.TokenResponse:
    return await service.update_password(store, current_user, payload)


@router.post("/forgotpassword")
async def forgot_password(
    payload: schemas.ForgotPasswordRequest,
    request: Request,
    store: Store = Depends(get_store),
    notifier: Notifier = Depends(get_notifier),
) -> dict:
    link_base = service.reset_url_base() or f"{str(request.base_url).rstrip('/')}{router.prefix}/resetpassword"
    return await service.forgot_password(store, notifier, payload, link_base=link_base)


@router.put("/resetpassword/{resettoken}")
async def reset_password(
    resettoken: str,
    payload: schemas.ResetPasswordRequest,
    store: Store = Depends(get_store),
) -> schemas.TokenResponse:
    return await service.reset_password(store, resettoken, payload)
