"""
Auth business logic.

Password hashing happens only here, in the flows that actually set a
password (register, update_password, reset_password and the admin user
create in `users/service.py`), never as a side effect of a generic update.
"""

from __future__ import annotations

import logging
import os
from typing import Any

from fastapi import HTTPException, status
from fastapi.concurrency import run_in_threadpool

from core.notify import Notifier, NotifyError
from core.store import DuplicateKeyError, Store

from . import repository, schemas, security

logger = logging.getLogger(__name__)

NOT_AUTHORIZED = "Not authorized to access this route."


def reset_url_base() -> str:
    return os.environ.get("RESET_URL_BASE", "").strip()


def _unauthorized() -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=NOT_AUTHORIZED)


def _to_user_response(user_row: dict) -> schemas.UserResponse:
    return schemas.UserResponse(
        id=int(user_row["id"]),
        name=str(user_row["name"]),
        email=str(user_row["email"]),
        role=schemas.Role(user_row["role"]),
        createdAt=user_row.get("createdAt"),
    )


def _token_response(user_row: dict) -> schemas.TokenResponse:
    return schemas.TokenResponse(token=security.build_access_token(user_id=int(user_row["id"])))


async def hash_password(plain_password: str) -> str:
    # bcrypt is CPU bound; keep it off the event loop.
    return await run_in_threadpool(security.hash_password, plain_password)


async def verify_password(plain_password: str, password_hash: str) -> bool:
    return await run_in_threadpool(security.verify_password, plain_password, password_hash)


async def register(store: Store, payload: schemas.RegisterRequest) -> schemas.TokenResponse:
    if payload.role is schemas.Role.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Role admin cannot be self-assigned.",
        )

    existing = await repository.get_user_by_email(store, payload.email)
    if existing is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email is already registered.",
        )

    password_hash = await hash_password(payload.password)
    try:
        user_row = await repository.create_user(
            store,
            name=payload.name,
            email=payload.email,
            password_hash=password_hash,
            role=payload.role.value,
        )
    except DuplicateKeyError as exc:
        # Lost a race with a concurrent registration of the same email.
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email is already registered.",
        ) from exc

    logger.info("user_registered user_id=%s role=%s", user_row["id"], user_row["role"])
    return _token_response(user_row)


async def login(store: Store, payload: schemas.LoginRequest) -> schemas.TokenResponse:
    user_row = await repository.get_user_by_email(store, payload.email, with_secrets=True)
    if user_row is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials.",
        )

    is_valid = await verify_password(payload.password, str(user_row.get("passwordHash") or ""))
    if not is_valid:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials.",
        )

    return _token_response(user_row)


async def get_user_from_access_token(store: Store, access_token: str) -> dict:
    try:
        user_id = security.access_token_subject(access_token)
    except security.AuthSecurityError as exc:
        raise _unauthorized() from exc

    user_row = await repository.get_user_by_id(store, user_id)
    if user_row is None:
        raise _unauthorized()
    return user_row


def me(current_user: dict) -> schemas.UserEnvelope:
    return schemas.UserEnvelope(data=_to_user_response(current_user))


async def update_details(
    store: Store,
    current_user: dict,
    payload: schemas.UpdateDetailsRequest,
) -> schemas.UserEnvelope:
    changes: dict[str, Any] = payload.model_dump(exclude_none=True)
    if not changes:
        return me(current_user)

    try:
        user_row = await repository.update_details(store, int(current_user["id"]), changes)
    except DuplicateKeyError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email is already registered.",
        ) from exc
    if user_row is None:
        raise _unauthorized()
    return schemas.UserEnvelope(data=_to_user_response(user_row))


async def update_password(
    store: Store,
    current_user: dict,
    payload: schemas.UpdatePasswordRequest,
) -> schemas.TokenResponse:
    user_row = await repository.get_user_by_id(store, int(current_user["id"]), with_secrets=True)
    if user_row is None:
        raise _unauthorized()

    if not await verify_password(payload.currentPassword, str(user_row.get("passwordHash") or "")):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Password is incorrect.",
        )

    # Tokens issued before this change stay valid until they expire.
    new_hash = await hash_password(payload.newPassword)
    await repository.set_password_hash(store, int(user_row["id"]), new_hash)
    logger.info("password_changed user_id=%s", user_row["id"])
    return _token_response(user_row)


async def forgot_password(
    store: Store,
    notifier: Notifier,
    payload: schemas.ForgotPasswordRequest,
    *,
    link_base: str,
) -> dict[str, Any]:
    user_row = await repository.get_user_by_email(store, payload.email)
    if user_row is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="There is no user with that email.",
        )

    user_id = int(user_row["id"])
    raw_token, digest, expires_at = security.build_reset_token()
    await repository.set_reset_token(store, user_id, digest=digest, expires_at=expires_at)

    reset_url = f"{link_base.rstrip('/')}/{raw_token}"
    body = (
        "You are receiving this email because you (or someone else) has requested "
        f"the reset of a password. Please make a PUT request to:\n\n{reset_url}"
    )
    try:
        await notifier.send(to=str(user_row["email"]), subject="Password reset token", body=body)
    except NotifyError as exc:
        logger.warning("reset_delivery_failed user_id=%s error=%s", user_id, exc)
        await repository.clear_reset_token(store, user_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Email could not be sent.",
        ) from exc

    logger.info("reset_token_issued user_id=%s expires_at=%s", user_id, expires_at.isoformat())
    return {"success": True, "data": "Email sent."}


async def reset_password(
    store: Store,
    raw_token: str,
    payload: schemas.ResetPasswordRequest,
) -> schemas.TokenResponse:
    invalid = HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid token.")
    raw_token = (raw_token or "").strip()
    if not raw_token:
        raise invalid

    user_row = await repository.get_user_by_reset_digest(store, security.hash_reset_token(raw_token))
    if user_row is None:
        raise invalid
    if not security.reset_token_matches(
        raw_token,
        user_row.get("resetPasswordToken"),
        user_row.get("resetPasswordExpire"),
    ):
        raise invalid

    new_hash = await hash_password(payload.password)
    # Concurrent requests with the same token race here; only one write matches.
    updated = await repository.consume_reset_token(
        store,
        int(user_row["id"]),
        digest=str(user_row["resetPasswordToken"]),
        password_hash=new_hash,
    )
    if updated is None:
        raise invalid
    logger.info("password_reset user_id=%s", user_row["id"])
    return _token_response(user_row)
