"""
Principal (user) persistence helpers.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from core.resources import USERS
from core.store import Collection, Condition, Store


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def _users(store: Store) -> Collection:
    return store.collection(USERS)


async def create_user(
    store: Store,
    *,
    name: str,
    email: str,
    password_hash: str,
    role: str,
) -> dict[str, Any]:
    return await _users(store).insert(
        {
            "name": name.strip(),
            "email": normalize_email(email),
            "role": role,
            "passwordHash": password_hash,
        }
    )


async def get_user_by_email(store: Store, email: str, *, with_secrets: bool = False) -> dict[str, Any] | None:
    return await _users(store).find_one(
        [Condition("email", "eq", normalize_email(email))],
        include_hidden=with_secrets,
    )


async def get_user_by_id(store: Store, user_id: int, *, with_secrets: bool = False) -> dict[str, Any] | None:
    return await _users(store).get(user_id, include_hidden=with_secrets)


async def get_user_by_reset_digest(store: Store, digest: str) -> dict[str, Any] | None:
    return await _users(store).find_one(
        [Condition("resetPasswordToken", "eq", digest)],
        include_hidden=True,
    )


async def update_details(store: Store, user_id: int, changes: dict[str, Any]) -> dict[str, Any] | None:
    if "email" in changes:
        changes = {**changes, "email": normalize_email(changes["email"])}
    return await _users(store).update(user_id, changes)


async def set_password_hash(store: Store, user_id: int, password_hash: str) -> dict[str, Any] | None:
    # Clears any outstanding reset token in the same write.
    return await _users(store).update(
        user_id,
        {
            "passwordHash": password_hash,
            "resetPasswordToken": None,
            "resetPasswordExpire": None,
        },
    )


async def consume_reset_token(
    store: Store,
    user_id: int,
    *,
    digest: str,
    password_hash: str,
) -> dict[str, Any] | None:
    """
    Set the new password only if `digest` is still the stored reset token.
    Returns None when another request already consumed (or replaced) it.
    """
    return await _users(store).update(
        user_id,
        {
            "passwordHash": password_hash,
            "resetPasswordToken": None,
            "resetPasswordExpire": None,
        },
        where=[Condition("resetPasswordToken", "eq", digest)],
    )


async def set_reset_token(store: Store, user_id: int, *, digest: str, expires_at: datetime) -> None:
    await _users(store).update(
        user_id,
        {"resetPasswordToken": digest, "resetPasswordExpire": expires_at},
    )


async def clear_reset_token(store: Store, user_id: int) -> None:
    await _users(store).update(
        user_id,
        {"resetPasswordToken": None, "resetPasswordExpire": None},
    )


async def delete_user(store: Store, user_id: int) -> bool:
    return await _users(store).delete(user_id)
