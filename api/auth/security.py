"""
Auth security helpers: password hashing, session tokens, reset tokens.
"""

from __future__ import annotations

import hashlib
import hmac
import os
import secrets
import time
from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
import jwt

MIN_BCRYPT_ROUNDS = 10
RESET_TOKEN_BYTES = 20


class AuthSecurityError(RuntimeError):
    pass


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def jwt_secret() -> str:
    # Local default keeps development simple.
    # In production, set JWT_SECRET in environment.
    return os.environ.get("JWT_SECRET", "dev-change-this-secret").strip() or "dev-change-this-secret"


def jwt_algorithm() -> str:
    return os.environ.get("JWT_ALG", "HS256").strip() or "HS256"


def access_token_expire_minutes() -> int:
    return _env_int("JWT_EXPIRE_MIN", 30 * 24 * 60)


def bcrypt_rounds() -> int:
    return max(MIN_BCRYPT_ROUNDS, _env_int("BCRYPT_ROUNDS", MIN_BCRYPT_ROUNDS))


def reset_token_expire_minutes() -> int:
    return _env_int("RESET_TOKEN_EXPIRE_MIN", 10)


def now_epoch_s() -> int:
    return int(time.time())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def hash_password(plain_password: str) -> str:
    """
    bcrypt digest with embedded salt and cost. Only call with a plaintext.
    """
    password = (plain_password or "").encode("utf-8")
    if not password:
        raise AuthSecurityError("Password is empty.")
    return bcrypt.hashpw(password, bcrypt.gensalt(rounds=bcrypt_rounds())).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    password = (plain_password or "").encode("utf-8")
    hashed = (password_hash or "").encode("utf-8")
    if not password or not hashed:
        return False
    try:
        return bcrypt.checkpw(password, hashed)
    except ValueError:
        return False


def build_access_token(*, user_id: int, now: int | None = None) -> str:
    issued_at = now_epoch_s() if now is None else now
    expires_at = issued_at + (access_token_expire_minutes() * 60)

    payload = {
        "sub": str(user_id),
        "type": "access",
        "iat": issued_at,
        "exp": expires_at,
    }
    return jwt.encode(payload, jwt_secret(), algorithm=jwt_algorithm())


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Return the claims of a valid access token.

    Every failure (empty, malformed, bad signature, expired, wrong type)
    raises the same AuthSecurityError message.
    """
    raw = (token or "").strip()
    if not raw:
        raise AuthSecurityError("Invalid access token.")

    try:
        payload = jwt.decode(
            raw,
            jwt_secret(),
            algorithms=[jwt_algorithm()],
            options={"require": ["sub", "exp", "iat"]},
        )
    except jwt.InvalidTokenError as exc:
        raise AuthSecurityError("Invalid access token.") from exc

    token_type = str(payload.get("type") or "").strip().lower()
    if token_type != "access":
        raise AuthSecurityError("Invalid access token.")

    return payload


def access_token_subject(token: str) -> int:
    payload = decode_access_token(token)
    subject = str(payload.get("sub") or "").strip()
    if not subject.isdigit():
        raise AuthSecurityError("Invalid access token.")
    return int(subject)


def hash_reset_token(raw_reset_token: str) -> str:
    token = (raw_reset_token or "").encode("utf-8")
    if not token:
        raise AuthSecurityError("Reset token is empty.")
    return hashlib.sha256(token).hexdigest()


def build_reset_token(*, now: datetime | None = None) -> tuple[str, str, datetime]:
    """
    Return (plaintext, sha256 digest, expiry).

    Only the digest and expiry are stored; the plaintext goes out once in the
    reset link.
    """
    raw = secrets.token_hex(RESET_TOKEN_BYTES)
    issued_at = now or utc_now()
    expires_at = issued_at + timedelta(minutes=reset_token_expire_minutes())
    return raw, hash_reset_token(raw), expires_at


def reset_token_matches(
    candidate: str,
    stored_digest: str | None,
    stored_expiry: datetime | None,
    *,
    now: datetime | None = None,
) -> bool:
    if not candidate or not stored_digest or not isinstance(stored_expiry, datetime):
        return False
    if stored_expiry.tzinfo is None:
        stored_expiry = stored_expiry.replace(tzinfo=timezone.utc)
    if (now or utc_now()) >= stored_expiry:
        return False
    return hmac.compare_digest(hash_reset_token(candidate), stored_digest)
