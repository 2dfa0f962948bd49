"""
Auth security helpers: password hashing, session tokens, session cookie.
"""

from __future__ import annotations

import secrets
import time
from typing import Any

import bcrypt
import jwt
from fastapi import Response

from core import config

SESSION_COOKIE_NAME = "session"
OAUTH_STATE_COOKIE_NAME = "oauth_state"
OAUTH_STATE_MAX_AGE_S = 10 * 60
BCRYPT_ROUNDS = 12


class AuthSecurityError(RuntimeError):
    pass


def jwt_algorithm() -> str:
    return config.env_str("JWT_ALG", "HS256")


def session_max_age_s() -> int:
    return config.session_max_age_days() * 24 * 60 * 60


def now_epoch_s() -> int:
    return int(time.time())


def hash_password(plain_password: str) -> str:
    password = (plain_password or "").encode("utf-8")
    if not password:
        raise AuthSecurityError("Password is empty.")
    return bcrypt.hashpw(password, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, password_hash: str | None) -> bool:
    password = (plain_password or "").encode("utf-8")
    hashed = (password_hash or "").encode("utf-8")
    if not password or not hashed:
        return False
    try:
        return bcrypt.checkpw(password, hashed)
    except ValueError:
        return False


def build_session_token(*, user_id: str, email: str, role: str, session_id: str) -> str:
    issued_at = now_epoch_s()
    payload = {
        "sub": str(user_id),
        "email": email,
        "role": role,
        "sid": str(session_id),
        "type": "session",
        "iat": issued_at,
        "exp": issued_at + session_max_age_s(),
    }
    return jwt.encode(payload, config.session_secret(), algorithm=jwt_algorithm())


def decode_session_token(token: str) -> dict[str, Any]:
    raw = (token or "").strip()
    if not raw:
        raise AuthSecurityError("Session token is empty.")

    try:
        payload = jwt.decode(raw, config.session_secret(), algorithms=[jwt_algorithm()])
    except jwt.InvalidTokenError as exc:
        raise AuthSecurityError("Invalid session token.") from exc

    if str(payload.get("type") or "").strip().lower() != "session":
        raise AuthSecurityError("Token is not a session token.")
    if not str(payload.get("sub") or "").strip() or not str(payload.get("sid") or "").strip():
        raise AuthSecurityError("Session token is missing claims.")

    return payload


def build_session_secret() -> str:
    # Opaque per-session value stored with the session row.
    return secrets.token_urlsafe(32)


def build_oauth_state() -> str:
    return secrets.token_urlsafe(24)


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        SESSION_COOKIE_NAME,
        token,
        max_age=session_max_age_s(),
        path="/",
        httponly=True,
        secure=config.is_production(),
        samesite="lax",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=config.is_production(),
        samesite="lax",
    )


def set_oauth_state_cookie(response: Response, state: str) -> None:
    response.set_cookie(
        OAUTH_STATE_COOKIE_NAME,
        state,
        max_age=OAUTH_STATE_MAX_AGE_S,
        path="/",
        httponly=True,
        secure=config.is_production(),
        samesite="lax",
    )


def clear_oauth_state_cookie(response: Response) -> None:
    response.delete_cookie(OAUTH_STATE_COOKIE_NAME, path="/")
