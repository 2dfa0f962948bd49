"""
Auth business logic.

Session lifecycle:
1) sign-in / sign-up / OAuth callback creates a `sessions` row
2) a signed session token (user id, email, role, session id) goes into the
   http-only `session` cookie
3) every request re-reads the cookie, verifies the token, loads the session
   row and rejects it when missing or expired
4) sign-out deletes the row and the cookie; refresh extends the expiry
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from uuid import UUID

from fastapi import Request

from core import config
from core.errors import UnauthorizedError, ValidationError

from . import google, repository, schemas, security

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClientInfo:
    ip_address: str | None = None
    user_agent: str | None = None


@dataclass(frozen=True)
class SessionData:
    user: dict | None = None
    session: dict | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None and self.session is not None


def client_info(request: Request) -> ClientInfo:
    headers = request.headers
    forwarded = (headers.get("x-forwarded-for") or "").split(",")[0].strip()
    ip_address = forwarded or (headers.get("x-real-ip") or "").strip() or None
    return ClientInfo(ip_address=ip_address, user_agent=headers.get("user-agent") or None)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _session_expiry() -> datetime:
    return _utc_now() + timedelta(days=config.session_max_age_days())


def to_user_response(user_row: dict) -> schemas.UserResponse:
    # model_validate ignores password_hash, which is never part of the response.
    return schemas.UserResponse.model_validate(user_row)


def to_session_response(session_row: dict) -> schemas.SessionResponse:
    return schemas.SessionResponse.model_validate(session_row)


def _issue_token(user_row: dict, session_row: dict) -> str:
    return security.build_session_token(
        user_id=str(user_row["id"]),
        email=str(user_row["email"]),
        role=str(user_row["role"]),
        session_id=str(session_row["id"]),
    )


async def _start_session(user_row: dict, client: ClientInfo) -> tuple[dict, str]:
    session_row = await repository.create_session(
        user_id=user_row["id"],
        session_token=security.build_session_secret(),
        expires=_session_expiry(),
        ip_address=client.ip_address,
        user_agent=client.user_agent,
    )
    return session_row, _issue_token(user_row, session_row)


def _auth_response(user_row: dict, session_row: dict, token: str) -> schemas.AuthResponse:
    return schemas.AuthResponse(
        user=to_user_response(user_row),
        session=to_session_response(session_row),
        access_token=token,
    )


async def sign_up(payload: schemas.SignUpRequest, *, client: ClientInfo) -> tuple[schemas.AuthResponse, str]:
    existing = await repository.get_user_by_email(payload.email)
    if existing is not None:
        raise ValidationError("User with this email already exists.", code="ALREADY_EXISTS")

    user_row = await repository.create_user(
        email=payload.email,
        password_hash=security.hash_password(payload.password),
        name=payload.name,
        auth_provider="EMAIL",
    )
    session_row, token = await _start_session(user_row, client)
    await repository.insert_audit_log(
        user_id=user_row["id"],
        action="CREATE_USER",
        resource="USER",
        details={"target_user_id": str(user_row["id"]), "method": "EMAIL"},
        ip_address=client.ip_address,
        user_agent=client.user_agent,
    )
    logger.info("user_signed_up user_id=%s", user_row["id"])
    return _auth_response(user_row, session_row, token), token


async def sign_in(payload: schemas.SignInRequest, *, client: ClientInfo) -> tuple[schemas.AuthResponse, str]:
    user_row = await repository.get_user_by_email(payload.email)
    # OAuth-only accounts have no password and cannot sign in this way.
    if user_row is None or not user_row.get("password_hash"):
        raise UnauthorizedError("Invalid email or password.", code="INVALID_CREDENTIALS")

    if not security.verify_password(payload.password, user_row.get("password_hash")):
        raise UnauthorizedError("Invalid email or password.", code="INVALID_CREDENTIALS")

    user_row = await repository.mark_user_login(user_row["id"]) or user_row
    session_row, token = await _start_session(user_row, client)
    await repository.insert_audit_log(
        user_id=user_row["id"],
        action="LOGIN",
        resource="AUTH",
        details={"provider": "EMAIL", "success": True},
        ip_address=client.ip_address,
        user_agent=client.user_agent,
    )
    return _auth_response(user_row, session_row, token), token


async def get_current_session(token: str | None) -> SessionData:
    """
    Resolve the session cookie into the signed-in user and session row.

    An absent, invalid, expired or orphaned session yields an empty
    SessionData rather than an error; callers decide whether that is a 401.
    """
    if not token:
        return SessionData()

    try:
        payload = security.decode_session_token(token)
    except security.AuthSecurityError:
        return SessionData()

    try:
        session_id = UUID(str(payload["sid"]))
    except ValueError:
        return SessionData()

    session_row = await repository.get_session_by_id(session_id)
    if session_row is None:
        return SessionData()

    expires = session_row.get("expires")
    if not isinstance(expires, datetime) or expires <= _utc_now():
        return SessionData()

    if str(session_row["user_id"]) != str(payload.get("sub")):
        return SessionData()

    user_row = await repository.get_user_by_id(session_row["user_id"])
    if user_row is None:
        return SessionData()

    await repository.touch_session(session_id)
    return SessionData(user=user_row, session=session_row)


def session_payload(session_data: SessionData) -> dict:
    if not session_data.is_authenticated:
        return {"user": None, "session": None}
    return {
        "user": to_user_response(session_data.user),
        "session": to_session_response(session_data.session),
    }


async def sign_out(session_data: SessionData) -> None:
    if session_data.session is not None:
        await repository.delete_session(session_data.session["id"])


async def refresh_session(session_data: SessionData) -> tuple[schemas.AuthResponse, str]:
    if not session_data.is_authenticated:
        raise UnauthorizedError("No valid session found.", code="INVALID_SESSION")

    user_row = session_data.user
    session_row = await repository.extend_session(
        session_data.session["id"],
        expires=_session_expiry(),
    )
    if session_row is None:
        raise UnauthorizedError("No valid session found.", code="INVALID_SESSION")

    token = _issue_token(user_row, session_row)
    return _auth_response(user_row, session_row, token), token


async def sign_in_with_google(code: str, *, base_url: str, client: ClientInfo) -> str:
    """
    Complete the OAuth code exchange and return a session token.

    Raises google.GoogleOAuthError (or httpx errors) on upstream failure.
    """
    tokens = await google.exchange_code(code, base_url=base_url)
    profile = await google.fetch_profile(tokens.access_token)

    user_row = await repository.get_user_by_email(profile.email)
    if user_row is None:
        user_row = await repository.create_user(
            email=profile.email,
            password_hash=None,
            name=profile.name,
            auth_provider="GOOGLE",
            image=profile.picture,
            avatar_url=profile.picture,
        )
        await repository.insert_audit_log(
            user_id=user_row["id"],
            action="CREATE_USER",
            resource="USER",
            details={"target_user_id": str(user_row["id"]), "method": "GOOGLE"},
            ip_address=client.ip_address,
            user_agent=client.user_agent,
        )
    else:
        user_row = await repository.update_oauth_profile(
            user_row["id"],
            name=profile.name,
            picture=profile.picture,
        ) or user_row

    expires_at = security.now_epoch_s() + tokens.expires_in if tokens.expires_in is not None else None
    await repository.upsert_account(
        user_id=user_row["id"],
        provider="google",
        provider_account_id=profile.id,
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        expires_at=expires_at,
        token_type=tokens.token_type,
        scope=tokens.scope,
        id_token=tokens.id_token,
    )

    _, token = await _start_session(user_row, client)
    await repository.insert_audit_log(
        user_id=user_row["id"],
        action="LOGIN",
        resource="AUTH",
        details={"provider": "GOOGLE", "success": True},
        ip_address=client.ip_address,
        user_agent=client.user_agent,
    )
    return token
