"""
Auth persistence helpers (users, sessions, OAuth accounts, audit log).
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from core import db

USER_COLUMNS = """
    id, email, password_hash, name, image, avatar_url, role, auth_provider,
    email_verified, metadata, last_login_at, created_at, updated_at
"""

SESSION_COLUMNS = """
    id, session_token, user_id, expires, ip_address, user_agent,
    last_active_at, created_at
"""


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def _aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


async def create_user(
    *,
    email: str,
    password_hash: str | None,
    name: str | None = None,
    auth_provider: str = "EMAIL",
    image: str | None = None,
    avatar_url: str | None = None,
) -> dict:
    row = await db.fetch_one(
        f"""
        INSERT INTO users (email, password_hash, name, image, avatar_url, auth_provider, email_verified)
        VALUES ($1, $2, $3, $4, $5, $6, now())
        RETURNING {USER_COLUMNS}
        """,
        normalize_email(email),
        password_hash,
        name,
        image,
        avatar_url,
        auth_provider,
    )
    if row is None:
        raise RuntimeError("Failed to create user.")
    return row


async def get_user_by_email(email: str) -> dict | None:
    return await db.fetch_one(
        f"""
        SELECT {USER_COLUMNS}
        FROM users
        WHERE lower(email) = lower($1)
        """,
        normalize_email(email),
    )


async def get_user_by_id(user_id: UUID) -> dict | None:
    return await db.fetch_one(
        f"""
        SELECT {USER_COLUMNS}
        FROM users
        WHERE id = $1
        """,
        user_id,
    )


async def mark_user_login(user_id: UUID) -> dict | None:
    return await db.fetch_one(
        f"""
        UPDATE users
        SET last_login_at = now(),
            updated_at = now()
        WHERE id = $1
        RETURNING {USER_COLUMNS}
        """,
        user_id,
    )


async def update_oauth_profile(user_id: UUID, *, name: str | None, picture: str | None) -> dict | None:
    """
    Refresh profile fields from the identity provider, keeping existing
    values where the provider sent nothing.
    """
    return await db.fetch_one(
        f"""
        UPDATE users
        SET name = COALESCE(NULLIF($2, ''), name),
            image = COALESCE(NULLIF($3, ''), image),
            avatar_url = COALESCE(NULLIF($3, ''), avatar_url),
            last_login_at = now(),
            updated_at = now()
        WHERE id = $1
        RETURNING {USER_COLUMNS}
        """,
        user_id,
        name,
        picture,
    )


async def create_session(
    *,
    user_id: UUID,
    session_token: str,
    expires: datetime,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> dict:
    row = await db.fetch_one(
        f"""
        INSERT INTO sessions (session_token, user_id, expires, ip_address, user_agent)
        VALUES ($1, $2, $3, $4, $5)
        RETURNING {SESSION_COLUMNS}
        """,
        session_token,
        user_id,
        _aware(expires),
        ip_address,
        user_agent,
    )
    if row is None:
        raise RuntimeError("Failed to create session.")
    return row


async def get_session_by_id(session_id: UUID) -> dict | None:
    return await db.fetch_one(
        f"""
        SELECT {SESSION_COLUMNS}
        FROM sessions
        WHERE id = $1
        """,
        session_id,
    )


async def touch_session(session_id: UUID) -> None:
    await db.execute(
        """
        UPDATE sessions
        SET last_active_at = now()
        WHERE id = $1
        """,
        session_id,
    )


async def extend_session(session_id: UUID, *, expires: datetime) -> dict | None:
    return await db.fetch_one(
        f"""
        UPDATE sessions
        SET expires = $2,
            last_active_at = now()
        WHERE id = $1
        RETURNING {SESSION_COLUMNS}
        """,
        session_id,
        _aware(expires),
    )


async def delete_session(session_id: UUID) -> bool:
    status = await db.execute("DELETE FROM sessions WHERE id = $1", session_id)
    return db.affected_rows(status) > 0


async def delete_user_sessions(user_id: UUID) -> int:
    status = await db.execute("DELETE FROM sessions WHERE user_id = $1", user_id)
    return db.affected_rows(status)


async def upsert_account(
    *,
    user_id: UUID,
    provider: str,
    provider_account_id: str,
    access_token: str | None,
    refresh_token: str | None,
    expires_at: int | None,
    token_type: str | None,
    scope: str | None,
    id_token: str | None,
) -> dict:
    row = await db.fetch_one(
        """
        INSERT INTO accounts (
            user_id, type, provider, provider_account_id, access_token,
            refresh_token, expires_at, token_type, scope, id_token
        )
        VALUES ($1, 'oauth', $2, $3, $4, $5, $6, $7, $8, $9)
        ON CONFLICT (provider, provider_account_id) DO UPDATE
        SET access_token = EXCLUDED.access_token,
            refresh_token = COALESCE(EXCLUDED.refresh_token, accounts.refresh_token),
            expires_at = EXCLUDED.expires_at
        RETURNING id, user_id, provider, provider_account_id, expires_at
        """,
        user_id,
        provider,
        provider_account_id,
        access_token,
        refresh_token,
        expires_at,
        token_type,
        scope,
        id_token,
    )
    if row is None:
        raise RuntimeError("Failed to upsert account.")
    return row


async def insert_audit_log(
    *,
    user_id: UUID | None,
    action: str,
    resource: str,
    details: dict[str, Any] | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> None:
    await db.execute(
        """
        INSERT INTO audit_logs (user_id, action, resource, details, ip_address, user_agent)
        VALUES ($1, $2, $3, $4, $5, $6)
        """,
        user_id,
        action,
        resource,
        details or {},
        ip_address,
        user_agent,
    )
