"""
User persistence helpers beyond authentication.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from auth.repository import USER_COLUMNS
from core import db


async def update_profile(user_id: UUID, fields: dict[str, Any]) -> dict | None:
    assignments, values = db.set_clause(fields, start=2)
    return await db.fetch_one(
        f"""
        UPDATE users
        SET {assignments}, updated_at = now()
        WHERE id = $1
        RETURNING {USER_COLUMNS}
        """,
        user_id,
        *values,
    )


async def list_users(
    *,
    offset: int,
    limit: int,
    role: str | None = None,
    search: str | None = None,
) -> tuple[list[dict], int]:
    filters = db.Filters()
    if role:
        filters.add(f"role = {filters.param(role)}")
    if search:
        pattern = filters.param(db.like_pattern(search))
        filters.add(f"(email ILIKE {pattern} OR name ILIKE {pattern})")

    where = filters.where()
    total = await db.fetch_val(f"SELECT count(*) FROM users {where}", *filters.args)
    n = len(filters.args)
    rows = await db.fetch_all(
        f"""
        SELECT {USER_COLUMNS}
        FROM users
        {where}
        ORDER BY created_at DESC
        LIMIT ${n + 1} OFFSET ${n + 2}
        """,
        *filters.args,
        limit,
        offset,
    )
    return rows, int(total or 0)


async def update_role(user_id: UUID, role: str) -> dict | None:
    return await db.fetch_one(
        f"""
        UPDATE users
        SET role = $2,
            updated_at = now()
        WHERE id = $1
        RETURNING {USER_COLUMNS}
        """,
        user_id,
        role,
    )


async def delete_user(user_id: UUID) -> bool:
    status = await db.execute("DELETE FROM users WHERE id = $1", user_id)
    return db.affected_rows(status) > 0
