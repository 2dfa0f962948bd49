"""
People persistence helpers.

Person rows are read with their company summary (`{"id", "name"}`) and
contact details embedded; a person and their contact are written together.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

import asyncpg

from core import db

PERSON_SELECT = """
    SELECT
        p.id, p.full_name, p.passion, p.bio, p.profile_url, p.photo_url,
        p.notes, p.company_id, p.created_at, p.updated_at,
        CASE WHEN c.id IS NULL THEN NULL
             ELSE json_build_object('id', c.id, 'name', c.name)
        END AS company,
        CASE WHEN pc.id IS NULL THEN NULL
             ELSE to_jsonb(pc)
        END AS contact
    FROM people p
    LEFT JOIN companies c ON c.id = p.company_id
    LEFT JOIN people_contacts pc ON pc.people_id = p.id
"""


async def list_people(
    *,
    offset: int,
    limit: int,
    search: str | None = None,
    company_id: UUID | None = None,
) -> tuple[list[dict], int]:
    filters = db.Filters()
    if search:
        pattern = filters.param(db.like_pattern(search))
        filters.add(f"(p.full_name ILIKE {pattern} OR p.passion ILIKE {pattern} OR p.bio ILIKE {pattern})")
    if company_id is not None:
        filters.add(f"p.company_id = {filters.param(company_id)}")

    where = filters.where()
    total = await db.fetch_val(f"SELECT count(*) FROM people p {where}", *filters.args)
    n = len(filters.args)
    rows = await db.fetch_all(
        f"""
        {PERSON_SELECT}
        {where}
        ORDER BY p.created_at DESC
        LIMIT ${n + 1} OFFSET ${n + 2}
        """,
        *filters.args,
        limit,
        offset,
    )
    return rows, int(total or 0)


async def get_person(person_id: UUID) -> dict | None:
    return await db.fetch_one(f"{PERSON_SELECT} WHERE p.id = $1", person_id)


async def _select_person(conn: asyncpg.Connection, person_id: UUID) -> dict | None:
    row = await conn.fetchrow(f"{PERSON_SELECT} WHERE p.id = $1", person_id)
    return dict(row) if row is not None else None


async def _upsert_contact(conn: asyncpg.Connection, person_id: UUID, contact: dict[str, Any]) -> None:
    columns, placeholders, values = db.insert_clause({"people_id": person_id, **contact})
    if contact:
        conflict = "DO UPDATE SET " + ", ".join(f"{column} = EXCLUDED.{column}" for column in contact)
    else:
        conflict = "DO NOTHING"
    await conn.execute(
        f"""
        INSERT INTO people_contacts ({columns})
        VALUES ({placeholders})
        ON CONFLICT (people_id) {conflict}
        """,
        *values,
    )


async def create_person(fields: dict[str, Any], contact: dict[str, Any] | None = None) -> dict:
    columns, placeholders, values = db.insert_clause(fields)
    async with db.transaction() as conn:
        person_id = await conn.fetchval(
            f"""
            INSERT INTO people ({columns})
            VALUES ({placeholders})
            RETURNING id
            """,
            *values,
        )
        if contact is not None:
            await _upsert_contact(conn, person_id, contact)
        row = await _select_person(conn, person_id)

    if row is None:
        raise RuntimeError("Failed to create person.")
    return row


async def update_person(
    person_id: UUID,
    fields: dict[str, Any],
    contact: dict[str, Any] | None = None,
) -> dict | None:
    async with db.transaction() as conn:
        if fields:
            assignments, values = db.set_clause(fields, start=2)
            updated = await conn.fetchval(
                f"""
                UPDATE people
                SET {assignments}, updated_at = now()
                WHERE id = $1
                RETURNING id
                """,
                person_id,
                *values,
            )
            if updated is None:
                return None
        if contact is not None:
            await _upsert_contact(conn, person_id, contact)
        return await _select_person(conn, person_id)


async def delete_person(person_id: UUID) -> bool:
    status = await db.execute("DELETE FROM people WHERE id = $1", person_id)
    return db.affected_rows(status) > 0
