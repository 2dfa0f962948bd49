"""
Company persistence helpers.

Company rows are always read with their accelerator summary
(`{"id", "title"}`) and contact source embedded as JSON objects.
A company and its contact source are written in one transaction.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

import asyncpg

from core import db

COMPANY_SELECT = """
    SELECT
        c.id, c.name, c.tagline, c.description, c.company_size, c.tech_stack,
        c.domain, c.sector, c.vision, c.founded_year, c.website, c.logo_url,
        c.location, c.funding_stage, c.accelerator_id, c.created_at, c.updated_at,
        CASE WHEN a.id IS NULL THEN NULL
             ELSE json_build_object('id', a.id, 'title', a.title)
        END AS accelerator,
        CASE WHEN cs.id IS NULL THEN NULL
             ELSE to_jsonb(cs)
        END AS contact_source
    FROM companies c
    LEFT JOIN accelerators a ON a.id = c.accelerator_id
    LEFT JOIN contact_sources cs ON cs.company_id = c.id
"""


async def list_companies(
    *,
    offset: int,
    limit: int,
    search: str | None = None,
    accelerator_id: UUID | None = None,
    sector: str | None = None,
    tech_stack: str | None = None,
) -> tuple[list[dict], int]:
    filters = db.Filters()
    if search:
        pattern = filters.param(db.like_pattern(search))
        filters.add(f"(c.name ILIKE {pattern} OR c.description ILIKE {pattern} OR c.tagline ILIKE {pattern})")
    if accelerator_id is not None:
        filters.add(f"c.accelerator_id = {filters.param(accelerator_id)}")
    if sector:
        filters.add(f"c.sector ILIKE {filters.param(db.like_pattern(sector))}")
    if tech_stack:
        filters.add(f"{filters.param(tech_stack)} = ANY(c.tech_stack)")

    where = filters.where()
    total = await db.fetch_val(f"SELECT count(*) FROM companies c {where}", *filters.args)
    n = len(filters.args)
    rows = await db.fetch_all(
        f"""
        {COMPANY_SELECT}
        {where}
        ORDER BY c.created_at DESC
        LIMIT ${n + 1} OFFSET ${n + 2}
        """,
        *filters.args,
        limit,
        offset,
    )
    return rows, int(total or 0)


async def get_company(company_id: UUID) -> dict | None:
    return await db.fetch_one(f"{COMPANY_SELECT} WHERE c.id = $1", company_id)


async def _select_company(conn: asyncpg.Connection, company_id: UUID) -> dict | None:
    row = await conn.fetchrow(f"{COMPANY_SELECT} WHERE c.id = $1", company_id)
    return dict(row) if row is not None else None


async def _upsert_contact_source(conn: asyncpg.Connection, company_id: UUID, contact: dict[str, Any]) -> None:
    fields = {"company_id": company_id, **contact}
    columns, placeholders, values = db.insert_clause(fields)
    if contact:
        updates = ", ".join(f"{column} = EXCLUDED.{column}" for column in contact)
        conflict = f"DO UPDATE SET {updates}"
    else:
        conflict = "DO NOTHING"
    await conn.execute(
        f"""
        INSERT INTO contact_sources ({columns})
        VALUES ({placeholders})
        ON CONFLICT (company_id) {conflict}
        """,
        *values,
    )


async def create_company(fields: dict[str, Any], contact: dict[str, Any] | None = None) -> dict:
    columns, placeholders, values = db.insert_clause(fields)
    async with db.transaction() as conn:
        company_id = await conn.fetchval(
            f"""
            INSERT INTO companies ({columns})
            VALUES ({placeholders})
            RETURNING id
            """,
            *values,
        )
        if contact is not None:
            await _upsert_contact_source(conn, company_id, contact)
        row = await _select_company(conn, company_id)

    if row is None:
        raise RuntimeError("Failed to create company.")
    return row


async def update_company(
    company_id: UUID,
    fields: dict[str, Any],
    contact: dict[str, Any] | None = None,
) -> dict | None:
    async with db.transaction() as conn:
        if fields:
            assignments, values = db.set_clause(fields, start=2)
            updated = await conn.fetchval(
                f"""
                UPDATE companies
                SET {assignments}, updated_at = now()
                WHERE id = $1
                RETURNING id
                """,
                company_id,
                *values,
            )
            if updated is None:
                return None
        if contact is not None:
            await _upsert_contact_source(conn, company_id, contact)
        return await _select_company(conn, company_id)


async def delete_company(company_id: UUID) -> bool:
    status = await db.execute("DELETE FROM companies WHERE id = $1", company_id)
    return db.affected_rows(status) > 0
