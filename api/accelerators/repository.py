"""
Accelerator persistence helpers.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from core import db

ACCELERATOR_COLUMNS = """
    id, title, description, why_it_stands_out, average_funding,
    funded_companies, founded_year, country, type, website, logo_url,
    created_at, updated_at
"""


async def list_accelerators(
    *,
    offset: int,
    limit: int,
    search: str | None = None,
    country: str | None = None,
    accelerator_type: str | None = None,
) -> tuple[list[dict], int]:
    filters = db.Filters()
    if search:
        pattern = filters.param(db.like_pattern(search))
        filters.add(f"(title ILIKE {pattern} OR description ILIKE {pattern})")
    if country:
        filters.add(f"country ILIKE {filters.param(db.like_pattern(country))}")
    if accelerator_type:
        filters.add(f"type ILIKE {filters.param(db.like_pattern(accelerator_type))}")

    where = filters.where()
    total = await db.fetch_val(f"SELECT count(*) FROM accelerators {where}", *filters.args)
    n = len(filters.args)
    rows = await db.fetch_all(
        f"""
        SELECT {ACCELERATOR_COLUMNS}
        FROM accelerators
        {where}
        ORDER BY created_at DESC
        LIMIT ${n + 1} OFFSET ${n + 2}
        """,
        *filters.args,
        limit,
        offset,
    )
    return rows, int(total or 0)


async def get_accelerator(accelerator_id: UUID) -> dict | None:
    return await db.fetch_one(
        f"""
        SELECT {ACCELERATOR_COLUMNS}
        FROM accelerators
        WHERE id = $1
        """,
        accelerator_id,
    )


async def create_accelerator(fields: dict[str, Any]) -> dict:
    columns, placeholders, values = db.insert_clause(fields)
    row = await db.fetch_one(
        f"""
        INSERT INTO accelerators ({columns})
        VALUES ({placeholders})
        RETURNING {ACCELERATOR_COLUMNS}
        """,
        *values,
    )
    if row is None:
        raise RuntimeError("Failed to create accelerator.")
    return row


async def update_accelerator(accelerator_id: UUID, fields: dict[str, Any]) -> dict | None:
    if not fields:
        return await get_accelerator(accelerator_id)
    assignments, values = db.set_clause(fields, start=2)
    return await db.fetch_one(
        f"""
        UPDATE accelerators
        SET {assignments}, updated_at = now()
        WHERE id = $1
        RETURNING {ACCELERATOR_COLUMNS}
        """,
        accelerator_id,
        *values,
    )


async def delete_accelerator(accelerator_id: UUID) -> bool:
    status = await db.execute("DELETE FROM accelerators WHERE id = $1", accelerator_id)
    return db.affected_rows(status) > 0
