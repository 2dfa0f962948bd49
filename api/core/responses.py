"""
Success envelopes and pagination helpers shared by all routers.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def ok(data: Any = None, *, message: str | None = None) -> dict[str, Any]:
    body: dict[str, Any] = {"success": True, "data": data}
    if message:
        body["message"] = message
    body["timestamp"] = utc_timestamp()
    return body


def page_offset(page: int, limit: int) -> int:
    return (max(page, 1) - 1) * limit


def pagination(page: int, limit: int, total: int) -> dict[str, Any]:
    total_pages = math.ceil(total / limit) if limit > 0 else 0
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "total_pages": total_pages,
        "has_next": page < total_pages,
        "has_prev": page > 1,
    }


def paginated(items: list[Any], *, page: int, limit: int, total: int) -> dict[str, Any]:
    return {
        "success": True,
        "data": items,
        "pagination": pagination(page, limit, total),
        "timestamp": utc_timestamp(),
    }
