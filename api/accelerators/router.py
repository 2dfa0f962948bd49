"""
Accelerator API endpoints (mounted under /api/v1/accelerators).

Reads are public; writes require an admin session.
"""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from auth import dependencies as auth_dependencies
from core import responses
from core.errors import NotFoundError

from . import repository, schemas

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
async def list_accelerators(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: str | None = Query(default=None, max_length=200),
    country: str | None = Query(default=None, max_length=200),
    type: str | None = Query(default=None, max_length=200),
) -> dict:
    rows, total = await repository.list_accelerators(
        offset=responses.page_offset(page, limit),
        limit=limit,
        search=(search or "").strip() or None,
        country=(country or "").strip() or None,
        accelerator_type=(type or "").strip() or None,
    )
    return responses.paginated(rows, page=page, limit=limit, total=total)


@router.get("/{accelerator_id}")
async def get_accelerator(accelerator_id: UUID) -> dict:
    row = await repository.get_accelerator(accelerator_id)
    if row is None:
        raise NotFoundError("Accelerator not found.")
    return responses.ok(row)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_accelerator(
    payload: schemas.CreateAcceleratorRequest,
    _: dict = Depends(auth_dependencies.require_admin),
) -> dict:
    row = await repository.create_accelerator(payload.model_dump())
    logger.info("accelerator_created id=%s", row["id"])
    return responses.ok(row, message="Accelerator created successfully.")


@router.patch("/{accelerator_id}")
async def update_accelerator(
    accelerator_id: UUID,
    payload: schemas.UpdateAcceleratorRequest,
    _: dict = Depends(auth_dependencies.require_admin),
) -> dict:
    if await repository.get_accelerator(accelerator_id) is None:
        raise NotFoundError("Accelerator not found.")

    row = await repository.update_accelerator(accelerator_id, payload.model_dump(exclude_unset=True))
    if row is None:
        raise NotFoundError("Accelerator not found.")
    return responses.ok(row, message="Accelerator updated successfully.")


@router.delete("/{accelerator_id}")
async def delete_accelerator(
    accelerator_id: UUID,
    _: dict = Depends(auth_dependencies.require_admin),
) -> dict:
    if not await repository.delete_accelerator(accelerator_id):
        raise NotFoundError("Accelerator not found.")
    logger.info("accelerator_deleted id=%s", accelerator_id)
    return responses.ok(message="Accelerator deleted successfully.")
