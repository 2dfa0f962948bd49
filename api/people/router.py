"""
People API endpoints (mounted under /api/v1/people).
"""

from __future__ import annotations

import logging
from uuid import UUID

import asyncpg
from fastapi import APIRouter, Depends, Query, status

from auth import dependencies as auth_dependencies
from core import responses
from core.errors import NotFoundError, ValidationError

from . import repository, schemas

logger = logging.getLogger(__name__)

router = APIRouter()


def _split_payload(payload: schemas.PersonFields, *, partial: bool) -> tuple[dict, dict | None]:
    data = payload.model_dump(exclude_unset=partial)
    contact = data.pop("contact", None)
    if contact is not None:
        sent = payload.contact.model_fields_set
        contact = {key: value for key, value in contact.items() if key in sent}
    if "notes" in data and data["notes"] is None:
        data["notes"] = []
    return data, contact


@router.get("")
async def list_people(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: str | None = Query(default=None, max_length=200),
    company_id: UUID | None = Query(default=None),
) -> dict:
    rows, total = await repository.list_people(
        offset=responses.page_offset(page, limit),
        limit=limit,
        search=(search or "").strip() or None,
        company_id=company_id,
    )
    return responses.paginated(rows, page=page, limit=limit, total=total)


@router.get("/{person_id}")
async def get_person(person_id: UUID) -> dict:
    row = await repository.get_person(person_id)
    if row is None:
        raise NotFoundError("Person not found.")
    return responses.ok(row)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_person(
    payload: schemas.CreatePersonRequest,
    _: dict = Depends(auth_dependencies.require_admin),
) -> dict:
    fields, contact = _split_payload(payload, partial=False)
    try:
        row = await repository.create_person(fields, contact)
    except asyncpg.ForeignKeyViolationError as exc:
        raise ValidationError("Company does not exist.") from exc

    logger.info("person_created id=%s", row["id"])
    return responses.ok(row, message="Person created successfully.")


@router.patch("/{person_id}")
async def update_person(
    person_id: UUID,
    payload: schemas.UpdatePersonRequest,
    _: dict = Depends(auth_dependencies.require_admin),
) -> dict:
    if await repository.get_person(person_id) is None:
        raise NotFoundError("Person not found.")

    fields, contact = _split_payload(payload, partial=True)
    try:
        row = await repository.update_person(person_id, fields, contact)
    except asyncpg.ForeignKeyViolationError as exc:
        raise ValidationError("Company does not exist.") from exc

    if row is None:
        raise NotFoundError("Person not found.")
    return responses.ok(row, message="Person updated successfully.")


@router.delete("/{person_id}")
async def delete_person(
    person_id: UUID,
    _: dict = Depends(auth_dependencies.require_admin),
) -> dict:
    if not await repository.delete_person(person_id):
        raise NotFoundError("Person not found.")
    logger.info("person_deleted id=%s", person_id)
    return responses.ok(message="Person deleted successfully.")
