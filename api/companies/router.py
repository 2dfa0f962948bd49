"""
Company API endpoints (mounted under /api/v1/companies).

Reads are public; writes require an admin session.
"""

from __future__ import annotations

import logging
from uuid import UUID

import asyncpg
from fastapi import APIRouter, Depends, Query, status

from auth import dependencies as auth_dependencies
from core import responses
from core.errors import NotFoundError, ValidationError

from . import options, repository, schemas

logger = logging.getLogger(__name__)

router = APIRouter()


def _split_payload(payload: schemas.CompanyFields, *, partial: bool) -> tuple[dict, dict | None]:
    data = payload.model_dump(exclude_unset=partial)
    contact = data.pop("contact_source", None)
    if contact is not None:
        # Only the contact fields the client sent are written.
        sent = payload.contact_source.model_fields_set
        contact = {key: value for key, value in contact.items() if key in sent}
        if "emails" in contact and contact["emails"] is None:
            contact["emails"] = []
    if "tech_stack" in data and data["tech_stack"] is None:
        data["tech_stack"] = []
    return data, contact


@router.get("")
async def list_companies(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: str | None = Query(default=None, max_length=200),
    accelerator_id: UUID | None = Query(default=None),
    sector: str | None = Query(default=None, max_length=200),
    tech_stack: str | None = Query(default=None, max_length=100),
) -> dict:
    rows, total = await repository.list_companies(
        offset=responses.page_offset(page, limit),
        limit=limit,
        search=(search or "").strip() or None,
        accelerator_id=accelerator_id,
        sector=(sector or "").strip() or None,
        tech_stack=(tech_stack or "").strip() or None,
    )
    return responses.paginated(rows, page=page, limit=limit, total=total)


@router.get("/options")
async def company_options() -> dict:
    return responses.ok(options.all_options())


@router.get("/{company_id}")
async def get_company(company_id: UUID) -> dict:
    row = await repository.get_company(company_id)
    if row is None:
        raise NotFoundError("Company not found.")
    return responses.ok(row)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_company(
    payload: schemas.CreateCompanyRequest,
    _: dict = Depends(auth_dependencies.require_admin),
) -> dict:
    fields, contact = _split_payload(payload, partial=False)
    try:
        row = await repository.create_company(fields, contact)
    except asyncpg.ForeignKeyViolationError as exc:
        raise ValidationError("Accelerator does not exist.") from exc

    logger.info("company_created id=%s", row["id"])
    return responses.ok(row, message="Company created successfully.")


@router.patch("/{company_id}")
async def update_company(
    company_id: UUID,
    payload: schemas.UpdateCompanyRequest,
    _: dict = Depends(auth_dependencies.require_admin),
) -> dict:
    if await repository.get_company(company_id) is None:
        raise NotFoundError("Company not found.")

    fields, contact = _split_payload(payload, partial=True)
    try:
        row = await repository.update_company(company_id, fields, contact)
    except asyncpg.ForeignKeyViolationError as exc:
        raise ValidationError("Accelerator does not exist.") from exc

    if row is None:
        raise NotFoundError("Company not found.")
    return responses.ok(row, message="Company updated successfully.")


@router.delete("/{company_id}")
async def delete_company(
    company_id: UUID,
    _: dict = Depends(auth_dependencies.require_admin),
) -> dict:
    if not await repository.delete_company(company_id):
        raise NotFoundError("Company not found.")
    logger.info("company_deleted id=%s", company_id)
    return responses.ok(message="Company deleted successfully.")
