"""
Email API endpoints (mounted under /api/v1/emails). Admin only.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from auth import dependencies as auth_dependencies
from auth import service as auth_service
from core import responses
from core.errors import NotFoundError

from . import repository, schemas, service

router = APIRouter()


@router.post("/send")
async def send_email(
    payload: schemas.SendEmailRequest,
    request: Request,
    admin: dict = Depends(auth_dependencies.require_admin),
) -> JSONResponse:
    row, delivered = await service.send(payload, sender=admin, client=auth_service.client_info(request))

    # A failed delivery still returns the stored record.
    body = responses.ok(row, message="Email sent successfully." if delivered else "Failed to send email.")
    body["success"] = delivered
    return JSONResponse(
        status_code=status.HTTP_200_OK if delivered else status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=jsonable_encoder(body),
    )


@router.get("")
async def list_emails(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    email_status: schemas.EmailStatus | None = Query(default=None, alias="status"),
    _: dict = Depends(auth_dependencies.require_admin),
) -> dict:
    rows, total = await repository.list_emails(
        offset=responses.page_offset(page, limit),
        limit=limit,
        status=email_status,
    )
    return responses.paginated(rows, page=page, limit=limit, total=total)


@router.get("/{email_id}")
async def get_email(
    email_id: UUID,
    _: dict = Depends(auth_dependencies.require_admin),
) -> dict:
    row = await repository.get_email(email_id)
    if row is None:
        raise NotFoundError("Email not found.")
    return responses.ok(row)
