"""
User management business logic.
"""

from __future__ import annotations

import logging
from uuid import UUID

from auth import repository as auth_repository
from auth.service import ClientInfo
from core import responses
from core.errors import ForbiddenError, NotFoundError, ValidationError

from . import repository, schemas

logger = logging.getLogger(__name__)


def _is_admin(user: dict) -> bool:
    return user.get("role") == "ADMIN"


async def _require_user(user_id: UUID) -> dict:
    row = await auth_repository.get_user_by_id(user_id)
    if row is None:
        raise NotFoundError("User not found.")
    return row


async def get_user(user_id: UUID, *, current_user: dict) -> dict:
    if str(current_user["id"]) != str(user_id) and not _is_admin(current_user):
        raise ForbiddenError("You can only view your own profile.")
    return await _require_user(user_id)


async def update_profile(current_user: dict, payload: schemas.UpdateProfileRequest) -> dict:
    fields = payload.model_dump(exclude_unset=True)
    if not fields:
        return current_user
    row = await repository.update_profile(current_user["id"], fields)
    if row is None:
        raise NotFoundError("User not found.")
    return row


async def list_users(
    *,
    page: int,
    limit: int,
    role: str | None,
    search: str | None,
) -> tuple[list[dict], int]:
    return await repository.list_users(
        offset=responses.page_offset(page, limit),
        limit=limit,
        role=role,
        search=(search or "").strip() or None,
    )


async def change_role(user_id: UUID, role: str, *, admin: dict, client: ClientInfo) -> dict:
    existing = await _require_user(user_id)
    row = await repository.update_role(user_id, role)
    if row is None:
        raise NotFoundError("User not found.")

    await auth_repository.insert_audit_log(
        user_id=admin["id"],
        action="UPDATE_ROLE",
        resource="USER",
        details={"target_user_id": str(user_id), "old_role": existing["role"], "new_role": role},
        ip_address=client.ip_address,
        user_agent=client.user_agent,
    )
    logger.info("user_role_updated user_id=%s old=%s new=%s", user_id, existing["role"], role)
    return row


async def delete_user(user_id: UUID, *, admin: dict, client: ClientInfo) -> None:
    # The audit row references the acting admin, who must outlive the delete.
    if str(admin["id"]) == str(user_id):
        raise ValidationError("You cannot delete your own account.")

    existing = await _require_user(user_id)
    if not await repository.delete_user(user_id):
        raise NotFoundError("User not found.")

    await auth_repository.insert_audit_log(
        user_id=admin["id"],
        action="DELETE_USER",
        resource="USER",
        details={"target_user_id": str(user_id), "email": existing["email"]},
        ip_address=client.ip_address,
        user_agent=client.user_agent,
    )
    logger.info("user_deleted user_id=%s", user_id)
