"""
User API endpoints.

- `router` is mounted under /api/v1/users (profile, lookup, delete)
- `admin_router` is mounted under /api/v1/admin (user listing, role changes)
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request

from auth import dependencies as auth_dependencies
from auth import service as auth_service
from auth.schemas import Role
from core import responses

from . import schemas, service

router = APIRouter()
admin_router = APIRouter()


@router.get("/me")
async def get_me(current_user: dict = Depends(auth_dependencies.get_current_user)) -> dict:
    return responses.ok(auth_service.to_user_response(current_user))


@router.patch("/me")
async def update_me(
    payload: schemas.UpdateProfileRequest,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    row = await service.update_profile(current_user, payload)
    return responses.ok(auth_service.to_user_response(row), message="Profile updated successfully.")


@router.get("/{user_id}")
async def get_user(
    user_id: UUID,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    row = await service.get_user(user_id, current_user=current_user)
    return responses.ok(auth_service.to_user_response(row))


@router.delete("/{user_id}")
async def delete_user(
    user_id: UUID,
    request: Request,
    admin: dict = Depends(auth_dependencies.require_admin),
) -> dict:
    await service.delete_user(user_id, admin=admin, client=auth_service.client_info(request))
    return responses.ok(message="User deleted successfully.")


@admin_router.get("/users")
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    role: Role | None = Query(default=None),
    search: str | None = Query(default=None, max_length=200),
    _: dict = Depends(auth_dependencies.require_admin),
) -> dict:
    rows, total = await service.list_users(page=page, limit=limit, role=role, search=search)
    items = [auth_service.to_user_response(row) for row in rows]
    return responses.paginated(items, page=page, limit=limit, total=total)


@admin_router.patch("/users/{user_id}/role")
async def update_role(
    user_id: UUID,
    payload: schemas.UpdateRoleRequest,
    request: Request,
    admin: dict = Depends(auth_dependencies.require_admin),
) -> dict:
    row = await service.change_role(
        user_id,
        payload.role,
        admin=admin,
        client=auth_service.client_info(request),
    )
    return responses.ok(auth_service.to_user_response(row), message="User role updated successfully.")
