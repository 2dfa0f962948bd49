"""
Auth dependencies for protected FastAPI routes.
"""

from __future__ import annotations

from fastapi import Cookie, Depends

from core.errors import ForbiddenError, UnauthorizedError

from . import security, service


async def get_session_data(
    session_token: str | None = Cookie(default=None, alias=security.SESSION_COOKIE_NAME),
) -> service.SessionData:
    return await service.get_current_session(session_token)


async def get_current_user(
    session_data: service.SessionData = Depends(get_session_data),
) -> dict:
    if not session_data.is_authenticated:
        raise UnauthorizedError("Authentication required.")
    return session_data.user


async def require_admin(current_user: dict = Depends(get_current_user)) -> dict:
    if current_user.get("role") != "ADMIN":
        raise ForbiddenError("Admin access required.")
    return current_user
