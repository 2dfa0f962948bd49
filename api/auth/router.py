"""
Auth API endpoints (mounted under /api/v1/auth).
"""

from __future__ import annotations

import logging

import httpx
from fastapi import APIRouter, Cookie, Depends, Query, Request, Response, status
from fastapi.responses import RedirectResponse

from core import responses

from . import dependencies, google, schemas, security, service

logger = logging.getLogger(__name__)

router = APIRouter()

OAUTH_FAILED_PATH = "/?error=oauth_failed"


def _base_url(request: Request) -> str:
    return str(request.base_url).rstrip("/")


def _safe_next(path: str | None) -> str:
    # Only same-site relative paths; "//host" would be protocol-relative.
    raw = (path or "").strip()
    if not raw.startswith("/") or raw.startswith("//"):
        return "/"
    return raw


@router.post("/signup", status_code=status.HTTP_201_CREATED)
async def sign_up(payload: schemas.SignUpRequest, request: Request, response: Response) -> dict:
    result, token = await service.sign_up(payload, client=service.client_info(request))
    security.set_session_cookie(response, token)
    return responses.ok(result, message="Account created successfully.")


@router.post("/signin")
async def sign_in(payload: schemas.SignInRequest, request: Request, response: Response) -> dict:
    result, token = await service.sign_in(payload, client=service.client_info(request))
    security.set_session_cookie(response, token)
    return responses.ok(result, message="Signed in successfully.")


@router.post("/signout")
async def sign_out(
    response: Response,
    session_data: service.SessionData = Depends(dependencies.get_session_data),
) -> dict:
    await service.sign_out(session_data)
    security.clear_session_cookie(response)
    return responses.ok(message="Signed out successfully.")


@router.post("/refresh")
async def refresh(
    response: Response,
    session_data: service.SessionData = Depends(dependencies.get_session_data),
) -> dict:
    result, token = await service.refresh_session(session_data)
    security.set_session_cookie(response, token)
    return responses.ok(result, message="Session refreshed.")


@router.get("/session")
async def get_session(
    session_data: service.SessionData = Depends(dependencies.get_session_data),
) -> dict:
    return responses.ok(service.session_payload(session_data))


@router.get("/google")
async def google_sign_in(request: Request) -> RedirectResponse:
    try:
        state = security.build_oauth_state()
        url = google.authorization_url(base_url=_base_url(request), state=state)
    except google.GoogleOAuthError:
        logger.exception("google_oauth_start_failed")
        return RedirectResponse(OAUTH_FAILED_PATH, status_code=status.HTTP_302_FOUND)

    redirect = RedirectResponse(url, status_code=status.HTTP_302_FOUND)
    security.set_oauth_state_cookie(redirect, state)
    return redirect


@router.get("/callback/google")
async def google_callback(
    request: Request,
    code: str | None = Query(default=None),
    state: str | None = Query(default=None),
    expected_state: str | None = Cookie(default=None, alias=security.OAUTH_STATE_COOKIE_NAME),
) -> RedirectResponse:
    failed = RedirectResponse(OAUTH_FAILED_PATH, status_code=status.HTTP_302_FOUND)
    security.clear_oauth_state_cookie(failed)

    if not code:
        return failed
    if not state or not expected_state or state != expected_state:
        logger.warning("google_oauth_state_mismatch")
        return failed

    try:
        token = await service.sign_in_with_google(
            code,
            base_url=_base_url(request),
            client=service.client_info(request),
        )
    except (google.GoogleOAuthError, httpx.HTTPError):
        logger.exception("google_oauth_callback_failed")
        return failed

    redirect = RedirectResponse("/", status_code=status.HTTP_302_FOUND)
    security.clear_oauth_state_cookie(redirect)
    security.set_session_cookie(redirect, token)
    return redirect


@router.get("/callback")
async def auth_callback(next_path: str | None = Query(default=None, alias="next")) -> RedirectResponse:
    return RedirectResponse(_safe_next(next_path), status_code=status.HTTP_302_FOUND)
