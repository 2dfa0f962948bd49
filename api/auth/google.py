"""
Google OAuth 2.0 helpers (authorization-code flow).

Used endpoints:
- GET  https://accounts.google.com/o/oauth2/v2/auth      (browser redirect)
- POST https://oauth2.googleapis.com/token               -> access/refresh/id tokens
- GET  https://www.googleapis.com/oauth2/v2/userinfo     -> {"id", "email", "name", "picture"}
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from urllib.parse import urlencode

import httpx

from core import config

AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"
SCOPE = "openid email profile"
CALLBACK_PATH = "/api/v1/auth/callback/google"


class GoogleOAuthError(RuntimeError):
    pass


@dataclass(frozen=True)
class GoogleTokens:
    access_token: str
    refresh_token: str | None
    expires_in: int | None
    token_type: str | None
    scope: str | None
    id_token: str | None


@dataclass(frozen=True)
class GoogleProfile:
    id: str
    email: str
    name: str | None
    picture: str | None


def client_id() -> str:
    return config.env_str("GOOGLE_CLIENT_ID", "")


def client_secret() -> str:
    return config.env_str("GOOGLE_CLIENT_SECRET", "")


def redirect_uri(base_url: str) -> str:
    return base_url.rstrip("/") + CALLBACK_PATH


def authorization_url(*, base_url: str, state: str) -> str:
    if not client_id():
        raise GoogleOAuthError("GOOGLE_CLIENT_ID is not set.")
    params = {
        "client_id": client_id(),
        "redirect_uri": redirect_uri(base_url),
        "response_type": "code",
        "scope": SCOPE,
        "access_type": "offline",
        "prompt": "select_account",
        "state": state,
    }
    return f"{AUTHORIZE_URL}?{urlencode(params)}"


async def exchange_code(
    code: str,
    *,
    base_url: str,
    transport: httpx.AsyncBaseTransport | None = None,
) -> GoogleTokens:
    async with httpx.AsyncClient(timeout=30.0, transport=transport) as client:
        resp = await client.post(
            TOKEN_URL,
            data={
                "code": code,
                "client_id": client_id(),
                "client_secret": client_secret(),
                "redirect_uri": redirect_uri(base_url),
                "grant_type": "authorization_code",
            },
        )

    if resp.status_code != 200:
        raise GoogleOAuthError(f"Google token exchange failed: {resp.status_code} {resp.text[:300]}")

    data: dict[str, Any] = resp.json()
    access_token = str(data.get("access_token") or "").strip()
    if not access_token:
        raise GoogleOAuthError("Google returned no access token.")

    expires_in = data.get("expires_in")
    return GoogleTokens(
        access_token=access_token,
        refresh_token=data.get("refresh_token"),
        expires_in=int(expires_in) if expires_in is not None else None,
        token_type=data.get("token_type"),
        scope=data.get("scope"),
        id_token=data.get("id_token"),
    )


async def fetch_profile(
    access_token: str,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> GoogleProfile:
    async with httpx.AsyncClient(timeout=30.0, transport=transport) as client:
        resp = await client.get(USERINFO_URL, headers={"Authorization": f"Bearer {access_token}"})

    if resp.status_code != 200:
        raise GoogleOAuthError(f"Google userinfo request failed: {resp.status_code} {resp.text[:300]}")

    data: dict[str, Any] = resp.json()
    account_id = str(data.get("id") or "").strip()
    email = str(data.get("email") or "").strip()
    if not account_id or not email:
        raise GoogleOAuthError("Google profile is missing id or email.")

    return GoogleProfile(
        id=account_id,
        email=email,
        name=data.get("name"),
        picture=data.get("picture"),
    )
