import os
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator
from uuid import uuid4

# Settings are read lazily, but set them before the app is imported anyway.
os.environ["SESSION_SECRET"] = "test-session-secret"
os.environ["APP_ENV"] = "test"
os.environ.pop("SMTP_HOST", None)

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from auth import dependencies as auth_dependencies
from auth import service as auth_service
from main import app


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def make_user(**overrides) -> dict:
    now = utc_now()
    row = {
        "id": uuid4(),
        "email": "user@example.com",
        "password_hash": None,
        "name": "Test User",
        "image": None,
        "avatar_url": None,
        "role": "USER",
        "auth_provider": "EMAIL",
        "email_verified": now,
        "metadata": None,
        "last_login_at": None,
        "created_at": now,
        "updated_at": now,
    }
    row.update(overrides)
    return row


def make_session(user_id, **overrides) -> dict:
    now = utc_now()
    row = {
        "id": uuid4(),
        "session_token": "opaque",
        "user_id": user_id,
        "expires": now + timedelta(days=7),
        "ip_address": None,
        "user_agent": None,
        "last_active_at": now,
        "created_at": now,
    }
    row.update(overrides)
    return row


def sign_in_as(user: dict) -> None:
    session_data = auth_service.SessionData(user=user, session=make_session(user["id"]))

    async def _override() -> auth_service.SessionData:
        return session_data

    app.dependency_overrides[auth_dependencies.get_session_data] = _override


@pytest_asyncio.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """In-process client; the lifespan (DB pool) is not started."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def anonymous() -> None:
    async def _override() -> auth_service.SessionData:
        return auth_service.SessionData()

    app.dependency_overrides[auth_dependencies.get_session_data] = _override


@pytest.fixture
def regular_user() -> dict:
    user = make_user(email="member@example.com", name="Member")
    sign_in_as(user)
    return user


@pytest.fixture
def admin_user() -> dict:
    user = make_user(email="admin@example.com", name="Admin", role="ADMIN")
    sign_in_as(user)
    return user
