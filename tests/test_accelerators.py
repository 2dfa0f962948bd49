"""
Tests for the accelerator endpoints: public reads, admin-only writes.
"""

from uuid import uuid4

import pytest

from accelerators import repository
from conftest import utc_now

pytestmark = pytest.mark.asyncio


def make_accelerator(**overrides) -> dict:
    now = utc_now()
    row = {
        "id": uuid4(),
        "title": "Launchpad",
        "description": "Early stage program.",
        "why_it_stands_out": "Hands-on mentors.",
        "average_funding": "$100K",
        "funded_companies": 40,
        "founded_year": 2015,
        "country": "Germany",
        "type": "Global",
        "website": None,
        "logo_url": None,
        "created_at": now,
        "updated_at": now,
    }
    row.update(overrides)
    return row


VALID_BODY = {
    "title": "Launchpad",
    "description": "Early stage program.",
    "why_it_stands_out": "Hands-on mentors.",
}


class TestReads:
    async def test_list_is_public_and_paginated(self, client, monkeypatch):
        captured = {}

        async def _list(**kwargs):
            captured.update(kwargs)
            return [make_accelerator(), make_accelerator(title="Second")], 45

        monkeypatch.setattr(repository, "list_accelerators", _list)

        resp = await client.get("/api/v1/accelerators", params={"page": 2, "search": " seed ", "country": "DE"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert len(body["data"]) == 2
        assert body["pagination"] == {
            "page": 2,
            "limit": 20,
            "total": 45,
            "total_pages": 3,
            "has_next": True,
            "has_prev": True,
        }
        assert captured["offset"] == 20
        assert captured["search"] == "seed"
        assert captured["country"] == "DE"
        assert captured["accelerator_type"] is None

    async def test_get_missing_is_404(self, client, monkeypatch):
        async def _get(accelerator_id):
            return None

        monkeypatch.setattr(repository, "get_accelerator", _get)

        resp = await client.get(f"/api/v1/accelerators/{uuid4()}")

        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "NOT_FOUND"

    async def test_get_with_malformed_id(self, client):
        resp = await client.get("/api/v1/accelerators/not-a-uuid")
        assert resp.status_code == 400


class TestWrites:
    async def test_create_requires_session(self, client, anonymous):
        resp = await client.post("/api/v1/accelerators", json=VALID_BODY)
        assert resp.status_code == 401

    async def test_create_requires_admin(self, client, regular_user):
        resp = await client.post("/api/v1/accelerators", json=VALID_BODY)
        assert resp.status_code == 403
        assert resp.json()["error"]["code"] == "FORBIDDEN"

    async def test_create_stores_empty_urls_as_null(self, client, admin_user, monkeypatch):
        captured = {}

        async def _create(fields):
            captured.update(fields)
            return make_accelerator(**fields)

        monkeypatch.setattr(repository, "create_accelerator", _create)

        resp = await client.post(
            "/api/v1/accelerators",
            json={**VALID_BODY, "website": "", "logo_url": "https://cdn.example/logo.png", "founded_year": 2010},
        )

        assert resp.status_code == 201
        assert captured["website"] is None
        assert captured["logo_url"] == "https://cdn.example/logo.png"
        assert resp.json()["data"]["founded_year"] == 2010

    @pytest.mark.parametrize(
        "patch",
        [
            {"founded_year": 1899},
            {"founded_year": 9999},
            {"funded_companies": 0},
            {"website": "ftp://example.com"},
            {"website": "http://exa mple.com"},
            {"logo_url": "https://:80"},
            {"title": ""},
        ],
    )
    async def test_create_validation(self, client, admin_user, patch):
        resp = await client.post("/api/v1/accelerators", json={**VALID_BODY, **patch})
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "VALIDATION_ERROR"

    async def test_update_only_sends_given_fields(self, client, admin_user, monkeypatch):
        existing = make_accelerator()
        captured = {}

        async def _get(accelerator_id):
            return existing

        async def _update(accelerator_id, fields):
            captured.update(fields)
            return {**existing, **fields}

        monkeypatch.setattr(repository, "get_accelerator", _get)
        monkeypatch.setattr(repository, "update_accelerator", _update)

        resp = await client.patch(f"/api/v1/accelerators/{existing['id']}", json={"country": "France"})

        assert resp.status_code == 200
        assert captured == {"country": "France"}
        assert resp.json()["data"]["country"] == "France"

    async def test_update_missing_is_404(self, client, admin_user, monkeypatch):
        async def _get(accelerator_id):
            return None

        monkeypatch.setattr(repository, "get_accelerator", _get)

        resp = await client.patch(f"/api/v1/accelerators/{uuid4()}", json={"country": "France"})
        assert resp.status_code == 404

    async def test_delete(self, client, admin_user, monkeypatch):
        async def _delete(accelerator_id):
            return True

        monkeypatch.setattr(repository, "delete_accelerator", _delete)

        resp = await client.delete(f"/api/v1/accelerators/{uuid4()}")
        assert resp.status_code == 200
        assert resp.json()["success"] is True

    async def test_delete_missing_is_404(self, client, admin_user, monkeypatch):
        async def _delete(accelerator_id):
            return False

        monkeypatch.setattr(repository, "delete_accelerator", _delete)

        resp = await client.delete(f"/api/v1/accelerators/{uuid4()}")
        assert resp.status_code == 404

    @pytest.mark.parametrize("field", ["title", "description", "why_it_stands_out"])
    async def test_update_rejects_null_for_required_field(self, client, admin_user, monkeypatch, field):
        called = []

        async def _update(accelerator_id, fields):
            called.append(fields)

        monkeypatch.setattr(repository, "update_accelerator", _update)

        resp = await client.patch(f"/api/v1/accelerators/{uuid4()}", json={field: None})

        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "VALIDATION_ERROR"
        assert called == []
