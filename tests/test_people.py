"""
Tests for the people endpoints and their inline contact details.
"""

from uuid import uuid4

import pytest

from conftest import utc_now
from people import repository

pytestmark = pytest.mark.asyncio


def make_person(**overrides) -> dict:
    now = utc_now()
    row = {
        "id": uuid4(),
        "full_name": "Ada Lovelace",
        "passion": None,
        "bio": None,
        "profile_url": None,
        "photo_url": None,
        "notes": [],
        "company_id": None,
        "created_at": now,
        "updated_at": now,
        "company": None,
        "contact": None,
    }
    row.update(overrides)
    return row


async def test_get_embeds_company_and_contact(client, monkeypatch):
    company_id = uuid4()
    person = make_person(
        company_id=company_id,
        company={"id": str(company_id), "name": "Analytical Engines"},
        contact={"email": "ada@example.com", "linkedin": None},
    )

    async def _get(person_id):
        return person

    monkeypatch.setattr(repository, "get_person", _get)

    resp = await client.get(f"/api/v1/people/{person['id']}")

    data = resp.json()["data"]
    assert data["company"]["name"] == "Analytical Engines"
    assert data["contact"]["email"] == "ada@example.com"


async def test_list_search(client, monkeypatch):
    captured = {}

    async def _list(**kwargs):
        captured.update(kwargs)
        return [], 0

    monkeypatch.setattr(repository, "list_people", _list)

    resp = await client.get("/api/v1/people", params={"search": "ada"})

    assert resp.json()["pagination"]["total"] == 0
    assert captured["search"] == "ada"
    assert captured["company_id"] is None


async def test_create_with_contact(client, admin_user, monkeypatch):
    captured = {}

    async def _create(fields, contact=None):
        captured["fields"] = fields
        captured["contact"] = contact
        return make_person(**fields, contact=contact)

    monkeypatch.setattr(repository, "create_person", _create)

    resp = await client.post(
        "/api/v1/people",
        json={
            "full_name": "Ada Lovelace",
            "profile_url": "",
            "company_id": "",
            "contact": {"email": "ada@example.com", "phone_number": ""},
        },
    )

    assert resp.status_code == 201
    assert captured["fields"]["profile_url"] is None
    assert captured["fields"]["company_id"] is None
    assert captured["fields"]["notes"] == []
    assert captured["contact"] == {"email": "ada@example.com", "phone_number": None}


async def test_create_rejects_bad_contact_email(client, admin_user):
    resp = await client.post(
        "/api/v1/people",
        json={"full_name": "Ada Lovelace", "contact": {"email": "not-an-email"}},
    )
    assert resp.status_code == 400


async def test_create_requires_admin(client, regular_user):
    resp = await client.post("/api/v1/people", json={"full_name": "Ada Lovelace"})
    assert resp.status_code == 403


async def test_update_with_contact(client, admin_user, monkeypatch):
    existing = make_person()
    captured = {}

    async def _get(person_id):
        return existing

    async def _update(person_id, fields, contact=None):
        captured["fields"] = fields
        captured["contact"] = contact
        return existing

    monkeypatch.setattr(repository, "get_person", _get)
    monkeypatch.setattr(repository, "update_person", _update)

    resp = await client.patch(
        f"/api/v1/people/{existing['id']}",
        json={"notes": ["met at demo day"], "contact": {"twitter": "@ada"}},
    )

    assert resp.status_code == 200
    assert captured["fields"] == {"notes": ["met at demo day"]}
    assert captured["contact"] == {"twitter": "@ada"}


async def test_delete(client, admin_user, monkeypatch):
    async def _delete(person_id):
        return True

    monkeypatch.setattr(repository, "delete_person", _delete)

    resp = await client.delete(f"/api/v1/people/{uuid4()}")
    assert resp.status_code == 200


async def test_update_rejects_null_full_name(client, admin_user):
    resp = await client.patch(f"/api/v1/people/{uuid4()}", json={"full_name": None})
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_create_rejects_malformed_profile_url(client, admin_user):
    resp = await client.post("/api/v1/people", json={"full_name": "Ada Lovelace", "profile_url": "http://exa mple.com"})
    assert resp.status_code == 400
