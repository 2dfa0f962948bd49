"""
Tests for the session lifecycle and the /api/v1/auth endpoints.

Repository functions are replaced with in-memory fakes; no database is used.
"""

from datetime import timedelta

import bcrypt
import pytest

from auth import google, repository, security, service
from conftest import make_session, make_user, utc_now

pytestmark = pytest.mark.asyncio


class Recorder:
    def __init__(self):
        self.calls = []

    def __call__(self, name, result=None):
        async def _fake(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            return result

        return _fake

    def names(self):
        return [name for name, _, _ in self.calls]

    def kwargs_of(self, name):
        return [kwargs for n, _, kwargs in self.calls if n == name]


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture(autouse=True)
def fast_bcrypt(monkeypatch):
    monkeypatch.setattr(security, "BCRYPT_ROUNDS", 4)


def _token_for(user, session):
    return security.build_session_token(
        user_id=str(user["id"]),
        email=user["email"],
        role=user["role"],
        session_id=str(session["id"]),
    )


class TestGetCurrentSession:
    async def test_no_token_is_anonymous(self, monkeypatch, recorder):
        monkeypatch.setattr(repository, "get_session_by_id", recorder("get_session_by_id"))
        data = await service.get_current_session(None)
        assert data.is_authenticated is False
        assert recorder.calls == []

    async def test_valid_session_is_resolved_and_touched(self, monkeypatch, recorder):
        user = make_user()
        session = make_session(user["id"])
        monkeypatch.setattr(repository, "get_session_by_id", recorder("get_session_by_id", session))
        monkeypatch.setattr(repository, "get_user_by_id", recorder("get_user_by_id", user))
        monkeypatch.setattr(repository, "touch_session", recorder("touch_session"))

        data = await service.get_current_session(_token_for(user, session))

        assert data.is_authenticated is True
        assert data.user["id"] == user["id"]
        assert data.session["id"] == session["id"]
        assert "touch_session" in recorder.names()

    async def test_expired_session_is_rejected(self, monkeypatch, recorder):
        user = make_user()
        session = make_session(user["id"], expires=utc_now() - timedelta(seconds=1))
        monkeypatch.setattr(repository, "get_session_by_id", recorder("get_session_by_id", session))
        monkeypatch.setattr(repository, "get_user_by_id", recorder("get_user_by_id", user))
        monkeypatch.setattr(repository, "touch_session", recorder("touch_session"))

        data = await service.get_current_session(_token_for(user, session))

        assert data.is_authenticated is False
        assert "touch_session" not in recorder.names()

    async def test_deleted_session_is_rejected(self, monkeypatch, recorder):
        user = make_user()
        session = make_session(user["id"])
        monkeypatch.setattr(repository, "get_session_by_id", recorder("get_session_by_id", None))

        data = await service.get_current_session(_token_for(user, session))
        assert data.is_authenticated is False

    async def test_session_of_another_user_is_rejected(self, monkeypatch, recorder):
        user = make_user()
        other = make_user(email="other@example.com")
        session = make_session(other["id"])
        monkeypatch.setattr(repository, "get_session_by_id", recorder("get_session_by_id", session))
        monkeypatch.setattr(repository, "get_user_by_id", recorder("get_user_by_id", other))

        data = await service.get_current_session(_token_for(user, session))
        assert data.is_authenticated is False

    async def test_invalid_token_is_anonymous(self):
        data = await service.get_current_session("garbage")
        assert data.is_authenticated is False


class TestSignIn:
    async def test_unknown_email(self, client, monkeypatch, recorder):
        monkeypatch.setattr(repository, "get_user_by_email", recorder("get_user_by_email", None))

        resp = await client.post("/api/v1/auth/signin", json={"email": "nobody@example.com", "password": "password123"})

        assert resp.status_code == 401
        body = resp.json()
        assert body["success"] is False
        assert body["error"]["code"] == "INVALID_CREDENTIALS"

    async def test_oauth_only_user_cannot_use_password(self, client, monkeypatch, recorder):
        user = make_user(auth_provider="GOOGLE", password_hash=None)
        monkeypatch.setattr(repository, "get_user_by_email", recorder("get_user_by_email", user))

        resp = await client.post("/api/v1/auth/signin", json={"email": user["email"], "password": "password123"})

        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "INVALID_CREDENTIALS"

    async def test_wrong_password(self, client, monkeypatch, recorder):
        hashed = bcrypt.hashpw(b"password123", bcrypt.gensalt(rounds=4)).decode()
        user = make_user(password_hash=hashed)
        monkeypatch.setattr(repository, "get_user_by_email", recorder("get_user_by_email", user))

        resp = await client.post("/api/v1/auth/signin", json={"email": user["email"], "password": "not-the-password"})

        assert resp.status_code == 401

    async def test_success_sets_cookie_and_audits(self, client, monkeypatch, recorder):
        hashed = bcrypt.hashpw(b"password123", bcrypt.gensalt(rounds=4)).decode()
        user = make_user(password_hash=hashed)
        session = make_session(user["id"])
        monkeypatch.setattr(repository, "get_user_by_email", recorder("get_user_by_email", user))
        monkeypatch.setattr(repository, "mark_user_login", recorder("mark_user_login", user))
        monkeypatch.setattr(repository, "create_session", recorder("create_session", session))
        monkeypatch.setattr(repository, "insert_audit_log", recorder("insert_audit_log"))

        resp = await client.post(
            "/api/v1/auth/signin",
            json={"email": user["email"], "password": "password123"},
            headers={"user-agent": "pytest", "x-forwarded-for": "10.0.0.1, 10.0.0.2"},
        )

        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["data"]["user"]["email"] == user["email"]
        assert "password_hash" not in body["data"]["user"]
        assert body["data"]["session"]["id"] == str(session["id"])

        token = body["data"]["access_token"]
        assert security.decode_session_token(token)["sid"] == str(session["id"])
        assert resp.headers["set-cookie"].startswith(f"session={token}")

        (session_kwargs,) = recorder.kwargs_of("create_session")
        assert session_kwargs["ip_address"] == "10.0.0.1"
        assert session_kwargs["user_agent"] == "pytest"
        (audit,) = recorder.kwargs_of("insert_audit_log")
        assert audit["action"] == "LOGIN"

    async def test_short_password_is_validation_error(self, client):
        resp = await client.post("/api/v1/auth/signin", json={"email": "a@example.com", "password": "short"})
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "VALIDATION_ERROR"


class TestSignUp:
    async def test_creates_user_and_session(self, client, monkeypatch, recorder):
        user = make_user(email="new@example.com", name="New Person")
        session = make_session(user["id"])
        monkeypatch.setattr(repository, "get_user_by_email", recorder("get_user_by_email", None))
        monkeypatch.setattr(repository, "create_user", recorder("create_user", user))
        monkeypatch.setattr(repository, "create_session", recorder("create_session", session))
        monkeypatch.setattr(repository, "insert_audit_log", recorder("insert_audit_log"))

        resp = await client.post(
            "/api/v1/auth/signup",
            json={"email": "new@example.com", "password": "password123", "name": "New Person"},
        )

        assert resp.status_code == 201
        assert resp.json()["data"]["user"]["email"] == "new@example.com"
        assert "session=" in resp.headers["set-cookie"]

        (created,) = recorder.kwargs_of("create_user")
        assert created["auth_provider"] == "EMAIL"
        assert created["password_hash"] != "password123"
        assert bcrypt.checkpw(b"password123", created["password_hash"].encode())
        (audit,) = recorder.kwargs_of("insert_audit_log")
        assert audit["action"] == "CREATE_USER"

    async def test_duplicate_email(self, client, monkeypatch, recorder):
        monkeypatch.setattr(repository, "get_user_by_email", recorder("get_user_by_email", make_user()))

        resp = await client.post("/api/v1/auth/signup", json={"email": "user@example.com", "password": "password123"})

        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "ALREADY_EXISTS"

    async def test_invalid_email(self, client):
        resp = await client.post("/api/v1/auth/signup", json={"email": "not-an-email", "password": "password123"})
        assert resp.status_code == 400

    async def test_name_too_short(self, client):
        resp = await client.post(
            "/api/v1/auth/signup",
            json={"email": "a@example.com", "password": "password123", "name": "A"},
        )
        assert resp.status_code == 400


class TestSessionEndpoints:
    async def test_session_when_signed_out(self, client, anonymous):
        resp = await client.get("/api/v1/auth/session")
        assert resp.status_code == 200
        assert resp.json()["data"] == {"user": None, "session": None}

    async def test_session_when_signed_in(self, client, regular_user):
        resp = await client.get("/api/v1/auth/session")
        data = resp.json()["data"]
        assert data["user"]["id"] == str(regular_user["id"])
        assert data["session"]["user_id"] == str(regular_user["id"])

    async def test_signout_deletes_session_and_cookie(self, client, regular_user, monkeypatch, recorder):
        monkeypatch.setattr(repository, "delete_session", recorder("delete_session", True))

        resp = await client.post("/api/v1/auth/signout")

        assert resp.status_code == 200
        assert recorder.names() == ["delete_session"]
        assert "Max-Age=0" in resp.headers["set-cookie"]

    async def test_signout_without_session_still_succeeds(self, client, anonymous, monkeypatch, recorder):
        monkeypatch.setattr(repository, "delete_session", recorder("delete_session", True))

        resp = await client.post("/api/v1/auth/signout")

        assert resp.status_code == 200
        assert recorder.calls == []

    async def test_refresh_requires_session(self, client, anonymous):
        resp = await client.post("/api/v1/auth/refresh")
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "INVALID_SESSION"

    async def test_refresh_extends_expiry(self, client, regular_user, monkeypatch, recorder):
        extended = make_session(regular_user["id"], expires=utc_now() + timedelta(days=7))
        monkeypatch.setattr(repository, "extend_session", recorder("extend_session", extended))

        resp = await client.post("/api/v1/auth/refresh")

        assert resp.status_code == 200
        assert "session=" in resp.headers["set-cookie"]
        (kwargs,) = recorder.kwargs_of("extend_session")
        assert kwargs["expires"] > utc_now() + timedelta(days=6)


class TestRedirects:
    async def test_callback_follows_relative_next(self, client):
        resp = await client.get("/api/v1/auth/callback", params={"next": "/companies?page=2"})
        assert resp.status_code == 302
        assert resp.headers["location"] == "/companies?page=2"

    @pytest.mark.parametrize("target", ["https://evil.example", "//evil.example", ""])
    async def test_callback_rejects_external_next(self, client, target):
        resp = await client.get("/api/v1/auth/callback", params={"next": target})
        assert resp.headers["location"] == "/"

    async def test_google_start_redirects_with_state(self, client, monkeypatch):
        monkeypatch.setenv("GOOGLE_CLIENT_ID", "client-123")

        resp = await client.get("/api/v1/auth/google")

        assert resp.status_code == 302
        location = resp.headers["location"]
        assert location.startswith(google.AUTHORIZE_URL)
        assert "client_id=client-123" in location
        assert "response_type=code" in location
        assert "callback%2Fgoogle" in location
        assert "oauth_state=" in resp.headers["set-cookie"]

    async def test_google_start_without_client_id(self, client, monkeypatch):
        monkeypatch.delenv("GOOGLE_CLIENT_ID", raising=False)
        resp = await client.get("/api/v1/auth/google")
        assert resp.headers["location"] == "/?error=oauth_failed"

    async def test_google_callback_without_code(self, client):
        resp = await client.get("/api/v1/auth/callback/google")
        assert resp.headers["location"] == "/?error=oauth_failed"

    async def test_google_callback_state_mismatch(self, client, monkeypatch, recorder):
        monkeypatch.setattr(service, "sign_in_with_google", recorder("sign_in_with_google", "tok"))

        resp = await client.get(
            "/api/v1/auth/callback/google",
            params={"code": "abc", "state": "one"},
            headers={"cookie": "oauth_state=two"},
        )

        assert resp.headers["location"] == "/?error=oauth_failed"
        assert recorder.calls == []

    async def test_google_callback_success_sets_session(self, client, monkeypatch, recorder):
        monkeypatch.setattr(service, "sign_in_with_google", recorder("sign_in_with_google", "tok"))

        resp = await client.get(
            "/api/v1/auth/callback/google",
            params={"code": "abc", "state": "s1"},
            headers={"cookie": "oauth_state=s1"},
        )

        assert resp.status_code == 302
        assert resp.headers["location"] == "/"
        cookies = resp.headers.get_list("set-cookie")
        assert any(c.startswith("session=tok") for c in cookies)

    async def test_google_callback_upstream_failure(self, client, monkeypatch):
        async def _fail(*args, **kwargs):
            raise google.GoogleOAuthError("token exchange failed")

        monkeypatch.setattr(service, "sign_in_with_google", _fail)

        resp = await client.get(
            "/api/v1/auth/callback/google",
            params={"code": "abc", "state": "s1"},
            headers={"cookie": "oauth_state=s1"},
        )

        assert resp.headers["location"] == "/?error=oauth_failed"


class TestGoogleSignIn:
    async def test_new_user_is_created_and_linked(self, monkeypatch, recorder):
        user = make_user(email="g@example.com", auth_provider="GOOGLE")
        session = make_session(user["id"])

        async def _exchange(code, *, base_url):
            return google.GoogleTokens("access", "refresh", 3600, "Bearer", "openid", "id-token")

        async def _profile(access_token):
            return google.GoogleProfile("g-42", "g@example.com", "G User", "https://img.example/p.png")

        monkeypatch.setattr(google, "exchange_code", _exchange)
        monkeypatch.setattr(google, "fetch_profile", _profile)
        monkeypatch.setattr(repository, "get_user_by_email", recorder("get_user_by_email", None))
        monkeypatch.setattr(repository, "create_user", recorder("create_user", user))
        monkeypatch.setattr(repository, "upsert_account", recorder("upsert_account", {}))
        monkeypatch.setattr(repository, "create_session", recorder("create_session", session))
        monkeypatch.setattr(repository, "insert_audit_log", recorder("insert_audit_log"))

        token = await service.sign_in_with_google("code", base_url="http://testserver", client=service.ClientInfo())

        assert security.decode_session_token(token)["sid"] == str(session["id"])
        (created,) = recorder.kwargs_of("create_user")
        assert created["auth_provider"] == "GOOGLE"
        assert created["password_hash"] is None
        (account,) = recorder.kwargs_of("upsert_account")
        assert account["provider"] == "google"
        assert account["provider_account_id"] == "g-42"
        assert account["expires_at"] > security.now_epoch_s()
        actions = [kwargs["action"] for kwargs in recorder.kwargs_of("insert_audit_log")]
        assert actions == ["CREATE_USER", "LOGIN"]

    async def test_existing_user_profile_is_refreshed(self, monkeypatch, recorder):
        user = make_user(email="g@example.com")
        session = make_session(user["id"])

        async def _exchange(code, *, base_url):
            return google.GoogleTokens("access", None, None, None, None, None)

        async def _profile(access_token):
            return google.GoogleProfile("g-42", "g@example.com", "New Name", None)

        monkeypatch.setattr(google, "exchange_code", _exchange)
        monkeypatch.setattr(google, "fetch_profile", _profile)
        monkeypatch.setattr(repository, "get_user_by_email", recorder("get_user_by_email", user))
        monkeypatch.setattr(repository, "update_oauth_profile", recorder("update_oauth_profile", user))
        monkeypatch.setattr(repository, "upsert_account", recorder("upsert_account", {}))
        monkeypatch.setattr(repository, "create_session", recorder("create_session", session))
        monkeypatch.setattr(repository, "insert_audit_log", recorder("insert_audit_log"))

        await service.sign_in_with_google("code", base_url="http://testserver", client=service.ClientInfo())

        assert "create_user" not in recorder.names()
        (update,) = recorder.kwargs_of("update_oauth_profile")
        assert update["name"] == "New Name"
        (account,) = recorder.kwargs_of("upsert_account")
        assert account["expires_at"] is None
