"""Tests for the /auth session lifecycle endpoints."""

import pytest
from fastapi.testclient import TestClient

from cupi.app.session import AUTH_FLOW_COOKIE, USER_ID_COOKIE, decode_cookie
from tests.app.conftest import deleted_cookies


@pytest.fixture
def sent_notifications(monkeypatch) -> list[str]:
    sent: list[str] = []

    async def fake_notify(user_name: str) -> bool:
        sent.append(user_name)
        return True

    monkeypatch.setattr("cupi.integrations.discord.notify_user_joined", fake_notify)
    return sent


class TestCurrentIdentity:
    def test_anonymous(self, client: TestClient, record_store):
        response = client.get("/auth/me")

        assert response.status_code == 200
        assert response.json() == {"kind": "anonymous"}

    def test_pending(self, session_client, record_store, discord_user_factory):
        client = session_client(discord_user=discord_user_factory.make())

        response = client.get("/auth/me")

        data = response.json()
        assert data["kind"] == "pending"
        assert data["id"] == "pending"
        assert data["role"] == "Member"
        assert data["email"] == "external_42@external.user"
        assert data["workspace_id"] is None

    def test_registered(self, session_client, record_store):
        user = record_store.create_user("42", "jane@example.com", "Jane Doe", None)
        client = session_client(user_id=user.id)

        response = client.get("/auth/me")

        data = response.json()
        assert data["kind"] == "registered"
        assert data["id"] == str(user.id)
        assert data["role"] == "Admin"
        assert data["memberships"] == []


class TestAuthFlow:
    def test_stores_flow_and_redirects_to_login(self, client: TestClient):
        response = client.post(
            "/auth/flow",
            json={"mode": "join", "value": " abc234 ", "username": "Jane Doe"},
            follow_redirects=False,
        )

        assert response.status_code == 303
        assert response.headers["location"] == "http://api.test/discord/login"
        flow = decode_cookie(AUTH_FLOW_COOKIE, response.cookies[AUTH_FLOW_COOKIE])
        assert flow["mode"] == "join"
        assert flow["value"] == "ABC234"
        assert flow["username"] == "Jane Doe"
        assert flow["nonce"]

    def test_rejects_unknown_mode(self, client: TestClient):
        response = client.post(
            "/auth/flow", json={"mode": "steal", "value": "x"}, follow_redirects=False
        )
        assert response.status_code == 422

    def test_rejects_blank_value(self, client: TestClient):
        response = client.post(
            "/auth/flow", json={"mode": "create", "value": "  "}, follow_redirects=False
        )
        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "invalid_input"


class TestRegister:
    def test_first_registration(
        self, session_client, record_store, discord_user_factory, sent_notifications
    ):
        client = session_client(discord_user=discord_user_factory.make())

        response = client.post(
            "/auth/register", json={"name": "Jane Doe", "skills": ["Python"]}
        )

        assert response.status_code == 200
        user_id = response.json()["user_id"]
        assert decode_cookie(USER_ID_COOKIE, response.cookies[USER_ID_COOKIE]) == user_id
        [user] = record_store.users.values()
        assert str(user.id) == user_id
        assert user.role == "Admin"
        assert user.skills == ["Python"]
        assert sent_notifications == ["Jane Doe"]

    def test_repeat_registration_does_not_notify_again(
        self, session_client, record_store, discord_user_factory, sent_notifications
    ):
        client = session_client(discord_user=discord_user_factory.make())

        first = client.post("/auth/register", json={"name": "Jane Doe"})
        second = client.post("/auth/register", json={"name": "Jane D."})

        assert first.json()["user_id"] == second.json()["user_id"]
        assert len(record_store.users) == 1
        assert sent_notifications == ["Jane Doe"]

    def test_requires_discord_session(
        self, client: TestClient, record_store, sent_notifications
    ):
        response = client.post("/auth/register", json={"name": "Jane Doe"})

        assert response.status_code == 401
        assert response.json()["detail"]["error"] == "unauthenticated"
        assert sent_notifications == []

    def test_requires_name(self, session_client, record_store, discord_user_factory):
        client = session_client(discord_user=discord_user_factory.make())

        response = client.post("/auth/register", json={"name": " "})

        assert response.status_code == 400
        assert response.json()["detail"] == {
            "error": "invalid_input",
            "message": "Name is required",
        }

    def test_store_failure(self, session_client, record_store, discord_user_factory):
        record_store.fail("find_user_for_discord_identity")
        client = session_client(discord_user=discord_user_factory.make())

        response = client.post("/auth/register", json={"name": "Jane Doe"})

        assert response.status_code == 500
        assert response.json()["detail"]["error"] == "persistence_failure"
        assert USER_ID_COOKIE not in response.cookies


class TestLogout:
    def test_post_clears_all_cookies(self, session_client, discord_user_factory):
        client = session_client(discord_user=discord_user_factory.make())

        response = client.post("/auth/logout")

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert deleted_cookies(response) == {
            "user_id",
            "discord_user",
            "discord_token",
            "auth_flow",
        }

    def test_get_clears_and_redirects(self, client: TestClient):
        response = client.get("/auth/logout", follow_redirects=False)

        assert response.status_code in (302, 307)
        assert response.headers["location"] == "http://dashboard.test"
        assert "user_id" in deleted_cookies(response)


class TestDeleteAccount:
    def test_deletes_and_clears_cookies(self, session_client, record_store):
        user = record_store.create_user("42", "jane@example.com", "Jane Doe", None)
        record_store.add_comment(user)
        client = session_client(user_id=user.id)

        response = client.delete("/auth/account")

        assert response.status_code == 200
        assert response.json()["message"] == "Account deleted"
        assert record_store.users == {}
        assert record_store.comments[0]["author_name"] == "Deleted User"
        assert "user_id" in deleted_cookies(response)

    def test_anonymous_is_unauthenticated(self, client: TestClient, record_store):
        response = client.delete("/auth/account")

        assert response.status_code == 401
        assert response.json()["detail"]["error"] == "unauthenticated"
        assert "user_id" in deleted_cookies(response)

    def test_store_failure_keeps_session(self, session_client, record_store):
        user = record_store.create_user("42", "jane@example.com", "Jane Doe", None)
        record_store.fail("anonymize_and_delete_user")
        client = session_client(user_id=user.id)

        response = client.delete("/auth/account")

        assert response.status_code == 500
        assert user.id in record_store.users
        assert deleted_cookies(response) == set()
