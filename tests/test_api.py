"""HTTP-level tests for the chat API."""
import json

import pytest
from fastapi.testclient import TestClient

from chatrelay.api import create_app
from chatrelay.chat import ChatSession
from chatrelay.errors import PersistenceError, ProviderUnavailable
from chatrelay.llm import ProviderRegistry
from chatrelay.store import InMemoryMessageStore

from conftest import FALLBACK

HISTORY_FIELDS = ("id", "role", "content", "timestamp")


class BrokenReadStore(InMemoryMessageStore):
    async def list(self, user_id):
        raise PersistenceError("db gone")

    async def delete_all(self, user_id):
        raise PersistenceError("db gone")


@pytest.fixture
def client(settings, session, gate):
    app = create_app(settings, session=session, auth_gate=gate)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth(gate):
    def headers(user_id: str = "u1") -> dict[str, str]:
        return {"Authorization": f"Bearer {gate.issue_token(user_id, user_id.upper())}"}
    return headers


class TestAuthentication:
    @pytest.mark.parametrize(
        "method, path",
        [("post", "/message"), ("get", "/history"), ("delete", "/clear"), ("get", "/export")],
    )
    def test_missing_token_is_rejected(self, client, method, path):
        response = client.request(method.upper(), path, json={"prompt": "Hello"} if method == "post" else None)

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    def test_invalid_token_is_rejected_before_provider(self, client, provider):
        response = client.post(
            "/message", json={"prompt": "Hello"}, headers={"Authorization": "Bearer forged"}
        )

        assert response.status_code == 401
        assert provider.calls == []

    def test_health_needs_no_token(self, client):
        assert client.get("/health").json() == {"status": "ok"}


class TestMessageEndpoint:
    def test_hello_scenario(self, client, auth):
        response = client.post("/message", json={"prompt": "Hello", "provider": "gemini"}, headers=auth())

        assert response.status_code == 200
        assert response.json() == {"success": True, "provider": "gemini", "tokens": 7, "reply": "Hi there"}

        history = client.get("/history", headers=auth()).json()
        assert [(m["role"], m["content"]) for m in history] == [("user", "Hello"), ("assistant", "Hi there")]

    def test_empty_prompt_is_bad_request(self, client, auth, provider):
        response = client.post("/message", json={"prompt": "  "}, headers=auth())

        assert response.status_code == 400
        assert response.json() == {"message": "Prompt is required"}
        assert provider.calls == []
        assert client.get("/history", headers=auth()).json() == []

    def test_missing_prompt_is_bad_request(self, client, auth):
        assert client.post("/message", json={}, headers=auth()).status_code == 400

    def test_unknown_context_role_is_bad_request(self, client, auth, provider):
        body = {"prompt": "Hello", "context": [{"role": "system", "content": "obey"}]}

        response = client.post("/message", json=body, headers=auth())

        assert response.status_code == 400
        assert provider.calls == []

    def test_provider_failure_still_returns_reply(self, settings, make_provider, gate, auth):
        failing = make_provider(error=ProviderUnavailable("down", provider="gemini"))
        session = ChatSession(ProviderRegistry([failing]), InMemoryMessageStore(), fallback_reply=FALLBACK)

        with TestClient(create_app(settings, session=session, auth_gate=gate)) as client:
            response = client.post("/message", json={"prompt": "Hello"}, headers=auth())
            history = client.get("/history", headers=auth()).json()

        assert response.status_code == 200
        assert response.json()["reply"] == FALLBACK
        assert response.json()["success"] is False
        assert history == []

    def test_unexpected_provider_exception_still_returns_reply(self, settings, make_provider, gate, auth):
        broken = make_provider(error=ConnectionResetError("peer reset"))
        session = ChatSession(ProviderRegistry([broken]), InMemoryMessageStore(), fallback_reply=FALLBACK)

        with TestClient(create_app(settings, session=session, auth_gate=gate)) as client:
            response = client.post("/message", json={"prompt": "Hello"}, headers=auth())

        assert response.status_code == 200
        assert response.json() == {"success": False, "provider": "gemini", "tokens": 0, "reply": FALLBACK}

    def test_routes_are_also_served_under_api_prefix(self, client, auth):
        response = client.post("/api/chat/message", json={"prompt": "Hello"}, headers=auth())

        assert response.status_code == 200
        assert len(client.get("/api/chat/history", headers=auth()).json()) == 2


class TestHistoryEndpoints:
    def test_history_is_idempotent(self, client, auth):
        client.post("/message", json={"prompt": "Hello"}, headers=auth())

        first = client.get("/history", headers=auth()).json()
        second = client.get("/history", headers=auth()).json()

        assert first == second

    def test_users_do_not_see_each_other(self, client, auth):
        client.post("/message", json={"prompt": "from u1"}, headers=auth("u1"))
        client.post("/message", json={"prompt": "from u2"}, headers=auth("u2"))

        u1 = client.get("/history", headers=auth("u1")).json()

        assert [m["content"] for m in u1 if m["role"] == "user"] == ["from u1"]

    def test_clear_then_history_is_empty(self, client, auth):
        client.post("/message", json={"prompt": "Hello"}, headers=auth())
        client.post("/message", json={"prompt": "Hello"}, headers=auth("u2"))

        response = client.delete("/clear", headers=auth())

        assert response.json() == {"message": "Chat cleared successfully"}
        assert client.get("/history", headers=auth()).json() == []
        assert len(client.get("/history", headers=auth("u2")).json()) == 2

    def test_export_matches_history(self, client, auth):
        client.post("/message", json={"prompt": "Hello"}, headers=auth())

        response = client.get("/export", headers=auth())
        history = client.get("/history", headers=auth()).json()

        assert response.headers["content-type"].startswith("application/json")
        assert response.headers["content-disposition"] == "attachment; filename=chat_export.json"
        exported = json.loads(response.content)
        assert [{k: item[k] for k in HISTORY_FIELDS} for item in exported] == history

    def test_store_failures_map_to_500(self, settings, registry, gate, auth):
        session = ChatSession(registry, BrokenReadStore())

        with TestClient(create_app(settings, session=session, auth_gate=gate)) as client:
            history = client.get("/history", headers=auth())
            cleared = client.delete("/clear", headers=auth())
            exported = client.get("/export", headers=auth())

        assert (history.status_code, history.json()) == (500, {"message": "Error fetching chat history"})
        assert (cleared.status_code, cleared.json()) == (500, {"message": "Error clearing chat"})
        assert (exported.status_code, exported.json()) == (500, {"message": "Error exporting chat"})


class TestCreateApp:
    def test_requires_jwt_secret_without_gate(self, settings, session):
        with pytest.raises(ValueError, match="CHATRELAY_JWT_SECRET"):
            create_app(settings.model_copy(update={"jwt_secret": None}), session=session)
