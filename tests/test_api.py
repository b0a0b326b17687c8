"""
Tests for the HTTP surface (FastAPI TestClient).
"""

import pytest
from unittest.mock import MagicMock, patch
from fastapi.testclient import TestClient

from src.api import main
from src.api.auth import UNAUTHORIZED_DETAIL
from src.core.dao import StoreUnavailableError


@pytest.fixture
def client():
    """Create test client for API testing."""
    with TestClient(main.app) as test_client:
        yield test_client


@pytest.fixture
def created(client, resource_payload):
    response = client.post("/resources", json=resource_payload)
    assert response.status_code == 201
    return response.json()["data"]


class TestHealth:

    def test_health_is_open(self, client, monkeypatch):
        monkeypatch.setenv("SECRET_PASSWORD", "s3cret")

        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["db_health"] is True
        assert data["checks"]["ollama"]["status"] == "not_configured"


class TestAuth:

    def test_missing_secret_rejected(self, client, monkeypatch):
        monkeypatch.setenv("SECRET_PASSWORD", "s3cret")

        response = client.get("/resources")

        assert response.status_code == 401
        assert response.json() == {"detail": UNAUTHORIZED_DETAIL}

    def test_wrong_secret_rejected(self, client, monkeypatch):
        monkeypatch.setenv("SECRET_PASSWORD", "s3cret")

        response = client.get("/resources", headers={"x-secret": "nope"})

        assert response.status_code == 401

    def test_valid_secret_accepted(self, client, monkeypatch):
        monkeypatch.setenv("SECRET_PASSWORD", "s3cret")

        response = client.get("/resources", headers={"x-secret": "s3cret"})

        assert response.status_code == 200

    def test_open_without_configured_secret(self, client):
        assert client.get("/resources").status_code == 200


class TestResourceRoutes:

    def test_create_and_get(self, client, created):
        assert created["status"] == "draft"
        assert created["productSpecific"] == {"knoxTeams": {"ko-KR": "Knox 로그인"}}

        response = client.get(f"/resources/{created['id']}")

        assert response.status_code == 200
        assert response.json()["data"]["key"] == "common.login"

    def test_create_validation_error_is_400(self, client, resource_payload):
        resource_payload["products"] = []

        response = client.post("/resources", json=resource_payload)

        assert response.status_code == 400
        assert response.json()["field"] == "products"

    def test_create_bad_status_is_422(self, client, resource_payload):
        resource_payload["status"] = "published"

        assert client.post("/resources", json=resource_payload).status_code == 422

    def test_create_duplicate_is_409(self, client, created, resource_payload):
        response = client.post("/resources", json=resource_payload)

        assert response.status_code == 409

    def test_update(self, client, created):
        response = client.put(f"/resources/{created['id']}", json={
            "translations": {"vi-VN": "Đăng nhập"},
            "notes": "reviewed",
        })

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["translations"]["vi-VN"] == "Đăng nhập"
        assert data["notes"] == "reviewed"
        assert data["id"] == created["id"]

    def test_update_missing_is_404(self, client):
        response = client.put("/resources/12345", json={"status": "approved"})

        assert response.status_code == 404
        assert response.json()["detail"] == "Resource not found"

    def test_delete(self, client, created):
        assert client.delete(f"/resources/{created['id']}").status_code == 200
        assert client.get(f"/resources/{created['id']}").status_code == 404

    def test_search(self, client, created):
        response = client.get("/resources/search", params={"query": "log", "locale": "en-US", "limit": 10})

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 1
        assert body["query"]["locale"] == "en-US"

    def test_store_unavailable_is_503(self, client):
        with patch.object(main.dao, "list_resources", side_effect=StoreUnavailableError("down")):
            response = client.get("/resources")

        assert response.status_code == 503


class TestAuditRoutes:

    def test_audit_texts(self, client, created):
        response = client.post("/audit", json={"texts": ["로그인", "설정"], "locale": "ko-KR"})

        assert response.status_code == 200
        body = response.json()
        assert body["stats"] == {"total": 2, "matched": 1, "missing": 1}
        assert body["missing"] == ["설정"]

    def test_audit_document(self, client, created):
        document = {"name": "File", "pages": [{"id": "0:1", "name": "Login", "children": [
            {"id": "1:1", "name": "Button", "type": "TEXT", "text": "로그인"},
            {"id": "1:2", "name": "Caption", "type": "TEXT", "text": "비밀번호 찾기"},
        ]}]}

        response = client.post("/audit", json={"document": document, "locale": "ko-KR"})

        body = response.json()
        assert body["stats"]["coverage"] == 50
        assert body["issues"][0]["location"] == "Login > Caption"
        assert body["summary"]["overallScore"] == 95

    def test_audit_requires_input(self, client):
        assert client.post("/audit", json={"locale": "ko-KR"}).status_code == 400

    def test_audit_invalid_locale_is_422(self, client):
        assert client.post("/audit", json={"texts": ["가"], "locale": "fr-FR"}).status_code == 422

    def test_repository_audit(self, client, created):
        response = client.post("/audit/repository", json={})

        body = response.json()
        # one draft resource: 100 - 10
        assert body["health_score"] == 90
        assert body["summary"]["total_resources"] == 1


class TestSuggestRoute:

    def test_suggest_text(self, client, created):
        response = client.post("/suggest", json={"text": "로그인 버튼", "locale": "ko-KR", "product": "knox"})

        body = response.json()
        assert body["source"] == "fuzzy"
        assert body["suggestion"] == "Knox 로그인"

    def test_suggest_empty_text_is_400(self, client):
        assert client.post("/suggest", json={"text": " ", "locale": "ko-KR"}).status_code == 400

    def test_suggest_ai_disabled_degrades(self, client):
        response = client.post("/suggest", json={"text": "환경설정", "locale": "ko-KR", "useAi": True})

        body = response.json()
        assert body["source"] == "template"
        assert body["degraded"] is True

    def test_suggest_ai_enabled(self, client, monkeypatch):
        monkeypatch.setenv("AI_SUGGEST_ENABLED", "true")
        agent = MagicMock()
        agent.generate.return_value = "환경 설정 열기"

        with patch.object(main, "get_suggestion_agent", return_value=agent):
            response = client.post("/suggest", json={"text": "환경설정", "locale": "ko-KR", "use_ai": True})

        assert response.json()["source"] == "ai"
        assert response.json()["confidence"] == 0.6

    def test_suggest_selection(self, client, created):
        selection = [{"id": "2:1", "name": "Label", "type": "TEXT", "text": "새 기능"}]

        response = client.post("/suggest", json={"selection": selection, "locale": "ko-KR"})

        items = response.json()["suggestions"]
        assert items[0]["id"] == "2:1-unregistered"
        assert items[0]["priority"] == "high"
