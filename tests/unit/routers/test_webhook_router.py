"""Unit tests for webhook router.

Tests the Cloud API verification handshake and the mapping of service
outcomes to HTTP status codes.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from statusbot.routers.webhook_router import create_webhook_router


@pytest.fixture
def mock_service():
    """Create a mock WebhookService."""
    service = MagicMock()
    service.process_payload = AsyncMock()
    return service


@pytest.fixture
def client(mock_service):
    """Create test client with webhook router."""
    app = FastAPI()
    app.include_router(create_webhook_router(mock_service))
    return TestClient(app)


class TestVerifyWebhook:
    def test_returns_challenge_as_plain_text(self, client, mock_service):
        mock_service.verify.return_value = "1158201444"

        response = client.get(
            "/webhook",
            params={
                "hub.mode": "subscribe",
                "hub.verify_token": "verify-me",
                "hub.challenge": "1158201444",
            },
        )

        assert response.status_code == 200
        assert response.text == "1158201444"
        mock_service.verify.assert_called_once_with("subscribe", "verify-me", "1158201444")

    def test_bad_token_forbidden(self, client, mock_service):
        mock_service.verify.return_value = None

        response = client.get("/webhook", params={"hub.verify_token": "wrong"})

        assert response.status_code == 403


class TestHandleWebhook:
    def test_success(self, client, mock_service):
        mock_service.process_payload.return_value = {"handled": True, "position": 1}

        response = client.post("/webhook", json={"entry": []})

        assert response.status_code == 200
        assert response.json() == {
            "status": "success",
            "result": {"handled": True, "position": 1},
        }
        mock_service.process_payload.assert_awaited_once_with({"entry": []})

    def test_missing_message_is_bad_request(self, client, mock_service):
        mock_service.process_payload.side_effect = ValueError("no message")

        response = client.post("/webhook", json={})

        assert response.status_code == 400
        assert response.json()["detail"] == "no message"

    def test_non_object_body_is_bad_request(self, client, mock_service):
        response = client.post("/webhook", json=[1, 2])

        assert response.status_code == 400
        mock_service.process_payload.assert_not_awaited()

    def test_invalid_json_is_bad_request(self, client):
        response = client.post(
            "/webhook", content=b"{not json", headers={"content-type": "application/json"}
        )

        assert response.status_code == 400

    def test_unexpected_error_is_server_error(self, client, mock_service):
        mock_service.process_payload.side_effect = RuntimeError("queue closed")

        response = client.post("/webhook", json={"entry": []})

        assert response.status_code == 500
