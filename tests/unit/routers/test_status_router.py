"""Unit tests for status router."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from statusbot.enums import JobStatus
from statusbot.errors import AccountNotFound, IncompleteCredentials
from statusbot.queue.job_queue import QueueTicket
from statusbot.routers.status_router import create_status_router


@pytest.fixture
def mock_status_service():
    service = AsyncMock()
    service.handle_request.return_value = QueueTicket(position=3, future=MagicMock())
    return service


@pytest.fixture
def client(mock_status_service):
    app = FastAPI()
    app.include_router(create_status_router(mock_status_service, default_destination="15550009999"))
    return TestClient(app)


def test_check_status_queues_request(client, mock_status_service):
    response = client.post(
        "/check-status",
        json={"username": "alice@example.org", "phone_number": "15550001111"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "success"
    assert data["message"] == "Status check initiated"
    assert data["details"]["username"] == "alice@example.org"
    assert data["details"]["phone"] == "15550001111"
    assert data["details"]["position"] == 3
    assert "timestamp" in data["details"]
    mock_status_service.handle_request.assert_awaited_once_with(
        "alice@example.org", "15550001111"
    )


def test_accepts_camel_case_body(client, mock_status_service):
    response = client.post(
        "/check-status", json={"username": "alice", "phoneNumber": "1555"}
    )

    assert response.status_code == 200


@pytest.mark.parametrize(
    "body",
    [{}, {"username": "alice"}, {"phone_number": "1555"}, {"username": "", "phone_number": "1555"}],
)
def test_missing_fields_rejected(client, mock_status_service, body):
    response = client.post("/check-status", json=body)

    assert response.status_code == 400
    mock_status_service.handle_request.assert_not_awaited()


def test_service_value_error_is_bad_request(client, mock_status_service):
    mock_status_service.handle_request.side_effect = ValueError("blank alias")

    response = client.post("/check-status", json={"username": " ", "phone_number": "1555"})

    assert response.status_code == 400


class TestCapture:
    def test_completed_capture(self, client, mock_status_service):
        mock_status_service.capture.return_value = (2, JobStatus.COMPLETED)

        response = client.post(
            "/capture", json={"username": "alice@example.org", "phone_number": "1555"}
        )

        assert response.status_code == 200
        assert response.json() == {
            "message": "Automation completed successfully for all links",
            "processedCount": 2,
            "status": "completed",
        }
        mock_status_service.capture.assert_awaited_once_with("alice@example.org", "1555")

    def test_default_destination_used(self, client, mock_status_service):
        mock_status_service.capture.return_value = (1, JobStatus.COMPLETED)

        client.post("/capture", json={"username": "alice"})

        mock_status_service.capture.assert_awaited_once_with("alice", "15550009999")

    def test_no_destination_configured(self, mock_status_service):
        app = FastAPI()
        app.include_router(create_status_router(mock_status_service))

        response = TestClient(app).post("/capture", json={"username": "alice"})

        assert response.status_code == 400
        mock_status_service.capture.assert_not_awaited()

    def test_missing_username(self, client, mock_status_service):
        response = client.post("/capture", json={"phone_number": "1555"})

        assert response.status_code == 400
        assert response.json()["detail"] == "Missing required parameter. Please provide username"

    def test_account_not_found(self, client, mock_status_service):
        mock_status_service.capture.side_effect = AccountNotFound("nobody")

        response = client.post("/capture", json={"username": "nobody"})

        assert response.status_code == 404
        assert response.json()["detail"]["error"] == "Account not found"
        assert "Client Name or Email address" in response.json()["detail"]["message"]

    def test_incomplete_credentials(self, client, mock_status_service):
        mock_status_service.capture.side_effect = IncompleteCredentials("alice")

        response = client.post("/capture", json={"username": "alice"})

        assert response.status_code == 404
        assert response.json()["detail"]["error"] == "Incomplete credentials"

    def test_unexpected_error(self, client, mock_status_service):
        mock_status_service.capture.side_effect = RuntimeError("queue stopped")

        response = client.post("/capture", json={"username": "alice"})

        assert response.status_code == 500
