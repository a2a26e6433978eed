"""Tests for attendance endpoints."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from stampede.api.attendance import router
from stampede.attendance import VerificationOutcome, VerificationResult
from stampede.models import ParticipantSnapshot, ParticipantStatus
from stampede.participants import ParticipantNotFoundError


def snapshot(**kwargs) -> ParticipantSnapshot:
    defaults = {
        "name": "Ada Lovelace",
        "email": "a@x.io",
        "status": ParticipantStatus.REGISTERED,
        "attended": True,
    }
    defaults.update(kwargs)
    return ParticipantSnapshot(**defaults)


@pytest.fixture
def mock_service():
    service = MagicMock()
    service.verify_and_mark = AsyncMock()
    service.verify_payload = AsyncMock()
    service.toggle_verified_status = AsyncMock()
    service.set_attendance = AsyncMock()
    return service


@pytest.fixture
def test_client(mock_service):
    app = FastAPI()
    app.include_router(router)
    app.state.attendance_service = mock_service
    return TestClient(app)


class TestVerify:
    """Tests for POST /attendance/verify."""

    def test_marked(self, test_client, mock_service):
        mock_service.verify_and_mark.return_value = VerificationResult.of(
            VerificationOutcome.MARKED, snapshot()
        )

        response = test_client.post(
            "/attendance/verify",
            json={"name": "Ada Lovelace", "email": "a@x.io", "hash": "abc"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["outcome"] == "marked"
        assert data["success"] is True
        assert data["verified"] is True
        assert data["participant"]["attended"] is True
        mock_service.verify_and_mark.assert_awaited_once_with(
            "Ada Lovelace", "a@x.io", "abc"
        )

    def test_already_attended_is_not_success(self, test_client, mock_service):
        mock_service.verify_and_mark.return_value = VerificationResult.of(
            VerificationOutcome.ALREADY_ATTENDED, snapshot()
        )

        data = test_client.post(
            "/attendance/verify",
            json={"name": "Ada Lovelace", "email": "a@x.io", "hash": "abc"},
        ).json()

        assert data["success"] is False
        assert data["verified"] is True
        assert data["message"] == "Attendance already marked for this attendee"

    def test_invalid_signature(self, test_client, mock_service):
        mock_service.verify_and_mark.return_value = VerificationResult.of(
            VerificationOutcome.INVALID_SIGNATURE
        )

        data = test_client.post(
            "/attendance/verify",
            json={"name": "Ada", "email": "a@x.io", "hash": "bad"},
        ).json()

        assert data["verified"] is False
        assert data["participant"] is None

    def test_missing_hash_is_422(self, test_client):
        response = test_client.post(
            "/attendance/verify", json={"name": "Ada", "email": "a@x.io"}
        )

        assert response.status_code == 422


class TestScan:
    """Tests for POST /attendance/scan."""

    def test_forwards_raw_payload(self, test_client, mock_service):
        mock_service.verify_payload.return_value = VerificationResult.of(
            VerificationOutcome.UNREGISTERED
        )

        response = test_client.post("/attendance/scan", json={"qr_data": "{}"})

        assert response.json()["outcome"] == "unregistered"
        assert response.json()["verified"] is True
        assert response.json()["success"] is False
        mock_service.verify_payload.assert_awaited_once_with("{}")


class TestOperatorEndpoints:
    """Status toggle and attendance override."""

    def test_toggle_status(self, test_client, mock_service):
        mock_service.toggle_verified_status.return_value = snapshot(
            status=ParticipantStatus.VERIFIED
        )

        response = test_client.post(
            "/attendance/status", json={"name": "Ada Lovelace", "email": "a@x.io"}
        )

        assert response.status_code == 200
        assert response.json()["status"] == "verified"

    def test_toggle_unknown_is_404(self, test_client, mock_service):
        mock_service.toggle_verified_status.side_effect = ParticipantNotFoundError()

        response = test_client.post(
            "/attendance/status", json={"name": "Ghost", "email": "g@x.io"}
        )

        assert response.status_code == 404

    def test_override(self, test_client, mock_service):
        response = test_client.patch("/attendance/5", json={"attended": False})

        assert response.status_code == 200
        assert response.json() == {"id": 5, "attended": False}
        mock_service.set_attendance.assert_awaited_once_with(5, False)

    def test_override_unknown_is_404(self, test_client, mock_service):
        mock_service.set_attendance.side_effect = ParticipantNotFoundError()

        response = test_client.patch("/attendance/5", json={"attended": True})

        assert response.status_code == 404
