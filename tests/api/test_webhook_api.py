"""Tests for the form webhook endpoint."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from stampede.api.webhook import router
from stampede.intake import DeadLetterWriteError, IngestOutcome, IngestResult
from stampede.models import Participant


@pytest.fixture
def mock_pipeline():
    pipeline = MagicMock()
    pipeline.ingest = AsyncMock()
    return pipeline


@pytest.fixture
def test_client(mock_pipeline):
    """Create test client with mocked pipeline."""
    app = FastAPI()
    app.include_router(router)
    app.state.ingestion_pipeline = mock_pipeline
    return TestClient(app)


class TestReceiveFormSubmission:
    """Tests for POST /webhook/form."""

    def test_created(self, test_client, mock_pipeline):
        mock_pipeline.ingest.return_value = IngestResult(
            outcome=IngestOutcome.CREATED,
            participant=Participant(id=1, name="Ada Lovelace", email="a@x.io"),
        )

        response = test_client.post("/webhook/form", json={"responderEmail": "a@x.io"})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["outcome"] == "created"
        assert data["message"] == "Participant added successfully"
        assert data["participant"] == {"name": "Ada Lovelace", "email": "a@x.io"}

    def test_passes_authorization_header(self, test_client, mock_pipeline):
        mock_pipeline.ingest.return_value = IngestResult(outcome=IngestOutcome.DUPLICATE)

        test_client.post(
            "/webhook/form",
            json={"a": 1},
            headers={"Authorization": "Bearer tok"},
        )

        mock_pipeline.ingest.assert_awaited_once_with({"a": 1}, "Bearer tok")

    def test_rejected_is_401(self, test_client, mock_pipeline):
        mock_pipeline.ingest.return_value = IngestResult(outcome=IngestOutcome.REJECTED)

        response = test_client.post("/webhook/form", json={})

        assert response.status_code == 401

    def test_captured_still_succeeds(self, test_client, mock_pipeline):
        mock_pipeline.ingest.return_value = IngestResult(
            outcome=IngestOutcome.CAPTURED,
            failure_id=12,
            error="Invalid data format",
        )

        response = test_client.post("/webhook/form", json={"junk": True})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["failure_id"] == 12
        assert data["error"] == "Invalid data format"

    def test_non_json_body_is_forwarded_as_text(self, test_client, mock_pipeline):
        mock_pipeline.ingest.return_value = IngestResult(
            outcome=IngestOutcome.CAPTURED, failure_id=1
        )

        test_client.post(
            "/webhook/form",
            content=b"name=ada",
            headers={"Content-Type": "text/plain"},
        )

        mock_pipeline.ingest.assert_awaited_once_with("name=ada", None)

    def test_dead_letter_failure_is_500(self, test_client, mock_pipeline):
        mock_pipeline.ingest.side_effect = DeadLetterWriteError("db down")

        response = test_client.post("/webhook/form", json={})

        assert response.status_code == 500
        assert "db down" not in response.text
