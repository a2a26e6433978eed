"""Tests for readiness checks."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from libsql_client import LibsqlError

from stampede.api.health import router
from stampede.models import FailureRecord, FailureStatus


@pytest.fixture
def app():
    app = FastAPI()
    app.include_router(router)
    return app


@pytest.fixture
def healthy_db():
    db = MagicMock()
    db.is_healthy = AsyncMock(return_value=True)
    return db


@pytest.fixture
def failure_repo():
    repo = MagicMock()
    repo.list_records = AsyncMock(
        return_value=[FailureRecord(raw_data="{}", error_message="Invalid data format")]
    )
    return repo


def test_ready_reports_pending_backlog(app, healthy_db, failure_repo):
    app.state.db = healthy_db
    app.state.failure_repo = failure_repo

    data = TestClient(app).get("/health/ready").json()

    assert data["status"] == "ready"
    assert data["pending_failures"] == 1
    failure_repo.list_records.assert_awaited_once_with(FailureStatus.PENDING)


def test_not_configured(app):
    data = TestClient(app).get("/health/ready").json()

    assert data["status"] == "not_ready"
    assert data["checks"]["database"] == "not_configured"
    assert data["checks"]["dead_letter_queue"] == "not_configured"
    assert data["pending_failures"] is None


def test_unhealthy_store_skips_queue(app, failure_repo):
    db = MagicMock()
    db.is_healthy = AsyncMock(return_value=False)
    app.state.db = db
    app.state.failure_repo = failure_repo

    data = TestClient(app).get("/health/ready").json()

    assert data["checks"]["database"] == "failed"
    assert data["checks"]["dead_letter_queue"] == "unavailable"
    failure_repo.list_records.assert_not_awaited()


def test_queue_read_failure(app, healthy_db, failure_repo):
    failure_repo.list_records.side_effect = LibsqlError("no such table", "SQLITE_ERROR")
    app.state.db = healthy_db
    app.state.failure_repo = failure_repo

    data = TestClient(app).get("/health/ready").json()

    assert data["status"] == "not_ready"
    assert data["checks"]["dead_letter_queue"] == "failed"
