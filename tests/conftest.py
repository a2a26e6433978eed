"""Pytest configuration and fixtures."""

from collections.abc import AsyncIterator
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient

from stampede.db.client import DatabaseClient
from stampede.main import app, init_services
from stampede.repositories import FailureRecordRepository, ParticipantRepository
from stampede.tokens import TokenCodec

TEST_SECRET = "test-secret"


@pytest.fixture
async def db_client(tmp_path: Path) -> AsyncIterator[DatabaseClient]:
    """Create a temp file database client for testing."""
    db_path = tmp_path / "test_stampede.db"
    client = DatabaseClient(url=f"file:{db_path}")
    await client.connect()
    yield client
    await client.close()


@pytest.fixture
async def participant_repo(db_client: DatabaseClient) -> ParticipantRepository:
    """ParticipantRepository with initialized table."""
    repo = ParticipantRepository(db_client)
    await repo.initialize()
    return repo


@pytest.fixture
async def failure_repo(db_client: DatabaseClient) -> FailureRecordRepository:
    """FailureRecordRepository with initialized table."""
    repo = FailureRecordRepository(db_client)
    await repo.initialize()
    return repo


@pytest.fixture
def codec() -> TokenCodec:
    return TokenCodec(TEST_SECRET)


@pytest.fixture
def form_payload() -> dict:
    """A well-formed form webhook body."""
    return {
        "formId": "form-1",
        "responseId": "resp-1",
        "timestamp": "2024-03-01T10:00:00Z",
        "responderEmail": "a@x.io",
        "responses": {
            "Full Name": "  aDA   lovelace ",
            "College Email ID": "ada@college.edu",
            "Whatsapp Number": "",
            "WhatsApp Number": "9876543210",
            "UPI ID": "ada@upi",
            "Screenshot of transaction": ["abc123"],
        },
    }


@pytest.fixture
async def client(tmp_path: Path) -> AsyncIterator[AsyncClient]:
    """Create async test client for the full app with a temp database."""
    db_path = tmp_path / "test_api.db"
    db = DatabaseClient(url=f"file:{db_path}")
    await db.connect()

    app.state.db = db
    await init_services(app, db, codec=TokenCodec(TEST_SECRET))

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    await db.close()
    del app.state.db
