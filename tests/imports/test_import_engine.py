"""Tests for BatchImportEngine."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from stampede.imports import BatchImportEngine, ImportParseError
from stampede.models import Participant
from stampede.repositories import ParticipantRepository

HEADER = "Full Name,Email Address,WhatsApp Number,UPI ID,Screenshot of transaction"


@pytest.fixture
def engine(participant_repo) -> BatchImportEngine:
    return BatchImportEngine(participant_repo)


@pytest.mark.asyncio
async def test_mixed_rows(engine, participant_repo):
    """Valid, invalid and duplicate rows are each accounted for."""
    await participant_repo.create_if_absent(
        Participant(name="Ada Lovelace", email="ada@x.io")
    )
    text = "\n".join(
        [
            HEADER,
            "grace hopper,grace@x.io,111,gh@upi,http://proof/1",
            "alan turing,not-an-email,222,,",
            "ADA LOVELACE,ada@x.io,333,,",
            "katherine johnson,kj@x.io,444,,",
        ]
    )

    report = await engine.import_csv(text)

    assert report.added_count == 2
    assert report.skipped_count == 1
    assert report.error_count == 1
    assert report.total == 4
    assert len(report.errors) == 1
    assert report.errors[0].row == 3
    assert report.errors[0].error.startswith("email:")

    grace = await participant_repo.get("Grace Hopper", "grace@x.io")
    assert grace.phone == "111"
    assert grace.transaction_id == "gh@upi"
    assert grace.screenshot == "http://proof/1"
    assert grace.attended is False


@pytest.mark.asyncio
async def test_reimport_skips_everything(engine):
    text = f"{HEADER}\nada,ada@x.io,1,,\ngrace,grace@x.io,2,,\n"

    first = await engine.import_csv(text)
    second = await engine.import_csv(text)

    assert first.added_count == 2
    assert second.added_count == 0
    assert second.skipped_count == 2


@pytest.mark.asyncio
async def test_missing_phone_reported(engine):
    report = await engine.import_csv(f"{HEADER}\nada,ada@x.io,,,\n")

    assert report.error_count == 1
    assert "phone" in report.errors[0].error


@pytest.mark.asyncio
async def test_alternate_phone_header(engine, participant_repo):
    text = "Full Name,Email Address,Whatsapp Number\nada,ada@x.io,999\n"

    report = await engine.import_csv(text)

    assert report.added_count == 1
    assert (await participant_repo.get("Ada", "ada@x.io")).phone == "999"


@pytest.mark.asyncio
async def test_blank_lines_and_whitespace(engine, participant_repo):
    text = f"{HEADER}\n\n  ada  , ada@x.io , 1 ,,\n,,,,\n"

    report = await engine.import_csv(text)

    assert report.total == 1
    assert report.added_count == 1
    assert await participant_repo.exists("Ada", "ada@x.io")


@pytest.mark.asyncio
async def test_row_numbers_follow_data_rows(engine):
    text = f"{HEADER}\nada,ada@x.io,1,,\n,bad,,,\nx,,,,\n"

    report = await engine.import_csv(text)

    assert [e.row for e in report.errors] == [3, 4]


@pytest.mark.asyncio
async def test_store_error_on_one_row_continues():
    repo = MagicMock(spec=ParticipantRepository)
    stored = Participant(id=1, name="Grace", email="grace@x.io")
    repo.create_if_absent = AsyncMock(side_effect=[TimeoutError("slow"), stored])
    engine = BatchImportEngine(repo)

    report = await engine.import_csv(f"{HEADER}\nada,ada@x.io,1,,\ngrace,grace@x.io,2,,\n")

    assert report.error_count == 1
    assert report.added_count == 1
    assert report.errors[0].row == 2


@pytest.mark.asyncio
@pytest.mark.parametrize("text", ["", HEADER, f"{HEADER}\n\n\n"])
async def test_no_rows_is_parse_error(engine, text):
    with pytest.raises(ImportParseError):
        await engine.import_csv(text)


@pytest.mark.asyncio
async def test_bom_is_ignored(engine):
    report = await engine.import_csv(f"\ufeff{HEADER}\nada,ada@x.io,1,,\n")

    assert report.added_count == 1
