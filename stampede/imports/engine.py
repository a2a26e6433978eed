"""Bulk registration from spreadsheet exports.

Rows are processed independently: a bad row is reported and skipped, an
already-registered (name, email) is counted as skipped, and a store error on
one row does not stop the rest. For N data rows,
``added_count + skipped_count + error_count == N``.
"""

import csv
import io

import structlog
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic.networks import validate_email

from stampede.intake.normalizer import first_present, title_case
from stampede.models import Participant, ParticipantStatus
from stampede.repositories import ParticipantRepository

logger = structlog.get_logger()

NAME_COLUMN = "Full Name"
EMAIL_COLUMN = "Email Address"
PHONE_COLUMNS = ("WhatsApp Number", "Whatsapp Number")
TRANSACTION_COLUMN = "UPI ID"
SCREENSHOT_COLUMN = "Screenshot of transaction"

# Header row plus 1-based numbering
_ROW_OFFSET = 2


class ImportParseError(ValueError):
    """Raised when the upload is not usable as a CSV table."""


class ImportRow(BaseModel):
    """One spreadsheet row after trimming and name normalization."""

    name: str = Field(min_length=1, max_length=200)
    email: str = Field(min_length=1)
    phone: str = Field(min_length=1)
    transaction_id: str = ""
    screenshot: str = ""

    @field_validator("email")
    @classmethod
    def email_valid(cls, v: str) -> str:
        validate_email(v)
        return v


class RowError(BaseModel):
    """Why a single row was not imported."""

    row: int = Field(description="Spreadsheet row number, header is row 1")
    error: str


class ImportReport(BaseModel):
    """Partial-success summary of one upload."""

    added_count: int = 0
    skipped_count: int = 0
    error_count: int = 0
    errors: list[RowError] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return self.added_count + self.skipped_count + self.error_count

    @property
    def message(self) -> str:
        return (
            f"Added {self.added_count} participants, "
            f"skipped {self.skipped_count} duplicates, "
            f"{self.error_count} errors"
        )


def _format_errors(error: ValidationError) -> str:
    return ", ".join(
        f"{'.'.join(str(p) for p in item['loc'])}: {item['msg']}"
        for item in error.errors()
    )


def parse_rows(text: str) -> list[dict[str, str]]:
    """Read CSV text into trimmed row dicts, skipping blank lines.

    Raises:
        ImportParseError: If there is no header or no data rows
    """
    reader = csv.DictReader(io.StringIO(text.lstrip("\ufeff")))
    try:
        if not reader.fieldnames:
            raise ImportParseError("CSV file has no header row")
        rows = []
        for raw in reader:
            row = {
                (key or "").strip(): (value or "").strip()
                for key, value in raw.items()
                if isinstance(value, str) or value is None
            }
            if any(row.values()):
                rows.append(row)
    except csv.Error as e:
        raise ImportParseError(f"Failed to parse CSV file: {e}") from e

    if not rows:
        raise ImportParseError("No data found in CSV file")
    return rows


class BatchImportEngine:
    """Imports participants from CSV text."""

    def __init__(self, participant_repo: ParticipantRepository):
        self._participants = participant_repo

    async def import_csv(self, text: str) -> ImportReport:
        """Import every data row of a CSV export.

        Args:
            text: Decoded CSV content with a header row

        Returns:
            ImportReport with per-row errors

        Raises:
            ImportParseError: If the text cannot be parsed or has no rows
        """
        rows = parse_rows(text)
        report = ImportReport()

        for index, row in enumerate(rows):
            row_number = index + _ROW_OFFSET
            try:
                item = ImportRow(
                    name=title_case(row.get(NAME_COLUMN, "")),
                    email=row.get(EMAIL_COLUMN, ""),
                    phone=first_present(row, PHONE_COLUMNS) or "",
                    transaction_id=row.get(TRANSACTION_COLUMN, ""),
                    screenshot=row.get(SCREENSHOT_COLUMN, ""),
                )
            except ValidationError as e:
                report.error_count += 1
                report.errors.append(RowError(row=row_number, error=_format_errors(e)))
                continue

            try:
                created = await self._participants.create_if_absent(
                    Participant(
                        name=item.name,
                        email=item.email,
                        phone=item.phone,
                        transaction_id=item.transaction_id or None,
                        screenshot=item.screenshot or None,
                        status=ParticipantStatus.REGISTERED,
                        attended=False,
                    )
                )
            except Exception as e:
                logger.error("import row failed", row=row_number, error=str(e))
                report.error_count += 1
                report.errors.append(
                    RowError(row=row_number, error=f"Failed to save participant: {e}")
                )
                continue

            if created is None:
                report.skipped_count += 1
            else:
                report.added_count += 1

        logger.info(
            "csv import finished",
            rows=len(rows),
            added=report.added_count,
            skipped=report.skipped_count,
            errors=report.error_count,
        )
        return report
