"""Spreadsheet bulk import with per-row partial failure."""

from stampede.imports.engine import (
    BatchImportEngine,
    ImportParseError,
    ImportReport,
    RowError,
)

__all__ = [
    "BatchImportEngine",
    "ImportParseError",
    "ImportReport",
    "RowError",
]
