"""
app/errors.py

Exception taxonomy for the CSV import pipeline.

Row-level validation failures are not exceptions; they are reported as
``RowValidationError`` values (see ``app.domain.user_document``) and the
offending row is skipped. Everything below aborts the current run.
"""

from __future__ import annotations


class CSVImportError(Exception):
    """Base exception for import pipeline failures."""


class MalformedCSVError(CSVImportError, ValueError):
    """
    Raised when the source file cannot be read or has no usable header row.
    """


class ImportPersistenceError(CSVImportError, RuntimeError):
    """
    Raised when a batch insert fails. The open import transaction is rolled back.
    """

    def __init__(
        self,
        message: str,
        *,
        batch_number: int | None = None,
        batch_size: int | None = None,
        rows_inserted_before: int = 0,
    ) -> None:
        super().__init__(message)
        self.batch_number = batch_number
        self.batch_size = batch_size
        self.rows_inserted_before = rows_inserted_before

    def to_dict(self) -> dict[str, object]:
        return {
            "message": str(self),
            "batch_number": self.batch_number,
            "batch_size": self.batch_size,
            "rows_inserted_before": self.rows_inserted_before,
        }


class ImportCancelledError(CSVImportError):
    """
    Raised when the cancellation signal is observed before the next batch is sent.
    """


class ReportingError(CSVImportError, RuntimeError):
    """
    Raised when the post-commit age distribution query fails.
    """
