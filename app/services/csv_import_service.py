"""
app/services/csv_import_service.py

Service layer for the one-shot CSV import.

Pipeline, run sequentially on one worker:

    1. read the file and parse it fully into flat records
    2. map each record into a ``UserDocument``; invalid rows are logged and skipped
    3. load every document in batches inside ONE transaction, then commit
    4. compute the age distribution report on the committed data

A parse failure aborts before any row is processed. A batch failure or a
cancellation rolls the whole import back. A reporting failure is logged
and recorded in the summary; it never unwinds committed data.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from functools import lru_cache
from pathlib import Path

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import get_import_settings
from app.domain.user_document import (
    AgeDistributionReport,
    FlatRecord,
    ImportSummary,
    RowValidationError,
    UserDocument,
)
from app.errors import (
    ImportCancelledError,
    ImportPersistenceError,
    MalformedCSVError,
    ReportingError,
)
from app.logging_utils import log_event
from app.mappers.user_document_mapper import UserDocumentMapper
from app.parsers.csv_parser import CSVTextParser
from app.repositories.user_repository import UserRepository
from app.services.age_distribution_service import AgeDistributionService
from app.services.batch_loader import DEFAULT_BATCH_SIZE, BatchLoader

logger = logging.getLogger(__name__)

# Data rows start on line 2; line 1 is the header.
FIRST_DATA_ROW_NUMBER = 2


class CSVImportService:
    """
    Coordinates CSV parsing, mapping, batched persistence, and reporting.
    """

    def __init__(
        self,
        *,
        session_factory: Callable[[], Session],
        batch_size: int = DEFAULT_BATCH_SIZE,
        max_validation_errors: int = 500,
        log_validation_errors: bool = True,
        parser: CSVTextParser | None = None,
        mapper: UserDocumentMapper | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._batch_size = max(1, batch_size)
        self._max_validation_errors = max(1, max_validation_errors)
        self._log_validation_errors = log_validation_errors
        self._parser = parser or CSVTextParser()
        self._mapper = mapper or UserDocumentMapper()

    def import_file(
        self,
        path: str | Path,
        *,
        cancel_event: threading.Event | None = None,
    ) -> ImportSummary:
        """
        Import one UTF-8 CSV file into ``users``.
        """

        logger.info("Starting import from: %s", path)
        text = self._read_text(Path(path))
        return self.import_text(text, cancel_event=cancel_event)

    def import_text(
        self,
        text: str,
        *,
        cancel_event: threading.Event | None = None,
    ) -> ImportSummary:
        """
        Import already-decoded CSV text.

        Raises ``MalformedCSVError`` (nothing written), ``ImportPersistenceError``
        or ``ImportCancelledError`` (transaction rolled back).
        """

        records = self._parser.parse(text)
        log_event(logger, logging.INFO, "csv_parsed", records=len(records))

        documents, rows_failed, captured_errors = self._map_records(records)

        with self._session_factory() as session:
            rows_inserted = self._load_in_transaction(
                session=session,
                documents=documents,
                cancel_event=cancel_event,
            )
            report, report_error = self._build_report(session)

        return ImportSummary(
            rows_parsed=len(records),
            rows_inserted=rows_inserted,
            rows_failed=rows_failed,
            validation_errors=captured_errors,
            report=report,
            report_error=report_error,
        )

    # ------------------------------------------------------------------
    # Pipeline internals
    # ------------------------------------------------------------------

    @staticmethod
    def _read_text(path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedCSVError("CSV must be UTF-8 encoded.") from exc
        except OSError as exc:
            raise MalformedCSVError(f"Unable to read CSV file {str(path)!r}: {exc}") from exc

    def _map_records(
        self,
        records: Sequence[FlatRecord],
    ) -> tuple[list[UserDocument], int, list[RowValidationError]]:
        documents: list[UserDocument] = []
        captured_errors: list[RowValidationError] = []
        rows_failed = 0

        for row_number, record in enumerate(records, start=FIRST_DATA_ROW_NUMBER):
            document, row_errors = self._mapper.map_record(record=record, row_number=row_number)
            if document is None:
                rows_failed += 1
                self._record_skip(captured_errors, row_number, row_errors)
                continue
            documents.append(document)

        if rows_failed:
            logger.warning(
                "Skipped %d of %d rows due to validation errors.",
                rows_failed,
                len(records),
            )
        return documents, rows_failed, captured_errors

    def _load_in_transaction(
        self,
        *,
        session: Session,
        documents: Sequence[UserDocument],
        cancel_event: threading.Event | None,
    ) -> int:
        loader = BatchLoader(UserRepository(session), batch_size=self._batch_size)
        try:
            with session.begin():
                inserted = loader.load(documents, cancel_event=cancel_event)
        except (ImportPersistenceError, ImportCancelledError) as exc:
            log_event(logger, logging.ERROR, "import_rolled_back", reason=str(exc))
            raise
        except SQLAlchemyError as exc:
            log_event(logger, logging.ERROR, "import_rolled_back", reason=str(exc))
            raise ImportPersistenceError("Failed to commit import transaction.") from exc

        log_event(logger, logging.INFO, "import_committed", rows_inserted=inserted)
        return inserted

    def _build_report(self, session: Session) -> tuple[AgeDistributionReport | None, str | None]:
        try:
            report = AgeDistributionService(session).build_report()
        except ReportingError as exc:
            logger.error("Age distribution report failed: %s", exc.__cause__ or exc)
            return None, str(exc)

        for line in report.render_lines():
            logger.info(line)
        return report, None

    def _record_skip(
        self,
        captured_errors: list[RowValidationError],
        row_number: int,
        errors: Sequence[RowValidationError],
    ) -> None:
        if self._log_validation_errors:
            logger.warning(
                "Skipping row %s due to mapping error: %s",
                row_number,
                "; ".join(f"{error.column}: {error.message}" for error in errors),
            )

        for error in errors:
            if len(captured_errors) >= self._max_validation_errors:
                break
            captured_errors.append(error)


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_csv_import_service() -> CSVImportService:
    """
    Build and cache the import service with env-driven settings.
    """

    from db.session import SessionLocal

    settings = get_import_settings()
    return CSVImportService(
        session_factory=SessionLocal,
        batch_size=settings.batch_size,
        max_validation_errors=settings.max_validation_errors,
        log_validation_errors=settings.log_validation_errors,
    )


def run_import_from_settings(
    *,
    cancel_event: threading.Event | None = None,
) -> ImportSummary:
    """
    Import the file named by ``CSV_PATH`` using the shared service.
    """

    settings = get_import_settings()
    return get_csv_import_service().import_file(settings.csv_path, cancel_event=cancel_event)
