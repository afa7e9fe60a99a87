"""
app/scheduler/jobs.py

APScheduler wiring for the one-shot CSV import triggered at process start.

Lifecycle
----------
``build_import_scheduler()`` returns a configured ``BackgroundScheduler``
holding a single date-triggered job that fires immediately. It is
started from the FastAPI ``lifespan`` in main.py. On shutdown the
lifespan sets the cancel event first, so a running import stops before
its next batch and rolls back, then waits for the job to finish.

Import failures are logged and recorded in ``ImportRunState``; they never
stop the HTTP listener.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime, timezone

from apscheduler.schedulers.background import BackgroundScheduler

from app.domain.user_document import ImportSummary
from app.errors import CSVImportError

logger = logging.getLogger(__name__)

IMPORT_JOB_ID = "startup_csv_import"

ImportRunner = Callable[[threading.Event], ImportSummary]


class ImportStatus:
    """Valid states of the startup import."""

    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class ImportRunSnapshot:
    status: str = ImportStatus.PENDING
    csv_path: str | None = None
    started_at: datetime | None = None
    finished_at: datetime | None = None
    summary: ImportSummary | None = None
    error: str | None = None


class ImportRunState:
    """
    Thread-safe holder for the latest import outcome, read by ``/health``.
    """

    def __init__(self, *, csv_path: str | None = None) -> None:
        self._lock = threading.Lock()
        self._snapshot = ImportRunSnapshot(csv_path=csv_path)

    def snapshot(self) -> ImportRunSnapshot:
        with self._lock:
            return self._snapshot

    def mark_running(self) -> None:
        self._update(status=ImportStatus.RUNNING, started_at=datetime.now(tz=timezone.utc))

    def mark_succeeded(self, summary: ImportSummary) -> None:
        self._update(
            status=ImportStatus.SUCCEEDED,
            finished_at=datetime.now(tz=timezone.utc),
            summary=summary,
            error=summary.report_error,
        )

    def mark_failed(self, error: str) -> None:
        self._update(
            status=ImportStatus.FAILED,
            finished_at=datetime.now(tz=timezone.utc),
            error=error,
        )

    def mark_skipped(self) -> None:
        self._update(status=ImportStatus.SKIPPED)

    def _update(self, **changes: object) -> None:
        with self._lock:
            self._snapshot = replace(self._snapshot, **changes)


def run_import_job(
    runner: ImportRunner,
    state: ImportRunState,
    cancel_event: threading.Event,
) -> None:
    """
    Execute one import and record its outcome. Never raises.
    """

    state.mark_running()
    try:
        summary = runner(cancel_event)
    except CSVImportError as exc:
        logger.error("Import failed, rolled back. Error: %s", exc)
        state.mark_failed(str(exc))
        return
    except Exception as exc:  # noqa: BLE001
        logger.exception("Import failed with an unexpected error")
        state.mark_failed(f"Unexpected error: {exc}")
        return

    logger.info(
        "Import finished successfully rows_parsed=%d rows_inserted=%d rows_failed=%d",
        summary.rows_parsed,
        summary.rows_inserted,
        summary.rows_failed,
    )
    state.mark_succeeded(summary)


def build_import_scheduler(
    *,
    runner: ImportRunner,
    state: ImportRunState,
    cancel_event: threading.Event,
) -> BackgroundScheduler:
    """
    Build a *not yet started* scheduler with the startup import queued to run immediately.
    """

    scheduler = BackgroundScheduler(timezone="UTC")
    scheduler.add_job(
        run_import_job,
        trigger="date",
        args=(runner, state, cancel_event),
        id=IMPORT_JOB_ID,
        name="Startup CSV import",
        replace_existing=True,
        max_instances=1,
        misfire_grace_time=None,
    )
    return scheduler
