from __future__ import annotations

import logging
import os
import threading
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from app.config import get_import_settings, get_server_settings
from app.domain.user_document import ImportSummary
from app.logging_utils import configure_logging
from app.scheduler.jobs import (
    ImportRunner,
    ImportRunSnapshot,
    ImportRunState,
    build_import_scheduler,
)
from app.schemas.health import AgeBucketResponse, HealthResponse, ImportStatusResponse
from app.services.batch_loader import MAX_BATCH_SIZE

LIVENESS_TEXT = "CSV -> JSON -> Postgres Importer running..."

logger = logging.getLogger(__name__)


def _validate_env() -> None:
    """
    Validate required environment variables at startup.

    Raises RuntimeError listing every missing or invalid variable so the
    operator can fix all problems in one restart cycle.
    """

    from db.config import load_env_files

    load_env_files()

    errors: list[str] = []

    database_url = os.getenv("DATABASE_URL", "").strip()
    cloud_database_url = os.getenv("CLOUD_DATABASE_URL", "").strip()
    local_database_url = os.getenv("LOCAL_DATABASE_URL", "").strip()
    if not (database_url or cloud_database_url or local_database_url):
        errors.append(
            "No database URL configured. Set DATABASE_URL "
            "(or CLOUD_DATABASE_URL / LOCAL_DATABASE_URL)."
        )

    raw_batch_size = os.getenv("BATCH_SIZE")
    if raw_batch_size is not None:
        try:
            batch_size = int(raw_batch_size.strip(), 10)
        except ValueError:
            batch_size = 0
        if not 1 <= batch_size <= MAX_BATCH_SIZE:
            errors.append(
                f"BATCH_SIZE='{raw_batch_size}' is not an integer between 1 and {MAX_BATCH_SIZE}."
            )

    if errors:
        raise RuntimeError(
            "Startup validation failed: missing or invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


def _check_db() -> None:
    """Open a session and run SELECT 1. Raises RuntimeError if the DB is unreachable."""
    from sqlalchemy import text

    from db.session import session_scope

    try:
        with session_scope() as db:
            db.execute(text("SELECT 1"))
    except Exception as exc:
        raise RuntimeError("Database unavailable.") from exc


def _default_import_runner(cancel_event: threading.Event) -> ImportSummary:
    from app.services.csv_import_service import run_import_from_settings

    return run_import_from_settings(cancel_event=cancel_event)


def _to_status_response(snapshot: ImportRunSnapshot) -> ImportStatusResponse:
    summary = snapshot.summary
    report = summary.report if summary is not None else None
    return ImportStatusResponse(
        status=snapshot.status,
        csv_path=snapshot.csv_path,
        started_at=snapshot.started_at,
        finished_at=snapshot.finished_at,
        rows_parsed=summary.rows_parsed if summary is not None else None,
        rows_inserted=summary.rows_inserted if summary is not None else None,
        rows_failed=summary.rows_failed if summary is not None else None,
        error=snapshot.error,
        age_distribution=(
            [
                AgeBucketResponse(
                    label=bucket.label,
                    count=bucket.count,
                    percentage=bucket.percentage,
                )
                for bucket in report.buckets
            ]
            if report is not None
            else None
        ),
    )


def create_app(
    *,
    import_runner: ImportRunner | None = None,
    startup_check: Callable[[], None] | None = None,
    import_on_startup: bool | None = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    The CSV import starts in the background once the database is reachable;
    the listener keeps serving whether the import succeeds or fails.
    """

    if startup_check is None:
        _validate_env()
        startup_check = _check_db
    configure_logging()

    settings = get_import_settings()
    run_on_startup = settings.import_on_startup if import_on_startup is None else import_on_startup
    runner = import_runner or _default_import_runner
    state = ImportRunState(csv_path=settings.csv_path)
    cancel_event = threading.Event()

    @asynccontextmanager
    async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
        """Check DB connectivity, queue the import on boot; cancel and wait for it on exit."""
        startup_check()
        logger.info("Database connectivity confirmed")

        scheduler = None
        if run_on_startup:
            logger.info("Using CSV_PATH=%s", settings.csv_path)
            scheduler = build_import_scheduler(
                runner=runner,
                state=state,
                cancel_event=cancel_event,
            )
            scheduler.start()
            logger.info("Starting CSV import automatically")
        else:
            state.mark_skipped()
            logger.info("IMPORT_ON_STARTUP is disabled; no import queued")
        try:
            yield
        finally:
            cancel_event.set()
            if scheduler is not None:
                scheduler.shutdown(wait=True)
                logger.info("Scheduler shut down")

    application = FastAPI(
        title="CSV User Importer",
        version="1.0.0",
        lifespan=_lifespan,
    )
    application.state.import_state = state
    application.state.cancel_event = cancel_event

    @application.get("/", response_class=PlainTextResponse)
    def liveness() -> str:
        return LIVENESS_TEXT

    @application.get("/health", response_model=HealthResponse)
    def healthcheck() -> HealthResponse:
        return HealthResponse(importer=_to_status_response(state.snapshot()))

    return application


def __getattr__(name: str) -> object:
    # `uvicorn app.main:app` resolves the application lazily so that importing
    # this module (e.g. from tests) does not require a configured database.
    if name == "app":
        return create_app()
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def main() -> None:
    import uvicorn

    configure_logging()

    port = get_server_settings().port
    logger.info("Server starting on port %d...", port)
    uvicorn.run("app.main:app", host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
