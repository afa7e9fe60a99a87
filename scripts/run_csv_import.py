"""
Run one CSV import from the CLI, without the HTTP listener.
"""

from __future__ import annotations

import argparse
import json
import signal
import threading

from app.config import get_import_settings
from app.errors import CSVImportError, ImportPersistenceError
from app.logging_utils import configure_logging
from app.services.batch_loader import MAX_BATCH_SIZE
from app.services.csv_import_service import CSVImportService
from db.session import SessionLocal, dispose_engine


def main() -> int:
    settings = get_import_settings()
    parser = argparse.ArgumentParser(description="Import a users CSV file into PostgreSQL.")
    parser.add_argument(
        "--path",
        dest="path",
        default=settings.csv_path,
        help="CSV file to import (defaults to CSV_PATH).",
    )
    parser.add_argument(
        "--batch-size",
        dest="batch_size",
        type=int,
        default=settings.batch_size,
        help="Rows per INSERT statement (defaults to BATCH_SIZE).",
    )
    args = parser.parse_args()
    if not 1 <= args.batch_size <= MAX_BATCH_SIZE:
        parser.error(f"--batch-size must be between 1 and {MAX_BATCH_SIZE}")

    configure_logging()

    # Ctrl+C stops before the next batch and rolls the import back.
    cancel_event = threading.Event()
    signal.signal(signal.SIGINT, lambda signum, frame: cancel_event.set())

    service = CSVImportService(
        session_factory=SessionLocal,
        batch_size=args.batch_size,
        max_validation_errors=settings.max_validation_errors,
        log_validation_errors=settings.log_validation_errors,
    )
    try:
        summary = service.import_file(args.path, cancel_event=cancel_event)
    except ImportPersistenceError as exc:
        print(json.dumps({"status": "failed", **exc.to_dict()}, indent=2))
        return 1
    except CSVImportError as exc:
        print(json.dumps({"status": "failed", "message": str(exc)}, indent=2))
        return 1
    finally:
        dispose_engine()

    payload = {
        "status": "succeeded",
        "rows_parsed": summary.rows_parsed,
        "rows_inserted": summary.rows_inserted,
        "rows_failed": summary.rows_failed,
        "validation_errors": [
            {
                "row_number": error.row_number,
                "column": error.column,
                "message": error.message,
                "value": error.value,
            }
            for error in summary.validation_errors
        ],
        "age_distribution": summary.report.as_dict() if summary.report is not None else None,
        "report_error": summary.report_error,
    }
    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
