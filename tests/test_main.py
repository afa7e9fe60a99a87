"""
tests/test_main.py

HTTP surface: liveness text and the import status on /health.
"""

from __future__ import annotations

import threading
import time

import pytest
from fastapi.testclient import TestClient

import app.main as app_main
from app.domain.user_document import AgeDistributionReport, ImportSummary
from app.errors import MalformedCSVError
from app.main import LIVENESS_TEXT, _validate_env, create_app
from app.services.age_distribution_service import build_report
from app.services.batch_loader import MAX_BATCH_SIZE


def _wait_for_import(client: TestClient, timeout: float = 5.0) -> dict:
    deadline = time.monotonic() + timeout
    while True:
        payload = client.get("/health").json()
        if payload["importer"]["status"] not in {"pending", "running"}:
            return payload
        if time.monotonic() > deadline:
            raise AssertionError(f"import did not finish: {payload}")
        time.sleep(0.05)


def test_liveness_endpoint_returns_plain_text() -> None:
    app = create_app(startup_check=lambda: None, import_on_startup=False)

    with TestClient(app) as client:
        response = client.get("/")

    assert response.status_code == 200
    assert response.text == LIVENESS_TEXT


def test_health_reports_skipped_import() -> None:
    app = create_app(startup_check=lambda: None, import_on_startup=False)

    with TestClient(app) as client:
        payload = client.get("/health").json()

    assert payload["status"] == "ok"
    assert payload["importer"]["status"] == "skipped"


def test_startup_import_runs_in_background() -> None:
    report: AgeDistributionReport = build_report(4, (1, 1, 1, 1))

    def _runner(event: threading.Event) -> ImportSummary:
        return ImportSummary(rows_parsed=5, rows_inserted=4, rows_failed=1, report=report)

    app = create_app(import_runner=_runner, startup_check=lambda: None, import_on_startup=True)

    with TestClient(app) as client:
        payload = _wait_for_import(client)

    importer = payload["importer"]
    assert importer["status"] == "succeeded"
    assert importer["rows_inserted"] == 4
    assert importer["rows_failed"] == 1
    assert [bucket["percentage"] for bucket in importer["age_distribution"]] == [25, 25, 25, 25]


def test_failed_import_keeps_listener_serving() -> None:
    def _runner(event: threading.Event) -> ImportSummary:
        raise MalformedCSVError("No headers found in CSV.")

    app = create_app(import_runner=_runner, startup_check=lambda: None, import_on_startup=True)

    with TestClient(app) as client:
        payload = _wait_for_import(client)
        assert client.get("/").status_code == 200

    assert payload["importer"]["status"] == "failed"
    assert payload["importer"]["error"] == "No headers found in CSV."


def test_shutdown_signals_cancellation() -> None:
    started = threading.Event()
    observed: list[bool] = []

    def _runner(event: threading.Event) -> ImportSummary:
        started.set()
        observed.append(event.wait(timeout=5))
        return ImportSummary(rows_parsed=0, rows_inserted=0, rows_failed=0)

    app = create_app(import_runner=_runner, startup_check=lambda: None, import_on_startup=True)

    with TestClient(app):
        assert started.wait(timeout=5)

    assert observed == [True]
    assert app.state.cancel_event.is_set()


@pytest.fixture
def startup_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    monkeypatch.setattr("db.config.load_env_files", lambda project_root=None: None)
    for name in ("CLOUD_DATABASE_URL", "LOCAL_DATABASE_URL", "BATCH_SIZE"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("DATABASE_URL", "postgresql://user:pw@localhost/db")
    return monkeypatch


@pytest.mark.parametrize("raw", ["0", "abc", str(MAX_BATCH_SIZE + 1)])
def test_validate_env_rejects_unusable_batch_size(startup_env: pytest.MonkeyPatch, raw: str) -> None:
    startup_env.setenv("BATCH_SIZE", raw)

    with pytest.raises(RuntimeError, match="BATCH_SIZE"):
        _validate_env()


def test_validate_env_accepts_largest_batch_size(startup_env: pytest.MonkeyPatch) -> None:
    startup_env.setenv("BATCH_SIZE", str(MAX_BATCH_SIZE))

    _validate_env()


def test_main_configures_logging_before_starting_server(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[str] = []
    monkeypatch.setattr(app_main, "configure_logging", lambda: calls.append("configure_logging"))
    monkeypatch.setattr("uvicorn.run", lambda *args, **kwargs: calls.append("uvicorn.run"))

    app_main.main()

    assert calls == ["configure_logging", "uvicorn.run"]
