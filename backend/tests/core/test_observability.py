"""Structured Logging & Settings — JSON log shape and environment-driven config."""

import json
import logging

from swapmarket.config import Settings
from swapmarket.infrastructure.observability import JSONFormatter


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "swapmarket.test", logging.WARNING, __file__, 1, "Swap %s", ("cancelled",), None,
    )
    record.__dict__.update(extra)
    return record


def test_json_formatter_includes_core_fields():
    log = json.loads(JSONFormatter().format(_record()))
    assert log["level"] == "WARNING"
    assert log["logger"] == "swapmarket.test"
    assert log["message"] == "Swap cancelled"
    assert "timestamp" in log


def test_json_formatter_surfaces_known_extras():
    log = json.loads(JSONFormatter().format(
        _record(transaction_id="t-1", attempt=3, unrelated="x"),
    ))
    assert log["transaction_id"] == "t-1"
    assert log["attempt"] == 3
    assert "unrelated" not in log


def test_postgres_url_rewritten_for_asyncpg(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql://u:p@host:5432/db")
    settings = Settings()
    assert settings.database_url == "postgresql+asyncpg://u:p@host:5432/db"


def test_notification_retry_settings_from_env(monkeypatch):
    monkeypatch.setenv("NOTIFICATION_MAX_RETRIES", "2")
    monkeypatch.setenv("NOTIFICATION_BASE_DELAY_MS", "50")
    settings = Settings()
    assert settings.notification_max_retries == 2
    assert settings.notification_base_delay_ms == 50
