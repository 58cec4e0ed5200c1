"""
Tests for settings and logging configuration.
"""

import importlib
import json
import logging
import pytest
import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

import structlog

import kvsim
from kvsim import Store, configure_logging
from kvsim.config import Settings
from kvsim.exceptions import TransactionAbortedError


@pytest.fixture
def debug_logging():
    configure_logging("DEBUG", json=True)
    yield
    configure_logging("WARNING", json=False)


class TestSettings:
    """Test environment-driven settings."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("KVSIM_LOG_LEVEL", raising=False)
        monkeypatch.delenv("KVSIM_LOG_JSON", raising=False)

        settings = Settings()

        assert settings.LOG_LEVEL == "WARNING"
        assert settings.LOG_JSON is False

    def test_read_from_environment(self, monkeypatch):
        monkeypatch.setenv("KVSIM_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("KVSIM_LOG_JSON", "true")

        settings = Settings()

        assert settings.LOG_LEVEL == "DEBUG"
        assert settings.LOG_JSON is True


class TestLogging:
    """Test structured logging output."""

    def test_configure_sets_package_level(self, debug_logging):
        assert logging.getLogger("kvsim").level == logging.DEBUG

    def test_transaction_events_are_logged(self, debug_logging, caplog):
        store = Store([{"key": "total", "value": 1}])

        with caplog.at_level(logging.DEBUG, logger="kvsim"):
            tx = store.multi()
            tx.incr("missing")
            with pytest.raises(TransactionAbortedError):
                store.exec()

        events = [
            json.loads(record.getMessage())["event"]
            for record in caplog.records
            if record.name.startswith("kvsim")
        ]
        assert "transaction_opened" in events
        assert "transaction_rolled_back" in events

    def test_debug_events_filtered_at_warning(self, caplog):
        configure_logging("WARNING", json=True)
        store = Store()

        with caplog.at_level(logging.WARNING, logger="kvsim"):
            store.multi()
            store.discard()

        assert [record for record in caplog.records if record.name.startswith("kvsim")] == []

    def test_unknown_level_raises_error(self):
        with pytest.raises(ValueError, match="Unknown log level 'VERBOSE'"):
            configure_logging("verbose")

    def test_unknown_level_leaves_package_logger_alone(self, debug_logging):
        with pytest.raises(ValueError):
            configure_logging("loud")

        assert logging.getLogger("kvsim").level == logging.DEBUG


class TestImportSideEffects:
    """Test that importing kvsim leaves process-wide logging alone."""

    @pytest.fixture
    def unconfigured_structlog(self):
        structlog.reset_defaults()
        yield
        configure_logging("WARNING", json=False)

    def test_import_does_not_configure_structlog(self, unconfigured_structlog):
        importlib.reload(kvsim)

        assert not structlog.is_configured()

    def test_import_ignores_bad_level_in_environment(self, unconfigured_structlog, monkeypatch):
        monkeypatch.setenv("KVSIM_LOG_LEVEL", "verbose")

        try:
            importlib.reload(kvsim.config)
            importlib.reload(kvsim)

            assert kvsim.settings.LOG_LEVEL == "verbose"
            assert not structlog.is_configured()
        finally:
            monkeypatch.undo()
            importlib.reload(kvsim.config)
            importlib.reload(kvsim)
