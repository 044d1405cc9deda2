import logging

import pytest
import structlog
from orderdesk.utils.logging import bind_order, clear_context, configure_logging, get_log_level


@pytest.fixture()
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        handler.close()
    root.handlers = handlers
    root.setLevel(level)
    structlog.reset_defaults()
    clear_context()


class TestLogLevel:
    def test_test_environment_is_quiet(self, monkeypatch):
        monkeypatch.setenv("PROTEAN_ENV", "test")
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        assert get_log_level() == "WARNING"

    def test_explicit_override(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        assert get_log_level() == "DEBUG"


class TestConfigureLogging:
    def test_log_files_created(self, tmp_path, restore_logging):
        configure_logging(tmp_path)
        assert (tmp_path / "orderdesk.log").exists()
        assert (tmp_path / "orderdesk_error.log").exists()

    def test_order_id_bound_to_context(self, restore_logging):
        bind_order("ord-123")
        assert structlog.contextvars.get_contextvars()["order_id"] == "ord-123"
        clear_context()
        assert "order_id" not in structlog.contextvars.get_contextvars()
