"""
Tests for logging setup.
"""

import logging
from pathlib import Path

import pytest

from coursepack.core.observability.logging_config import configure_from_env, setup_logging


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestSetupLogging:
    """Tests for setup_logging()."""

    def test_default_level(self):
        setup_logging()
        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1

    def test_debug_format(self):
        setup_logging(level="debug")
        handler = logging.getLogger().handlers[0]
        assert "%(lineno)d" in handler.formatter._fmt

    def test_unknown_level_falls_back(self):
        setup_logging(level="LOUD")
        assert logging.getLogger().level == logging.WARNING

    def test_file_handler(self, tmp_path: Path):
        log_file = tmp_path / "pack.log"
        setup_logging(level="WARNING", log_file=str(log_file), log_file_level="DEBUG")
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 2

        logging.getLogger("coursepack.test").debug("hello file")
        for handler in root.handlers:
            handler.flush()
        assert "hello file" in log_file.read_text()
        root.handlers[1].close()

    def test_quiets_bs4(self):
        setup_logging(level="INFO")
        assert logging.getLogger("bs4").level == logging.WARNING


class TestConfigureFromEnv:
    """Tests for configure_from_env()."""

    def test_env_level_used_without_flag(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("CPB_LOG_LEVEL", "INFO")
        monkeypatch.delenv("CPB_LOG_FILE", raising=False)
        configure_from_env()
        assert logging.getLogger().level == logging.INFO

    def test_flag_beats_env(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("CPB_LOG_LEVEL", "INFO")
        monkeypatch.delenv("CPB_LOG_FILE", raising=False)
        configure_from_env("ERROR")
        assert logging.getLogger().level == logging.ERROR

    def test_log_file_from_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        log_file = tmp_path / "pack.log"
        monkeypatch.setenv("CPB_LOG_FILE", str(log_file))
        monkeypatch.setenv("CPB_LOG_FILE_LEVEL", "INFO")
        monkeypatch.delenv("CPB_LOG_LEVEL", raising=False)
        configure_from_env()
        root = logging.getLogger()
        assert [h.level for h in root.handlers] == [logging.WARNING, logging.INFO]
        root.handlers[1].close()
