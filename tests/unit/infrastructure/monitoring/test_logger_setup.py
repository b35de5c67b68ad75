import logging
import logging.handlers
from pathlib import Path

import pytest

from localhub_cache.infrastructure.config.settings import set_config_for_testing
from localhub_cache.infrastructure.monitoring.logger_setup import (
    DEFAULT_LOG_LEVEL,
    configure_logging,
    parse_log_level,
    setup_logging,
)

@pytest.fixture(autouse=True)
def restore_root_logger():
    """Puts the root logger back the way pytest configured it."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)

@pytest.mark.parametrize("name, expected", [
    ("debug", logging.DEBUG),
    ("INFO", logging.INFO),
    ("verbose", DEFAULT_LOG_LEVEL),
    (None, DEFAULT_LOG_LEVEL),
])
def test_parse_log_level(name, expected):
    assert parse_log_level(name) == expected

def test_setup_logging_adds_rotating_file(tmp_path: Path):
    log_file = tmp_path / "cache.log"

    setup_logging(logging.INFO, log_file=str(log_file), max_bytes=2048, backup_count=2)
    logging.getLogger("localhub_cache.test").info("sweep finished")

    root = logging.getLogger()
    file_handlers = [h for h in root.handlers if isinstance(h, logging.handlers.RotatingFileHandler)]
    assert len(file_handlers) == 1
    assert file_handlers[0].maxBytes == 2048
    assert file_handlers[0].backupCount == 2
    file_handlers[0].flush()
    assert "MainThread" in log_file.read_text(encoding="utf-8")
    assert "sweep finished" in log_file.read_text(encoding="utf-8")

def test_setup_logging_replaces_previous_handlers():
    setup_logging(logging.WARNING)
    setup_logging(logging.WARNING)

    assert len(logging.getLogger().handlers) == 1

def test_configure_logging_reads_config(tmp_path: Path):
    set_config_for_testing({"logging.level": "debug", "logging.file": str(tmp_path / "cli.log")})

    assert configure_logging() == logging.DEBUG
    assert logging.getLogger().level == logging.DEBUG
    assert (tmp_path / "cli.log").exists()

def test_command_line_level_wins(tmp_path: Path):
    set_config_for_testing({"logging.level": "debug"})

    assert configure_logging("error") == logging.ERROR
