"""
Logging Configuration Tests
===========================

Root handler setup, JSON rendering through structlog and third-party
logger levels.
"""

import json
import logging

import pytest

from app.core.logging_config import NOISY_LOGGERS, setup_logging


@pytest.fixture
def restore_logging():
    """Put the root logger back the way the test runner had it."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    noisy_levels = {name: logging.getLogger(name).level for name in NOISY_LOGGERS}

    yield root

    for handler in list(root.handlers):
        root.removeHandler(handler)
        if handler not in handlers:
            handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
    for name, noisy_level in noisy_levels.items():
        logging.getLogger(name).setLevel(noisy_level)


def flush(root):
    for handler in root.handlers:
        handler.flush()


class TestLoggingConfig:

    def test_json_record_parses(self, restore_logging, tmp_path):
        log_file = tmp_path / "logs" / "docuvalle.log"
        setup_logging("INFO", json_format=True, log_file=log_file)

        logging.getLogger("docuvalle.test").warning("Analyzed %s", "doc")
        flush(restore_logging)

        record = json.loads(log_file.read_text(encoding="utf-8").strip().splitlines()[-1])
        assert record["event"] == "Analyzed doc"
        assert record["level"] == "warning"
        assert record["logger"] == "docuvalle.test"
        assert "timestamp" in record

    def test_json_record_includes_exception(self, restore_logging, tmp_path):
        log_file = tmp_path / "docuvalle.log"
        setup_logging("INFO", json_format=True, log_file=log_file)

        try:
            raise ValueError("bad bytes")
        except ValueError:
            logging.getLogger("docuvalle.test").exception("Analysis failed")
        flush(restore_logging)

        record = json.loads(log_file.read_text(encoding="utf-8").strip().splitlines()[-1])
        assert record["event"] == "Analysis failed"
        assert record["level"] == "error"
        assert "ValueError: bad bytes" in record["exception"]

    def test_plain_format(self, restore_logging, tmp_path):
        log_file = tmp_path / "docuvalle.log"
        setup_logging("INFO", json_format=False, log_file=log_file)

        logging.getLogger("docuvalle.test").info("Analyzed %s", "doc")
        flush(restore_logging)

        line = log_file.read_text(encoding="utf-8").strip().splitlines()[-1]
        assert "Analyzed doc" in line
        assert "docuvalle.test" in line
        with pytest.raises(ValueError):
            json.loads(line)

    def test_log_file_directory_is_created(self, restore_logging, tmp_path):
        log_file = tmp_path / "nested" / "logs" / "docuvalle.log"

        setup_logging("INFO", log_file=log_file)

        assert log_file.parent.is_dir()
        assert log_file.exists()

    def test_level_filters_records(self, restore_logging, tmp_path):
        log_file = tmp_path / "docuvalle.log"
        setup_logging("WARNING", json_format=True, log_file=log_file)

        logging.getLogger("docuvalle.test").info("hidden")
        logging.getLogger("docuvalle.test").error("shown")
        flush(restore_logging)

        events = [json.loads(line)["event"] for line in log_file.read_text(encoding="utf-8").splitlines()]
        assert events == ["shown"]
        assert restore_logging.level == logging.WARNING

    def test_existing_handlers_are_replaced(self, restore_logging, tmp_path):
        stale = logging.NullHandler()
        restore_logging.addHandler(stale)

        setup_logging("INFO")
        setup_logging("INFO", log_file=tmp_path / "docuvalle.log")

        handlers = restore_logging.handlers
        assert stale not in handlers
        assert len(handlers) == 2
        assert sum(type(h) is logging.StreamHandler for h in handlers) == 1
        assert sum(isinstance(h, logging.FileHandler) for h in handlers) == 1

    def test_stream_handler_writes_stderr(self, restore_logging, capsys):
        setup_logging("INFO", json_format=True)

        logging.getLogger("docuvalle.test").warning("to stderr")
        flush(restore_logging)

        captured = capsys.readouterr()
        assert json.loads(captured.err.strip().splitlines()[-1])["event"] == "to stderr"
        assert captured.out == ""

    def test_noisy_loggers_quieted(self, restore_logging):
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.DEBUG)

        setup_logging("DEBUG")

        for name in NOISY_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING
        assert not logging.getLogger("httpx").isEnabledFor(logging.INFO)
