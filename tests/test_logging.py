"""Tests for logging setup and formatters."""

import json
import logging

import pytest

from opendrive.utils.logging import (
    ColoredFormatter, JSONFormatter, get_logger, log_with_context, setup_logging
)


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    package_level = logging.getLogger("opendrive").level
    yield root
    logging.getLogger("opendrive").setLevel(package_level)
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def _record(msg="hello", **extra) -> logging.LogRecord:
    record = logging.makeLogRecord({"name": "opendrive.test", "levelno": logging.INFO,
                                    "levelname": "INFO", "msg": msg})
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestFormatters:
    def test_json_formatter_collects_extra(self):
        payload = json.loads(JSONFormatter().format(_record(entity_id="f1")))
        assert payload["message"] == "hello"
        assert payload["logger"] == "opendrive.test"
        assert payload["extra"] == {"entity_id": "f1"}

    def test_json_formatter_without_extra(self):
        payload = json.loads(JSONFormatter().format(_record()))
        assert "extra" not in payload

    def test_colored_formatter_leaves_record_untouched(self):
        record = _record()
        output = ColoredFormatter(fmt="%(levelname)s %(message)s").format(record)
        assert "\033[32mINFO" in output
        assert record.levelname == "INFO"


class TestSetupLogging:
    def test_json_file_handler(self, tmp_path, restore_root_logger):
        log_file = tmp_path / "logs" / "app.log"
        setup_logging(level="DEBUG", enable_json=True, log_file=str(log_file))

        root = restore_root_logger
        assert root.level == logging.DEBUG
        assert any(isinstance(h, logging.FileHandler) for h in root.handlers)
        assert logging.getLogger("opendrive").level == logging.DEBUG
        assert logging.getLogger("pymongo").level == logging.WARNING

        get_logger("opendrive.test").warning("written")
        for handler in root.handlers:
            handler.flush()
        lines = [json.loads(line) for line in log_file.read_text().splitlines()]
        assert lines[-1]["message"] == "written"


class TestLogWithContext:
    def test_context_becomes_record_attributes(self, caplog):
        logger = get_logger("opendrive.test")
        with caplog.at_level(logging.INFO, logger="opendrive.test"):
            log_with_context(logger, "info", "uploaded", entity_id="f1", size=3)
        record = caplog.records[-1]
        assert record.entity_id == "f1"
        assert record.size == 3

    def test_disabled_level_is_skipped(self, caplog):
        logger = get_logger("opendrive.test.quiet")
        logger.setLevel(logging.ERROR)
        try:
            with caplog.at_level(logging.DEBUG):
                log_with_context(logger, "info", "ignored")
            assert not [r for r in caplog.records if r.name == "opendrive.test.quiet"]
        finally:
            logger.setLevel(logging.NOTSET)


class TestConfigureLoggers:
    def test_package_logger_follows_level(self, restore_root_logger):
        setup_logging(level="WARNING")
        assert logging.getLogger("opendrive").level == logging.WARNING
        assert not get_logger("opendrive.services.file_service").isEnabledFor(logging.INFO)
