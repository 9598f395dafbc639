"""Tests for the unified log format and level handling"""

from __future__ import annotations

import logging
import re
import sys

import pytest

from formrelay.logging_config import TRACE, ISO8601Formatter, configure_logging, level_from_name


def make_record(level: int = logging.INFO, msg: str = "Relay started") -> logging.LogRecord:
    return logging.LogRecord(name="test", level=level, pathname="", lineno=0, msg=msg, args=(), exc_info=None)


class TestISO8601Formatter:
    def test_format(self):
        output = ISO8601Formatter(source="cli").format(make_record())

        assert re.match(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z \[cli\] INFO Relay started$", output)

    def test_trace_level_name(self):
        output = ISO8601Formatter().format(make_record(level=TRACE, msg="payload"))

        assert output.endswith("[relay] TRACE payload")

    def test_exception_is_appended(self):
        try:
            raise ValueError("bad payload")
        except ValueError:
            record = logging.LogRecord("test", logging.ERROR, "", 0, "failed", (), sys.exc_info())

        output = ISO8601Formatter().format(record)

        assert "failed\nTraceback" in output
        assert "ValueError: bad payload" in output


class TestLevels:
    @pytest.mark.parametrize(
        "name,debug,expected",
        [
            ("TRACE", None, TRACE),
            ("debug", None, logging.DEBUG),
            ("INFO", True, logging.DEBUG),
            ("WARNING", None, logging.WARNING),
            ("", None, logging.INFO),
            (None, None, logging.INFO),
            ("verbose", None, logging.INFO),
        ],
    )
    def test_level_from_name(self, name, debug, expected):
        assert level_from_name(name, debug) == expected

    def test_configure_logging_installs_one_handler(self):
        root = configure_logging(source="test", level=logging.DEBUG)
        configure_logging(source="test", level=logging.DEBUG)

        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, ISO8601Formatter)
        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("uvicorn").propagate is False

    def test_logger_trace_method(self, caplog):
        logger = logging.getLogger("formrelay.test")
        with caplog.at_level(TRACE, logger="formrelay.test"):
            logger.trace("raw payload")  # type: ignore[attr-defined]

        assert caplog.records[-1].levelname == "TRACE"
