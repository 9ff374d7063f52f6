"""
Unit tests for core.logger module.

Tests:
- format_kv_pairs quoting and truncation
- Logger key=value output through StructuredFormatter
- Logger JSON output
"""

import json
import logging

from monitorlizard.core.logger import Logger, StructuredFormatter, format_kv_pairs


class TestFormatKvPairs:
    """format_kv_pairs() helper."""

    def test_empty(self):
        assert format_kv_pairs({}) == ""

    def test_simple_values(self):
        assert format_kv_pairs({"a": 1, "b": "x"}) == " a=1 b=x"

    def test_quotes_values_with_spaces(self):
        assert format_kv_pairs({"error": "timed out"}) == ' error="timed out"'

    def test_quotes_empty_value(self):
        assert format_kv_pairs({"v": ""}) == ' v=""'

    def test_escapes_inner_quotes(self):
        assert format_kv_pairs({"v": 'say "hi"'}) == ' v="say \\"hi\\""'

    def test_truncation(self):
        out = format_kv_pairs({"v": "x" * 20}, max_value_length=5)
        assert "xxxxx...<truncated 15 chars>" in out

    def test_custom_prefix(self):
        assert format_kv_pairs({"a": 1}, prefix="") == "a=1"


class TestLogger:
    """Logger output."""

    def test_name(self):
        assert Logger("monitor").name == "monitor"

    def test_kv_output(self, caplog):
        logger = Logger("test.kv")
        with caplog.at_level(logging.INFO, logger="test.kv"):
            logger.info("tick_completed", relay="wss://r.example/", rtt=15)

        record = caplog.records[-1]
        assert record.getMessage() == "tick_completed"
        assert record.structured_kv == {"relay": "wss://r.example/", "rtt": 15}
        formatted = StructuredFormatter().format(record)
        assert formatted == "info test.kv tick_completed relay=wss://r.example/ rtt=15"

    def test_long_values_truncated(self, caplog):
        logger = Logger("test.trunc", max_value_length=4)
        with caplog.at_level(logging.INFO, logger="test.trunc"):
            logger.info("msg", blob="abcdefgh")
        assert caplog.records[-1].structured_kv["blob"].startswith("abcd...")

    def test_json_output(self, caplog):
        logger = Logger("test.json", json_output=True)
        with caplog.at_level(logging.WARNING, logger="test.json"):
            logger.warning("publish_failed", relay="wss://r.example/")

        payload = json.loads(caplog.records[-1].getMessage())
        assert payload["level"] == "warning"
        assert payload["service"] == "test.json"
        assert payload["message"] == "publish_failed"
        assert payload["relay"] == "wss://r.example/"

    def test_disabled_level_skipped(self, caplog):
        logger = Logger("test.level")
        with caplog.at_level(logging.ERROR, logger="test.level"):
            logger.debug("hidden")
        assert not [r for r in caplog.records if r.name == "test.level"]

    def test_exception_attaches_traceback(self, caplog):
        logger = Logger("test.exc")
        with caplog.at_level(logging.ERROR, logger="test.exc"):
            try:
                raise RuntimeError("boom")
            except RuntimeError:
                logger.exception("failed")
        record = caplog.records[-1]
        assert record.exc_info is not None
        assert "RuntimeError: boom" in StructuredFormatter().format(record)
