"""Unit tests for structured logging configuration."""

import json
import logging

import pytest

from cpgscope.logging_config import (
    ROOT_LOGGER_NAME,
    HumanFormatter,
    JSONFormatter,
    LogContext,
    configure_logging,
    get_context,
    get_logger,
    log_operation,
)


def make_record(message="hello", **extra):
    record = logging.LogRecord(
        name="cpgscope.test", level=logging.INFO, pathname=__file__, lineno=1,
        msg=message, args=None, exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestGetLogger:
    def test_nests_under_root(self):
        assert get_logger("somewhere.else").name == "cpgscope.somewhere.else"

    def test_keeps_package_names(self):
        assert get_logger("cpgscope.algorithms").name == "cpgscope.algorithms"
        assert get_logger(ROOT_LOGGER_NAME).name == ROOT_LOGGER_NAME


class TestLogContext:
    def test_fields_are_scoped(self):
        with LogContext(operation="pagerank"):
            with LogContext(node_count=3):
                assert get_context() == {"operation": "pagerank", "node_count": 3}
            assert get_context() == {"operation": "pagerank"}
        assert get_context() == {}


class TestFormatters:
    def test_json_includes_extra_and_context(self):
        record = make_record(iterations=14, context={"operation": "pagerank"})
        payload = json.loads(JSONFormatter().format(record))

        assert payload["message"] == "hello"
        assert payload["level"] == "INFO"
        assert payload["logger"] == "cpgscope.test"
        assert payload["iterations"] == 14
        assert payload["operation"] == "pagerank"

    def test_human_appends_sorted_fields(self):
        line = HumanFormatter().format(make_record(b=2, a=1))
        assert line.endswith("cpgscope.test: hello a=1 b=2")


class TestConfigureLogging:
    def test_replaces_handlers(self):
        configure_logging(level="DEBUG")
        root = configure_logging(level="WARNING")

        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
        assert root.propagate is False

    def test_json_file_output(self, tmp_path):
        log_file = tmp_path / "logs" / "cpgscope.log"
        configure_logging(level="INFO", json_output=True, log_file=log_file)

        with LogContext(detector="GodObjectDetector"):
            get_logger("cpgscope.test").info("Detector complete", extra={"findings_count": 2})
        for handler in logging.getLogger(ROOT_LOGGER_NAME).handlers:
            handler.flush()

        payload = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert payload["message"] == "Detector complete"
        assert payload["detector"] == "GodObjectDetector"
        assert payload["findings_count"] == 2


class TestLogOperation:
    def test_logs_completion_with_context(self, caplog):
        @log_operation("sum_values")
        def sum_values(values):
            return sum(values)

        with caplog.at_level(logging.DEBUG, logger=ROOT_LOGGER_NAME):
            assert sum_values([1, 2, 3]) == 6

        messages = [r.getMessage() for r in caplog.records]
        assert messages == ["Starting sum_values", "Completed sum_values"]
        assert "duration_seconds" in caplog.records[-1].__dict__

    def test_reraises_failures(self, caplog):
        @log_operation("explode")
        def explode():
            raise KeyError("missing")

        with caplog.at_level(logging.DEBUG, logger=ROOT_LOGGER_NAME):
            with pytest.raises(KeyError):
                explode()

        assert caplog.records[-1].getMessage() == "Failed explode"
