"""Tests for structured logging."""

import json
import logging

import pytest
from pydantic import ValidationError

from config.settings import LoggingSettings
from services.logging_config import (
    CalculationLogger,
    JsonFormatter,
    ReadableFormatter,
    configure_logging,
    get_logger,
    log_performance,
    user_id_var,
)


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    level = root.level
    yield root
    for handler in list(root.handlers):
        if isinstance(handler.formatter, (JsonFormatter, ReadableFormatter)):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


def _record(message="hello %s", args=("world",)):
    return logging.LogRecord("test", logging.INFO, __file__, 10, message, args, None)


class TestFormatters:

    def test_json(self):
        record = _record()
        record.extra_data = {"step": "aggregate"}
        data = json.loads(JsonFormatter().format(record))
        assert data["message"] == "hello world"
        assert data["level"] == "INFO"
        assert data["step"] == "aggregate"
        assert data["timestamp"].endswith("Z")

    def test_json_includes_user(self):
        token = user_id_var.set("user-9")
        try:
            data = json.loads(JsonFormatter().format(_record()))
        finally:
            user_id_var.reset(token)
        assert data["user_id"] == "user-9"

    def test_readable(self):
        record = _record()
        record.extra_data = {"jurisdiction": "US"}
        line = ReadableFormatter().format(record)
        assert "[test] hello world" in line
        assert "jurisdiction=US" in line


class TestContextLogger:

    def test_merges_context(self):
        logger = get_logger("test", component="classifier")
        _, kwargs = logger.process("msg", {"extra": {"extra_data": {"step": "score"}}})
        assert kwargs["extra"]["extra_data"] == {"component": "classifier", "step": "score"}

    def test_adds_current_user(self):
        token = user_id_var.set("user-3")
        try:
            _, kwargs = get_logger("test").process("msg", {})
        finally:
            user_id_var.reset(token)
        assert kwargs["extra"]["extra_data"]["user_id"] == "user-3"


class TestConfigureLogging:

    def test_json_file(self, restore_root_logger, tmp_path):
        log_file = tmp_path / "logs" / "engine.log"
        configure_logging(LoggingSettings(level="debug", json_output=True, log_file=log_file))

        assert restore_root_logger.level == logging.DEBUG
        assert len(restore_root_logger.handlers) == 2
        assert isinstance(restore_root_logger.handlers[0].formatter, JsonFormatter)
        assert log_file.parent.exists()

    def test_readable_console(self, restore_root_logger):
        configure_logging(LoggingSettings(level="WARNING"))
        assert isinstance(restore_root_logger.handlers[0].formatter, ReadableFormatter)
        assert restore_root_logger.level == logging.WARNING

    def test_invalid_level(self):
        with pytest.raises(ValidationError):
            LoggingSettings(level="verbose")


class TestCalculationLogger:

    def test_audit_trail(self, caplog):
        calc_log = CalculationLogger("user-1", "Q1 2024", "US")
        with caplog.at_level(logging.DEBUG, logger="calculation"):
            calc_log.start_calculation(filing_status="single")
            step = calc_log.log_step("aggregate", transactions=3)
            calc_log.complete_step("aggregate", step)
            calc_log.log_components({"federal_income_tax": 415.0})
            calc_log.log_result(3_858.4, 5_468.53, 0.19)

        messages = [r.getMessage() for r in caplog.records]
        assert messages[0] == "Starting tax calculation"
        assert messages[-1] == "Calculation complete"
        final = caplog.records[-1].extra_data
        assert final["user_id"] == "user-1"
        assert final["jurisdiction"] == "US"
        assert "aggregate" in final["step_times"]


class TestLogPerformance:

    def test_sync(self):
        @log_performance()
        def add(a, b):
            return a + b

        assert add(2, 3) == 5
        assert add.__name__ == "add"

    @pytest.mark.asyncio
    async def test_async(self):
        @log_performance("double")
        async def double(x):
            return x * 2

        assert await double(4) == 8

    def test_reraises(self, caplog):
        @log_performance()
        def fail():
            raise ValueError("boom")

        with caplog.at_level(logging.ERROR, logger="performance"):
            with pytest.raises(ValueError):
                fail()
        assert any("fail failed" in r.getMessage() for r in caplog.records)
