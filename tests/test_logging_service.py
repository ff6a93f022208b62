"""Tests for the logging service."""

import json
import logging
import os
import tempfile
from io import StringIO
from pathlib import Path
from unittest.mock import patch

import pytest
import structlog
from hypothesis import given, settings, strategies as st

from gamedex.services.logging import CREDENTIAL_KEYS, LoggingService, setup_logging


def reset_logging() -> None:
    structlog.reset_defaults()
    logging.getLogger().handlers.clear()


def teardown_function() -> None:
    reset_logging()


RESERVED_KEYS = {"self", "event", "level", "logger", "timestamp", "exc_info", "stack_info", "positional_args"} | CREDENTIAL_KEYS


def configure(stream: StringIO, environment: str, **kwargs) -> LoggingService:
    with patch.dict(os.environ, {"ENVIRONMENT": environment}):
        service = LoggingService(stream=stream, **kwargs)
    service.configure()
    return service


class TestLoggingService:
    """Test cases for LoggingService."""

    def teardown_method(self) -> None:
        reset_logging()

    def test_development_logging_format(self) -> None:
        stream = StringIO()
        service = configure(stream, "development", log_level="INFO")

        service.get_logger("test").info("test message", key="value")

        output = stream.getvalue()
        assert "test message" in output
        assert "key=value" in output
        assert not output.strip().startswith("{")

    def test_production_logging_format(self) -> None:
        stream = StringIO()
        service = configure(stream, "production", log_level="INFO")

        service.get_logger("test").info("test message", key="value")

        parsed = json.loads(stream.getvalue().strip().splitlines()[0])
        assert parsed["event"] == "test message"
        assert parsed["key"] == "value"
        assert parsed["level"] == "info"
        assert "timestamp" in parsed

    def test_console_defaults_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        with patch.dict(os.environ, {"ENVIRONMENT": "production"}):
            service = LoggingService(log_level="INFO")
        service.configure()

        service.get_logger("test").info("not on stdout")

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "not on stdout" in captured.err

    def test_credentials_are_masked(self) -> None:
        stream = StringIO()
        service = configure(stream, "production", log_level="INFO")

        service.get_logger("test").info("token exchange", client_secret="hunter2", access_token="abc", client_id="id")

        parsed = json.loads(stream.getvalue().strip())
        assert parsed["client_secret"] == "***"
        assert parsed["access_token"] == "***"
        assert parsed["client_id"] == "id"
        assert "hunter2" not in stream.getvalue()

    def test_level_filtering(self) -> None:
        stream = StringIO()
        service = configure(stream, "production", log_level="WARNING")
        logger = service.get_logger("test")

        logger.info("quiet")
        logger.warning("loud")

        output = stream.getvalue()
        assert "quiet" not in output
        assert "loud" in output

    def test_console_can_be_disabled(self) -> None:
        stream = StringIO()
        service = configure(stream, "production", console=False)

        service.get_logger("test").error("nowhere")

        assert stream.getvalue() == ""

    def test_httpx_request_logs_suppressed(self) -> None:
        configure(StringIO(), "production", log_level="DEBUG")

        assert logging.getLogger("httpx").level == logging.WARNING

    def test_file_logging_setup(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            log_dir = Path(temp_dir)
            service = configure(StringIO(), "production", log_level="INFO", log_dir=log_dir)

            service.get_logger("test").info("test file message", data="test")

            content = (log_dir / "app.log").read_text(encoding="utf-8")
            parsed = json.loads(content.strip())
            assert parsed["event"] == "test file message"
            assert parsed["data"] == "test"
            assert (log_dir / "error.log").exists()

    def test_error_file_logging(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            log_dir = Path(temp_dir)
            service = configure(StringIO(), "production", log_level="DEBUG", log_dir=log_dir)
            logger = service.get_logger("test")

            logger.info("routine")
            logger.error("test error message", status_code=503)

            lines = (log_dir / "error.log").read_text(encoding="utf-8").strip().splitlines()
            assert len(lines) == 1
            parsed = json.loads(lines[0])
            assert parsed["event"] == "test error message"
            assert parsed["status_code"] == 503
            assert parsed["level"] == "error"


class TestStructuredLoggingProperties:
    """Property-based tests for structured logging consistency."""

    def teardown_method(self) -> None:
        reset_logging()

    @given(
        log_level=st.sampled_from(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
        logger_name=st.text(min_size=1, max_size=50).filter(lambda x: x.isidentifier()),
        message=st.text(min_size=1, max_size=200),
        context_data=st.dictionaries(
            keys=st.text(min_size=1, max_size=20).filter(lambda x: x.isidentifier() and x not in RESERVED_KEYS),
            values=st.one_of(
                st.text(max_size=100),
                st.integers(),
                st.floats(allow_nan=False, allow_infinity=False),
                st.booleans(),
            ),
            max_size=5,
        ),
    )
    @settings(deadline=None)
    def test_structured_logging_consistency(
        self,
        log_level: str,
        logger_name: str,
        message: str,
        context_data: dict[str, str | int | float | bool],
    ) -> None:
        """Every event carries its level, logger name, timestamp and context."""
        stream = StringIO()
        service = configure(stream, "production", log_level="DEBUG")
        logger = service.get_logger(logger_name)

        getattr(logger, log_level.lower())(message, **context_data)

        parsed = json.loads(stream.getvalue().strip().splitlines()[0])
        assert parsed["event"] == message
        assert parsed["level"] == log_level.lower()
        assert parsed["logger"] == logger_name
        assert "T" in parsed["timestamp"]
        for key, value in context_data.items():
            assert parsed[key] == value


def test_setup_logging_function() -> None:
    with tempfile.TemporaryDirectory() as temp_dir, patch.dict(os.environ):
        log_dir = Path(temp_dir)

        service = setup_logging(log_level="DEBUG", log_dir=log_dir, environment="production", console=False)

        assert isinstance(service, LoggingService)
        assert os.environ["ENVIRONMENT"] == "production"

        service.get_logger("test_setup").info("setup test", component="test")

        parsed = json.loads((log_dir / "app.log").read_text(encoding="utf-8").strip())
        assert parsed["event"] == "setup test"
        assert parsed["component"] == "test"
