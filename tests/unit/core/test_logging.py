"""Unit tests for Loguru configuration and formatters."""

import json
import logging
from collections.abc import Generator
from datetime import UTC, datetime
from typing import Any

import pytest
from pytest_mock import MockerFixture

from autojson.core import logging as app_logging
from autojson.core.config import LogConfig, Settings
from autojson.core.logging import (
    InterceptHandler,
    format_console_with_context,
    serialize_for_json,
    setup_logging,
)


@pytest.fixture
def fresh_logging_state() -> Generator[None]:
    """Let setup_logging run again and restore the flag afterwards."""
    previous = app_logging._state.configured
    app_logging._state.configured = False
    yield
    app_logging._state.configured = previous


def _record(**extra: Any) -> dict[str, Any]:
    level = type("Level", (), {"name": "INFO"})()
    return {
        "time": datetime(2024, 1, 1, 12, 0, tzinfo=UTC),
        "level": level,
        "message": "Serialized {list} result",
        "name": "autojson.api.interceptor",
        "function": "intercept",
        "line": 42,
        "extra": extra,
        "exception": None,
    }


@pytest.mark.unit
class TestFormatters:
    """Test console and JSON formatters."""

    def test_console_includes_context(self) -> None:
        """Context fields appear inline, correlation ID shortened."""
        line = format_console_with_context(
            _record(correlation_id="1234567890abcdef", matched="Shape.ARRAY")
        )

        assert "correlation_id=12345678" in line
        assert "matched=Shape.ARRAY" in line
        assert line.index("correlation_id") < line.index("matched")
        # Braces in messages must not be treated as format fields
        assert "Serialized {{list}} result" in line

    def test_console_redacts_sensitive_fields(self) -> None:
        """Sensitive field values are never printed."""
        app_logging._sensitive_fields.add("token")
        try:
            line = format_console_with_context(_record(token="s3cr3t"))
        finally:
            app_logging._sensitive_fields.discard("token")

        assert "s3cr3t" not in line
        assert "token=[REDACTED]" in line

    def test_json_entry(self) -> None:
        """JSON lines carry the record fields and extras."""
        entry = json.loads(serialize_for_json(_record(correlation_id="abc")))

        assert entry["level"] == "INFO"
        assert entry["message"] == "Serialized {list} result"
        assert entry["logger"] == "autojson.api.interceptor"
        assert entry["correlation_id"] == "abc"
        assert entry["timestamp"] == "2024-01-01T12:00:00+00:00"


@pytest.mark.unit
class TestSetupLogging:
    """Test one-time logging configuration."""

    def test_console_sink(
        self, mocker: MockerFixture, fresh_logging_state: None
    ) -> None:
        """Console formatter installs a stdout sink."""
        _ = fresh_logging_state
        mock_logger = mocker.patch("autojson.core.logging.logger")

        setup_logging(Settings(log_config=LogConfig(log_formatter_type="console")))

        mock_logger.remove.assert_called_once()
        mock_logger.add.assert_called_once()
        assert mock_logger.add.call_args.kwargs["colorize"] is True
        assert app_logging._state.configured
        assert isinstance(logging.getLogger().handlers[0], InterceptHandler)

    def test_json_sink(self, mocker: MockerFixture, fresh_logging_state: None) -> None:
        """JSON formatter installs a structured sink."""
        _ = fresh_logging_state
        mock_logger = mocker.patch("autojson.core.logging.logger")

        setup_logging(Settings(log_config=LogConfig(log_formatter_type="json")))

        sink = mock_logger.add.call_args.args[0]
        assert callable(sink)
        assert "colorize" not in mock_logger.add.call_args.kwargs

    def test_only_configured_once(
        self, mocker: MockerFixture, fresh_logging_state: None
    ) -> None:
        """A second call is a no-op."""
        _ = fresh_logging_state
        mock_logger = mocker.patch("autojson.core.logging.logger")
        settings = Settings()

        setup_logging(settings)
        setup_logging(settings)

        mock_logger.remove.assert_called_once()
