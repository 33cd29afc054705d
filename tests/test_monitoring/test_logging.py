"""
Structured Logging Tests
"""

from unittest.mock import MagicMock

import pytest

from tokengate import __version__
from tokengate.monitoring.logging import (
    add_log_level,
    add_service_info,
    drop_color_codes,
    log_duration,
    sanitize_sensitive_data,
)


class TestProcessors:
    """Tests for the custom structlog processors."""

    def test_service_info(self):
        event = add_service_info(None, "info", {"event": "x"})
        assert event["service"] == "tokengate"
        assert event["version"] == __version__

    def test_log_level_number(self):
        assert add_log_level(None, "warning", {})["level_number"] == 30
        assert add_log_level(None, "unknown", {})["level_number"] == 20

    def test_credentials_redacted(self):
        event = sanitize_sensitive_data(None, "info", {
            "event": "connect",
            "neo4j_password": "hunter2",
            "headers": {"Authorization": "Bearer abc"},
            "items": [{"api_key": "k"}],
        })
        assert event["neo4j_password"] == "[REDACTED]"
        assert event["headers"]["Authorization"] == "[REDACTED]"
        assert event["items"][0]["api_key"] == "[REDACTED]"

    def test_token_address_kept(self):
        token = "0x" + "ab" * 20
        event = sanitize_sensitive_data(None, "info", {"token_address": token})
        assert event["token_address"] == token

    def test_color_codes_dropped(self):
        event = drop_color_codes(None, "info", {"event": "\x1b[31mred\x1b[0m"})
        assert event["event"] == "red"


class TestLogDuration:
    """Tests for log_duration."""

    def test_logs_completion(self):
        logger = MagicMock()

        with log_duration(logger, "balance_probe", level="debug", contract="0x1"):
            pass

        logger.debug.assert_called_once()
        args, kwargs = logger.debug.call_args
        assert args == ("balance_probe_completed",)
        assert kwargs["contract"] == "0x1"
        assert kwargs["duration_ms"] >= 0

    def test_logs_failure_and_reraises(self):
        logger = MagicMock()

        with pytest.raises(ValueError):
            with log_duration(logger, "balance_probe"):
                raise ValueError("bad")

        logger.info.assert_not_called()
        args, kwargs = logger.warning.call_args
        assert args == ("balance_probe_failed",)
        assert kwargs["error_type"] == "ValueError"
