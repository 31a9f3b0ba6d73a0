"""Tests for accesscore.logging module."""

from __future__ import annotations

import json
import logging
import os
from unittest.mock import patch

import pytest

from accesscore import (
    AccessConfig,
    AccessLogFormatter,
    ActorDescriptor,
    LogLevel,
    get_access_logger,
    safe_preview,
    setup_logging,
)


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def _record(msg: str = "Test message") -> logging.LogRecord:
    return logging.LogRecord(
        name="test",
        level=logging.INFO,
        pathname="",
        lineno=0,
        msg=msg,
        args=(),
        exc_info=None,
    )


class TestSafePreview:
    """Tests for safe_preview function."""

    def test_none_value(self) -> None:
        """Test that None returns empty string."""
        assert safe_preview(None) == ""

    def test_string_with_whitespace(self) -> None:
        """Test that whitespace is normalized."""
        assert safe_preview("list:properties\n\tdenied  twice") == "list:properties denied twice"

    def test_string_truncation(self) -> None:
        """Test that long strings are truncated."""
        result = safe_preview("a" * 300, limit=100)
        assert len(result) == 100
        assert result.endswith("…")

    def test_dict_value(self) -> None:
        """Test that user records are rendered as JSON."""
        result = safe_preview({"role": "basic_user", "subscription_tier": "free"})
        assert json.loads(result) == {"role": "basic_user", "subscription_tier": "free"}

    def test_other_value(self) -> None:
        """Test that other objects fall back to str()."""
        assert safe_preview(42) == "42"


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_setup_with_config(self, restore_root_logger: logging.Logger) -> None:
        """Test logging setup with AccessConfig."""
        setup_logging(config=AccessConfig(log_level=LogLevel.DEBUG), json_format=False)
        assert restore_root_logger.level == logging.DEBUG

    def test_setup_with_env(self, restore_root_logger: logging.Logger) -> None:
        """Test logging setup loading from environment."""
        with patch.dict(os.environ, {"LOG_LEVEL": "WARNING"}, clear=True):
            setup_logging(json_format=False)
        assert restore_root_logger.level == logging.WARNING

    def test_json_format(self, capsys: pytest.CaptureFixture, restore_root_logger: logging.Logger) -> None:
        """Test JSON format output."""
        setup_logging(config=AccessConfig(log_json=True))

        logging.getLogger("test").info("Policy loaded")

        stderr_output = capsys.readouterr().err.strip()
        data = json.loads(stderr_output)
        assert data["level"] == "INFO"
        assert data["message"] == "Policy loaded"
        assert data["logger"] == "test"

    def test_plain_format(self, capsys: pytest.CaptureFixture, restore_root_logger: logging.Logger) -> None:
        """Test plain text format output."""
        setup_logging(config=AccessConfig(), json_format=False)

        logging.getLogger("test").info("Policy loaded")

        stderr_output = capsys.readouterr().err.strip()
        assert "INFO" in stderr_output
        assert "Policy loaded" in stderr_output
        assert not stderr_output.startswith("{")

    def test_service_logger_level(self, restore_root_logger: logging.Logger) -> None:
        """Test that the service namespace gets the configured level."""
        setup_logging(config=AccessConfig(log_level="ERROR", service_name="listing-api"))
        assert logging.getLogger("listing-api").level == logging.ERROR


class TestAccessLogger:
    """Tests for the access logger adapter."""

    def test_logger_with_actor(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test that actor= binds the actor id."""
        logger = get_access_logger("test")
        actor = ActorDescriptor.create("basic_user", "free", id="u-42")

        with caplog.at_level(logging.INFO):
            logger.info("Checking", actor=actor, capability="list:properties")

        record = caplog.records[0]
        assert record.actor_id == "u-42"
        assert record.capability == "list:properties"

    def test_logger_with_bound_actor_id(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test an adapter created for one actor."""
        logger = get_access_logger("test", actor_id="u-7")

        with caplog.at_level(logging.INFO):
            logger.info("Checking")

        assert caplog.records[0].actor_id == "u-7"

    def test_logger_without_context(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test logger without actor context."""
        logger = get_access_logger("test")

        with caplog.at_level(logging.INFO):
            logger.info("Checking", actor=ActorDescriptor())

        record = caplog.records[0]
        assert not hasattr(record, "actor_id")
        assert not hasattr(record, "capability")


class TestAccessLogFormatter:
    """Tests for AccessLogFormatter."""

    def test_json_format(self) -> None:
        """Test JSON formatter."""
        formatter = AccessLogFormatter(json_format=True)
        record = _record()
        record.actor_id = "u-1"
        record.capability = "manage:agents"
        record.profile = {"role": "professional_user", "tier": "premium"}

        data = json.loads(formatter.format(record))

        assert data["level"] == "INFO"
        assert data["actor_id"] == "u-1"
        assert data["capability"] == "manage:agents"
        assert "professional_user" in data["profile"]

    def test_plain_format(self) -> None:
        """Test plain text formatter."""
        formatter = AccessLogFormatter(json_format=False)
        record = _record()
        record.actor_id = "u-1"
        record.capability = "manage:agents"

        result = formatter.format(record)

        assert "INFO" in result
        assert "Test message" in result
        assert "actor_id=u-1" in result
        assert "capability=manage:agents" in result

    def test_actor_excluded(self) -> None:
        """Test that include_actor=False drops actor fields."""
        formatter = AccessLogFormatter(include_actor=False, json_format=True)
        record = _record()
        record.actor_id = "u-1"

        data = json.loads(formatter.format(record))

        assert "actor_id" not in data
