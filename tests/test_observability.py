"""Tests for structured logging setup."""

import pytest
import structlog

from tether.observability import setup_logging


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()


class TestSetupLogging:
    """Test suite for setup_logging."""

    def test_json_format(self):
        """Test that JSON output renders exceptions and ends in JSONRenderer."""
        setup_logging(level="DEBUG", format="json")
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
        assert structlog.processors.format_exc_info in processors

    def test_console_format(self):
        """Test that console output uses the dev renderer."""
        setup_logging(level="info")
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)
        assert structlog.processors.format_exc_info not in processors

    def test_level_filtering(self):
        """Test that the wrapper class drops records below the level."""
        setup_logging(level="WARNING")
        wrapper = structlog.get_config()["wrapper_class"]
        assert wrapper.debug is wrapper.info
        assert wrapper.warning is not wrapper.info
