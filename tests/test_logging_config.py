"""Tests for logging configuration."""

import io
import logging

from sdvalidator.logging_config import get_logger, setup_logging


class TestSetupLogging:
    """Test cases for setup_logging."""

    def teardown_method(self):
        setup_logging(level="WARNING")

    def test_sets_root_level(self):
        """Test the root logger level follows the argument."""
        setup_logging(level="DEBUG")
        assert logging.getLogger().level == logging.DEBUG

    def test_unknown_level_falls_back_to_info(self):
        """Test an unknown level name means INFO."""
        setup_logging(level="chatty")
        assert logging.getLogger().level == logging.INFO

    def test_log_file_is_written(self, tmp_path):
        """Test a file handler is added and parent directories are created."""
        log_file = tmp_path / "logs" / "sdv.log"
        setup_logging(level="INFO", log_file=str(log_file))

        get_logger("sdvalidator.test").info("hello from the test")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert "hello from the test" in log_file.read_text()

    def test_bs4_logger_is_quieted(self):
        """Test parser chatter is limited to errors."""
        setup_logging(level="DEBUG")
        assert logging.getLogger("bs4").level == logging.ERROR


class TestGetLogger:
    """Test cases for get_logger."""

    def test_returns_named_logger(self):
        """Test the logger carries the requested name."""
        assert get_logger("sdvalidator.engine").name == "sdvalidator.engine"


class TestConsoleStream:
    """Test cases for the console handler."""

    def teardown_method(self):
        setup_logging(level="WARNING")

    def test_custom_stream(self):
        """Test records are written to the given stream."""
        stream = io.StringIO()
        setup_logging(level="INFO", stream=stream, format_string="%(levelname)s:%(message)s")

        get_logger("sdvalidator.test").warning("routed")

        assert "WARNING:routed" in stream.getvalue()
