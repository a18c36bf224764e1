"""Unit tests for logging configuration."""
import io
import logging
import sys
import tempfile
from pathlib import Path

import pytest

from cycle_time.errors import InputError
from cycle_time.logging import get_logger, resolve_level, setup_logging


def clear_root_handlers():
    """Remove every root handler so that basicConfig takes effect."""
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)


class TestLogging:
    """Test logging configuration."""
    
    @pytest.fixture(autouse=True)
    def reset_logging(self):
        """Reset logging configuration after each test."""
        yield
        clear_root_handlers()
        logging.getLogger().setLevel(logging.WARNING)
    
    def test_setup_logging_default(self, caplog):
        """Test default logging setup."""
        setup_logging()
        logger = get_logger("test")
        
        with caplog.at_level(logging.INFO):
            logger.info("Test info message")
            logger.debug("Test debug message")  # Should not appear with INFO level
        
        assert "Test info message" in caplog.text
        assert "Test debug message" not in caplog.text
    
    def test_setup_logging_debug_level(self, caplog):
        """Test logging with DEBUG level."""
        setup_logging(level="DEBUG")
        logger = get_logger("test")
        
        with caplog.at_level(logging.DEBUG):
            logger.debug("Test debug message")
        
        assert "Test debug message" in caplog.text
    
    def test_setup_logging_lowercase_level(self):
        clear_root_handlers()
        setup_logging(level="error")
        
        assert logging.getLogger().level == logging.ERROR
    
    def test_setup_logging_with_file(self):
        """Test logging to file."""
        with tempfile.NamedTemporaryFile(mode='w', delete=False) as f:
            log_file = f.name
        
        try:
            clear_root_handlers()
            setup_logging(log_file=log_file)
            logger = get_logger("test")
            
            logger.info("Test file message")
            
            for handler in logging.getLogger().handlers[:]:
                handler.flush()
                if isinstance(handler, logging.FileHandler):
                    logging.getLogger().removeHandler(handler)
                    handler.close()
            
            content = Path(log_file).read_text()
            assert "Test file message" in content
        finally:
            if Path(log_file).exists():
                Path(log_file).unlink()
    
    def test_console_output_goes_to_stderr(self, capsys):
        clear_root_handlers()
        setup_logging()
        get_logger("test").warning("Visible on stderr")
        
        captured = capsys.readouterr()
        assert "Visible on stderr" in captured.err
        assert "Visible on stderr" not in captured.out
    
    def test_git_logger_suppressed(self):
        """Test that GitPython's logger is set to WARNING."""
        setup_logging(level="DEBUG")
        
        assert logging.getLogger("git").getEffectiveLevel() == logging.WARNING
    
    def test_get_logger_returns_named_logger(self):
        """Test that get_logger returns correctly named logger."""
        logger1 = get_logger("module1")
        logger2 = get_logger("module2")
        
        assert logger1.name == "module1"
        assert logger2.name == "module2"
        assert logger1 is not logger2
    
    def test_log_format(self, caplog):
        """Test that log format includes all expected fields."""
        setup_logging()
        logger = get_logger("test.module")
        
        with caplog.at_level(logging.INFO):
            logger.info("Test message")
        
        assert "test.module" in caplog.text
        assert "INFO" in caplog.text
        assert "Test message" in caplog.text
    
    def test_setup_logging_numeric_level(self):
        clear_root_handlers()
        setup_logging(level=logging.DEBUG)
        
        assert logging.getLogger().level == logging.DEBUG
    
    def test_unknown_level_is_rejected(self):
        """Test that a misspelt level name is an input error."""
        with pytest.raises(InputError, match="Unknown log level: 'verbose'"):
            setup_logging(level="verbose")
    
    @pytest.mark.parametrize("name, expected", [
        ("debug", logging.DEBUG),
        (" Warning ", logging.WARNING),
        ("CRITICAL", logging.CRITICAL),
        (logging.INFO, logging.INFO),
    ])
    def test_resolve_level(self, name, expected):
        assert resolve_level(name) == expected
    
    def test_quiet_loggers_are_configurable(self):
        logging.getLogger("urllib3").setLevel(logging.NOTSET)
        setup_logging(level="DEBUG", quiet=["urllib3"])
        
        assert logging.getLogger("urllib3").level == logging.WARNING
        logging.getLogger("urllib3").setLevel(logging.NOTSET)
    
    def test_stderr_handler_follows_swapped_stream(self, monkeypatch):
        clear_root_handlers()
        setup_logging()
        replacement = io.StringIO()
        monkeypatch.setattr(sys, "stderr", replacement)
        
        get_logger("test").warning("After the swap")
        
        assert "After the swap" in replacement.getvalue()
