# utils/logger.py
# This file is part of Horae - An LTL/MTL Runtime Verification
#
# Logging utility for trace evaluation and monitoring with configurable levels

import logging
import sys
from enum import Enum
from typing import Optional


class LogLevel(Enum):
    """Log levels for temporal monitoring."""

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR


class MonitorLogger:
    """Centralized logger for evaluation and monitoring with structured output."""

    def __init__(self, name: str = "horae", level: LogLevel = LogLevel.INFO):
        """Initialize the monitor logger.

        Args:
            name: Logger name
            level: Default logging level
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(level.value)

        # Remove existing handlers to avoid duplicates
        self.logger.handlers.clear()

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level.value)
        console_handler.setFormatter(MonitorFormatter())

        self.logger.addHandler(console_handler)

        # Prevent propagation to root logger
        self.logger.propagate = False

    def set_level(self, level: LogLevel):
        """Change the logging level."""
        self.logger.setLevel(level.value)
        for handler in self.logger.handlers:
            handler.setLevel(level.value)

    def is_debug(self) -> bool:
        """True when debug records would be emitted."""
        return self.logger.isEnabledFor(logging.DEBUG)

    # Core logging methods
    def debug(self, message: str, **kwargs):
        """Log debug message (detailed internal state)."""
        self.logger.debug(message, **kwargs)

    def info(self, message: str, **kwargs):
        """Log info message (general progress)."""
        self.logger.info(message, **kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message (unexpected but recoverable)."""
        self.logger.warning(message, **kwargs)

    def error(self, message: str, **kwargs):
        """Log error message (serious problems)."""
        self.logger.error(message, **kwargs)

    # Specialized methods for monitoring events
    def monitor_start(self, formula_text: str, verdict: str):
        """Log monitor initialization."""
        self.info("=== Starting Evaluation ===")
        self.info(f"Formula: {formula_text}")
        self.info(f"Initial verdict: {verdict}")

    def event_processed(self, event_str: str, verdict_str: str, reason: Optional[str] = None):
        """Log event processing result."""
        reason_str = f" ({reason})" if reason else ""
        self.info(f"{event_str} → verdict={verdict_str}{reason_str}")

    def verdict_resolved(self, verdict: str, events_seen: int):
        """Log the moment a streaming verdict becomes final."""
        self.info(f"🎯 Verdict resolved to {verdict} after {events_seen} event(s)")

    def predicate_failed(self, name: str, index: int, error: Exception):
        """Log a predicate that raised while being evaluated."""
        self.debug(f"      💥 Predicate '{name}' raised at index {index}: {type(error).__name__}: {error}")

    def source_failed(self, error: Exception):
        """Log failure of an update source."""
        self.warning(f"Update source failed: {type(error).__name__}: {error}")

    def final_verdict(self, verdict: str):
        """Log final monitoring verdict."""
        self.info(f"\n>>> FINAL VERDICT: {verdict} <<<")

    def validation_result(self, success: bool, message: str = ""):
        """Log validation results."""
        if success:
            self.debug(f"✅ {message}" if message else "✅ Validation successful")
        else:
            self.error(f"❌ {message}" if message else "❌ Validation failed")


class MonitorFormatter(logging.Formatter):
    """Custom formatter for monitor logging with clean output."""

    def format(self, record):
        # For INFO level and above, show message only (clean output)
        if record.levelno >= logging.INFO:
            return record.getMessage()

        if record.levelno == logging.DEBUG:
            return f"[DEBUG] {record.getMessage()}"

        return f"[{record.levelname}] {record.getMessage()}"


# Global logger instance
_global_logger: Optional[MonitorLogger] = None


def get_logger(name: str = "horae") -> MonitorLogger:
    """Get or create the global monitor logger instance.

    Args:
        name: Logger name (default: "horae")

    Returns:
        MonitorLogger instance
    """
    global _global_logger
    if _global_logger is None:
        _global_logger = MonitorLogger(name)
    return _global_logger


def set_log_level(level: LogLevel):
    """Set the global log level.

    Args:
        level: New log level
    """
    logger = get_logger()
    logger.set_level(level)


def configure_logging(verbose: bool = False, debug: bool = False):
    """Configure logging based on command line flags.

    Args:
        verbose: Enable verbose (INFO) output
        debug: Enable debug output (overrides verbose)
    """
    if debug:
        set_log_level(LogLevel.DEBUG)
    elif verbose:
        set_log_level(LogLevel.INFO)
    else:
        set_log_level(LogLevel.WARNING)


def log_event_result(event_str: str, verdict_str: str, reason: Optional[str] = None):
    """Log event processing result."""
    get_logger().event_processed(event_str, verdict_str, reason)
