"""
Structured logging for lagoinha.

Provides centralized logging with console and optional file output, plus
per-service lookup counters for seeing how each postal service behaves.
"""

import json
import logging
import sys
import threading
from datetime import datetime
from pathlib import Path
from typing import Optional

from .env import get_log_settings


class StructuredLogger:
    """
    Centralized logger with support for console and file outputs.
    Tracks lookup counters per service.
    """

    def __init__(
        self,
        name: str = "lagoinha",
        level: str = "WARNING",
        log_dir: Optional[Path] = None,
        enable_file: bool = False,
        enable_console: bool = True,
    ):
        """
        Initialize the structured logger.

        Args:
            name: Logger name
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for log files (default: logs/)
            enable_file: Write logs to file
            enable_console: Output logs to console (stderr)
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.DEBUG if enable_file else getattr(logging, level.upper()))
        self.logger.handlers.clear()
        self.logger.propagate = False

        # Service arms update counters from worker threads
        self._lock = threading.Lock()
        self.metrics = {
            "lookups_attempted": 0,
            "lookups_successful": 0,
            "lookups_failed": 0,
            "errors_by_type": {},
            "service_success_rate": {},
        }

        if enable_console:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(getattr(logging, level.upper()))
            console_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(threadName)s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            console_handler.setFormatter(console_formatter)
            self.logger.addHandler(console_handler)

        if enable_file:
            if log_dir is None:
                log_dir = Path("logs")
            log_dir.mkdir(parents=True, exist_ok=True)

            log_file = log_dir / f"lagoinha_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)  # Always log everything to file
            file_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(threadName)s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            file_handler.setFormatter(file_formatter)
            self.logger.addHandler(file_handler)

    def debug(self, message: str, **kwargs):
        """Log debug message with optional context."""
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs):
        """Log info message with optional context."""
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message with optional context."""
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs):
        """Log error message with optional context."""
        self._log(logging.ERROR, message, kwargs)

    def critical(self, message: str, **kwargs):
        """Log critical message with optional context."""
        self._log(logging.CRITICAL, message, kwargs)

    def _log(self, level: int, message: str, context: dict):
        if context:
            message = f"{message} | Context: {json.dumps(context, ensure_ascii=False, default=str)}"
        self.logger.log(level, message)

    # Lookup counters

    def record_lookup_attempt(self, service: str):
        """Record a request sent to a service."""
        with self._lock:
            self.metrics["lookups_attempted"] += 1
            stats = self.metrics["service_success_rate"].setdefault(
                service, {"attempts": 0, "successes": 0}
            )
            stats["attempts"] += 1

    def record_lookup_success(self, service: str):
        """Record a service returning a valid address."""
        with self._lock:
            self.metrics["lookups_successful"] += 1
            if service in self.metrics["service_success_rate"]:
                self.metrics["service_success_rate"][service]["successes"] += 1

    def record_lookup_failure(self, service: str, error_type: str):
        """Record a failed lookup and its error kind."""
        with self._lock:
            self.metrics["lookups_failed"] += 1
            errors = self.metrics["errors_by_type"]
            errors[error_type] = errors.get(error_type, 0) + 1

    def get_metrics(self) -> dict:
        """Return a snapshot of the counters with success rates filled in."""
        with self._lock:
            snapshot = {
                **self.metrics,
                "errors_by_type": dict(self.metrics["errors_by_type"]),
                "service_success_rate": {
                    service: dict(stats)
                    for service, stats in self.metrics["service_success_rate"].items()
                },
            }
        for stats in snapshot["service_success_rate"].values():
            if stats["attempts"] > 0:
                stats["success_rate"] = round(stats["successes"] / stats["attempts"], 3)
        return snapshot


_global_logger: Optional[StructuredLogger] = None
_global_lock = threading.Lock()


def get_logger(**kwargs) -> StructuredLogger:
    """
    Get or create the global logger instance.

    The first call configures it from LAGOINHA_LOG_LEVEL and LAGOINHA_LOG_DIR;
    keyword arguments override those and are passed to StructuredLogger.
    """
    global _global_logger

    with _global_lock:
        if _global_logger is None:
            level, log_dir = get_log_settings()
            options = {
                "level": level,
                "log_dir": log_dir,
                "enable_file": log_dir is not None,
            }
            options.update(kwargs)
            _global_logger = StructuredLogger(**options)

    return _global_logger


def reset_logger():
    """Reset the global logger (useful for testing)."""
    global _global_logger
    _global_logger = None
