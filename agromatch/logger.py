"""
Structured logging system for agromatch.

Provides centralized logging with console and file outputs, plus metrics
tracking for monitoring store fetches and match computations.
"""

import logging
import sys
import threading
from pathlib import Path
from typing import Optional
from datetime import datetime
import json


class StructuredLogger:
    """
    Centralized logger with support for console and file outputs.
    Tracks metrics for fetches and match computations. Safe to share
    between worker threads.
    """

    def __init__(
        self,
        name: str = "agromatch",
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = True,
        enable_console: bool = True,
    ):
        """
        Initialize the structured logger.

        Args:
            name: Logger name
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for log files (default: logs/)
            enable_file: Write logs to file
            enable_console: Output logs to console
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))
        self.logger.handlers.clear()  # Remove existing handlers
        self.log_file: Optional[Path] = None

        self._lock = threading.Lock()
        self.metrics = {
            "fetches_attempted": 0,
            "fetches_failed": 0,
            "matches_computed": 0,
            "matches_failed": 0,
            "results_persisted": 0,
            "errors_by_type": {},
            "fetch_success_rate": {},
        }

        if enable_console:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(getattr(logging, level.upper()))
            console_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            console_handler.setFormatter(console_formatter)
            self.logger.addHandler(console_handler)

        if enable_file:
            if log_dir is None:
                log_dir = Path("logs")
            log_dir.mkdir(parents=True, exist_ok=True)

            self.log_file = log_dir / f"agromatch_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = logging.FileHandler(self.log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)  # Always log everything to file
            file_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s',
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
        """Internal logging method with context."""
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str)}"
        self.logger.log(level, message)

    # Metric tracking methods

    def record_fetch_attempt(self, entity: str):
        """Record a store fetch for an entity kind (candidate, job, company)."""
        with self._lock:
            self.metrics["fetches_attempted"] += 1
            stats = self.metrics["fetch_success_rate"].setdefault(
                entity, {"attempts": 0, "successes": 0}
            )
            stats["attempts"] += 1

    def record_fetch_success(self, entity: str):
        with self._lock:
            if entity in self.metrics["fetch_success_rate"]:
                self.metrics["fetch_success_rate"][entity]["successes"] += 1

    def record_fetch_failure(self, entity: str, error_type: str):
        with self._lock:
            self.metrics["fetches_failed"] += 1
            self._count_error(error_type)

    def record_match(self):
        with self._lock:
            self.metrics["matches_computed"] += 1

    def record_match_failure(self, error_type: str):
        with self._lock:
            self.metrics["matches_failed"] += 1
            self._count_error(error_type)

    def record_persist(self):
        with self._lock:
            self.metrics["results_persisted"] += 1

    def _count_error(self, error_type: str):
        errors = self.metrics["errors_by_type"]
        errors[error_type] = errors.get(error_type, 0) + 1

    def get_metrics(self) -> dict:
        """Return a snapshot of current metrics."""
        with self._lock:
            snapshot = json.loads(json.dumps(self.metrics))
        for stats in snapshot["fetch_success_rate"].values():
            if stats["attempts"] > 0:
                stats["success_rate"] = round(stats["successes"] / stats["attempts"], 3)
        return snapshot

    def log_metrics_summary(self):
        """Log a summary of current metrics."""
        metrics = self.get_metrics()

        computed = metrics["matches_computed"]
        failed = metrics["matches_failed"]
        total = computed + failed
        overall_rate = round(computed / total * 100, 1) if total else 0

        self.info("=== Matching Session Metrics ===")
        self.info(f"Matches: {computed}/{total} ({overall_rate}% success)")
        self.info(f"Results persisted: {metrics['results_persisted']}")

        if metrics["fetch_success_rate"]:
            self.info("Fetch Success Rates:")
            for entity, stats in metrics["fetch_success_rate"].items():
                rate = stats.get("success_rate", 0) * 100
                self.info(f"  {entity}: {stats['successes']}/{stats['attempts']} ({rate:.1f}%)")

        if metrics["errors_by_type"]:
            self.info("Error Types:")
            for error_type, count in metrics["errors_by_type"].items():
                self.info(f"  {error_type}: {count}")


# Shared logger instance for ambient use (CLI, module-level helpers)
_global_logger: Optional[StructuredLogger] = None


def get_logger(
    name: str = "agromatch",
    level: str = "INFO",
    **kwargs
) -> StructuredLogger:
    """
    Get or create the shared logger instance.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        **kwargs: Additional arguments passed to StructuredLogger

    Returns:
        StructuredLogger instance
    """
    global _global_logger

    if _global_logger is None:
        _global_logger = StructuredLogger(name=name, level=level, **kwargs)

    return _global_logger


def reset_logger():
    """Reset the shared logger (useful for testing)."""
    global _global_logger
    _global_logger = None
