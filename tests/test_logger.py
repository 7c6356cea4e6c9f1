"""
Tests for logger functionality.
"""

import threading
from agromatch.logger import StructuredLogger, get_logger, reset_logger


class TestStructuredLogger:
    """Test structured logging functionality."""

    def test_logger_creation(self, tmp_path):
        """Logger should be created with default settings."""
        logger = StructuredLogger(
            name="test",
            level="INFO",
            log_dir=tmp_path,
            enable_console=False,
        )

        assert logger.logger.name == "test"
        assert logger.metrics["fetches_attempted"] == 0
        assert logger.log_file.parent == tmp_path

    def test_log_methods(self, tmp_path):
        """All log level methods should work."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        # Should not raise exceptions
        logger.debug("Debug message")
        logger.info("Info message")
        logger.warning("Warning message")
        logger.error("Error message")
        logger.critical("Critical message")

    def test_log_with_context(self, tmp_path):
        """Context should be written to the log file as JSON."""
        logger = StructuredLogger(
            name="test-context",
            log_dir=tmp_path,
            enable_console=False,
        )

        logger.info("Match computed", candidate_id="cand-1", score=72.5)
        for handler in logger.logger.handlers:
            handler.flush()

        text = logger.log_file.read_text(encoding="utf-8")
        assert 'Match computed | Context: {"candidate_id": "cand-1", "score": 72.5}' in text

    def test_file_disabled(self, tmp_path):
        logger = StructuredLogger(name="test-nofile", enable_file=False, enable_console=False)
        assert logger.log_file is None
        assert logger.logger.handlers == []

    def test_metrics_tracking(self, tmp_path):
        """Metrics should be tracked correctly."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        logger.record_fetch_attempt("candidate")
        logger.record_fetch_success("candidate")
        logger.record_fetch_attempt("job")
        logger.record_fetch_failure("job", "RetrievalTimeout")
        logger.record_match()
        logger.record_match_failure("NotFound")
        logger.record_persist()

        metrics = logger.get_metrics()
        assert metrics["fetches_attempted"] == 2
        assert metrics["fetches_failed"] == 1
        assert metrics["matches_computed"] == 1
        assert metrics["matches_failed"] == 1
        assert metrics["results_persisted"] == 1
        assert metrics["errors_by_type"] == {"RetrievalTimeout": 1, "NotFound": 1}

    def test_success_rate_calculation(self, tmp_path):
        """Per-entity fetch success rate should be calculated."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        for _ in range(4):
            logger.record_fetch_attempt("job")
        for _ in range(3):
            logger.record_fetch_success("job")

        stats = logger.get_metrics()["fetch_success_rate"]["job"]
        assert stats["attempts"] == 4
        assert stats["successes"] == 3
        assert stats["success_rate"] == 0.75

    def test_metrics_snapshot_is_a_copy(self, tmp_path):
        logger = StructuredLogger(name="test", log_dir=tmp_path, enable_console=False)
        snapshot = logger.get_metrics()
        snapshot["errors_by_type"]["Boom"] = 1
        assert logger.metrics["errors_by_type"] == {}

    def test_metrics_are_thread_safe(self, tmp_path):
        logger = StructuredLogger(name="test", log_dir=tmp_path, enable_console=False)

        def work():
            for _ in range(500):
                logger.record_fetch_attempt("job")
                logger.record_match()

        threads = [threading.Thread(target=work) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        metrics = logger.get_metrics()
        assert metrics["fetches_attempted"] == 4000
        assert metrics["matches_computed"] == 4000

    def test_log_metrics_summary(self, tmp_path):
        """Metrics summary should not raise."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        logger.record_fetch_attempt("candidate")
        logger.record_fetch_success("candidate")
        logger.record_match_failure("RetrievalTimeout")

        logger.log_metrics_summary()


class TestGlobalLogger:
    """Test shared logger instance."""

    def test_get_logger_singleton(self, tmp_path):
        """get_logger should return same instance."""
        reset_logger()

        logger1 = get_logger(log_dir=tmp_path, enable_console=False)
        logger2 = get_logger()

        assert logger1 is logger2
        reset_logger()

    def test_reset_logger(self, tmp_path):
        """reset_logger should clear shared instance."""
        reset_logger()

        logger1 = get_logger(log_dir=tmp_path, enable_console=False)
        reset_logger()
        logger2 = get_logger(log_dir=tmp_path, enable_console=False)

        assert logger1 is not logger2
        reset_logger()
