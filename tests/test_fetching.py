"""
Tests for bounded store fetches.
"""

import time
import pytest
from sqlalchemy.exc import OperationalError

from agromatch.errors import NotFound, RetrievalTimeout
from agromatch.fetching import BoundedFetcher


def make_fetcher(logger, **kwargs):
    options = {"timeout": 0.1, "retries": 1, "base_delay": 0.0}
    options.update(kwargs)
    return BoundedFetcher(logger, **options)


class TestBoundedFetcher:
    def test_returns_value(self, quiet_logger):
        fetcher = make_fetcher(quiet_logger)
        assert fetcher.fetch("job", lambda key: {"id": key}, "job-1") == {"id": "job-1"}

        stats = quiet_logger.get_metrics()["fetch_success_rate"]["job"]
        assert stats == {"attempts": 1, "successes": 1, "success_rate": 1.0}

    def test_not_found_is_not_retried(self, quiet_logger):
        calls = []

        def missing(key):
            calls.append(key)
            raise NotFound("job", key)

        with pytest.raises(NotFound):
            make_fetcher(quiet_logger, retries=3).fetch("job", missing, "job-9")
        assert calls == ["job-9"]

    def test_timeout_after_retries(self, quiet_logger):
        calls = []

        def slow(key):
            calls.append(key)
            time.sleep(0.5)

        with pytest.raises(RetrievalTimeout) as exc:
            make_fetcher(quiet_logger, timeout=0.05, retries=2).fetch("candidate", slow, "c")
        assert "Timed out fetching candidate c" in exc.value.message
        assert len(calls) == 3
        assert quiet_logger.get_metrics()["errors_by_type"]["RetrievalTimeout"] == 3

    def test_store_outage_maps_to_timeout(self, quiet_logger):
        def down(key):
            raise OperationalError("SELECT 1", {}, Exception("database is locked"))

        with pytest.raises(RetrievalTimeout) as exc:
            make_fetcher(quiet_logger, retries=0).fetch("company", down, "co")
        assert exc.value.status_code == 503
        assert "Store unavailable" in exc.value.message

    def test_hung_read_does_not_delay_later_reads(self, quiet_logger):
        fetcher = make_fetcher(quiet_logger, timeout=0.1, retries=0)

        with pytest.raises(RetrievalTimeout):
            fetcher.fetch("job", lambda key: time.sleep(1.0), "slow")
        for key in ("a", "b", "c"):
            assert fetcher.fetch("job", lambda k: k.upper(), key) == key.upper()
