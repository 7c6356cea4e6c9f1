"""Bounded retrieval from the profile store."""

import threading
from concurrent.futures import Future, TimeoutError as FutureTimeout
from typing import Callable, TypeVar

from sqlalchemy.exc import OperationalError

from .errors import NotFound, RetrievalTimeout
from .logger import StructuredLogger
from .retry import RetryError, exponential_backoff

T = TypeVar("T")


def _run_into(future: Future, fn: Callable[[str], T], key: str) -> None:
    try:
        future.set_result(fn(key))
    except Exception as e:
        future.set_exception(e)


class BoundedFetcher:
    """
    Run store reads with a per-attempt timeout.

    Each attempt gets its own daemon thread, so a read that hangs past its
    timeout is abandoned without holding up reads for other records.
    Timeouts and store connection errors become RetrievalTimeout and are
    retried with exponential backoff. NotFound propagates immediately.
    """

    def __init__(
        self,
        logger: StructuredLogger,
        timeout: float = 5.0,
        retries: int = 2,
        base_delay: float = 0.5,
    ):
        self.logger = logger
        self.timeout = timeout
        self.retries = retries
        self.base_delay = base_delay

    def _start(self, entity: str, fn: Callable[[str], T], key: str) -> Future:
        future: Future = Future()
        worker = threading.Thread(
            target=_run_into,
            args=(future, fn, key),
            name=f"agromatch-fetch-{entity}",
            daemon=True,
        )
        worker.start()
        return future

    def _attempt(self, entity: str, fn: Callable[[str], T], key: str) -> T:
        self.logger.record_fetch_attempt(entity)
        future = self._start(entity, fn, key)
        try:
            value = future.result(timeout=self.timeout)
        except FutureTimeout:
            self.logger.record_fetch_failure(entity, "RetrievalTimeout")
            self.logger.warning(f"{entity.capitalize()} fetch timed out", id=key, timeout=self.timeout)
            raise RetrievalTimeout(f"Timed out fetching {entity} {key} after {self.timeout}s")
        except OperationalError as e:
            self.logger.record_fetch_failure(entity, "OperationalError")
            self.logger.error(f"{entity.capitalize()} fetch failed", id=key, error=str(e.orig))
            raise RetrievalTimeout(f"Store unavailable while fetching {entity} {key}")
        except NotFound:
            self.logger.record_fetch_failure(entity, "NotFound")
            raise
        self.logger.record_fetch_success(entity)
        return value

    def fetch(self, entity: str, fn: Callable[[str], T], key: str) -> T:
        """
        Fetch one record.

        Args:
            entity: Entity kind for logs and metrics (candidate, job, company)
            fn: Store read taking the key
            key: Record id

        Raises:
            NotFound: The key does not resolve
            RetrievalTimeout: Every attempt timed out or the store was down
        """
        def on_retry(attempt, exception, delay):
            self.logger.info(f"Retrying {entity} fetch", id=key, attempt=attempt, delay=delay)

        attempt = exponential_backoff(
            max_retries=self.retries,
            base_delay=self.base_delay,
            exceptions=(RetrievalTimeout,),
            on_retry=on_retry,
        )(self._attempt)
        try:
            return attempt(entity, fn, key)
        except RetryError as e:
            raise RetrievalTimeout(str(e.__cause__)) from e
