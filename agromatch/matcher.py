"""
Match Orchestrator.

Responsibilities:
- Fetch both profiles under a bounded timeout.
- Invoke feature scoring and aggregation.
- Report, and optionally persist, the result.
- Score one candidate against many postings concurrently.

Non-Responsibilities:
- No feature computation.
- No SQL.

Invariant:
Score, dimensions and rationale are deterministic given the same
profiles and weights. A computation succeeds or fails as a unit.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Sequence

from .config import MatchConfig
from .errors import MatchError
from .features import DIMENSIONS, compute_features
from .fetching import BoundedFetcher
from .leads import LeadScorer
from .logger import StructuredLogger, get_logger
from .models import CandidateProfile, JobPosting, MatchResult
from .reporter import ResultReporter, build_result
from .scoring import aggregate


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def score_pair(
    candidate: CandidateProfile,
    job: JobPosting,
    weights: Dict[str, float],
    computed_at: datetime,
) -> MatchResult:
    """Pure scoring of an already fetched pair."""
    dimensions = compute_features(candidate, job)
    score, rationale = aggregate(dimensions, weights, DIMENSIONS)
    return build_result(candidate.id, job.id, score, dimensions, rationale, computed_at)


@dataclass
class RankedMatches:
    """Outcome of scoring one candidate against many jobs."""

    candidate_id: str
    results: List[MatchResult] = field(default_factory=list)
    errors: Dict[str, MatchError] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "candidateId": self.candidate_id,
            "results": [dict(r.to_dict(), jobId=r.job_id) for r in self.results],
            "errors": {job_id: e.to_dict() for job_id, e in self.errors.items()},
        }


class Matcher:
    """
    Candidate/job matching service.

    Built with its configuration, store and logger; nothing is looked up
    globally. Use as a context manager or call close() to release the
    worker pool.
    """

    def __init__(
        self,
        config: MatchConfig,
        store,
        logger: Optional[StructuredLogger] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.config = config
        self.store = store
        self.logger = logger or get_logger()
        self.clock = clock
        self.reporter = ResultReporter(store, self.logger)
        self._match_pool = ThreadPoolExecutor(
            max_workers=config.max_workers, thread_name_prefix="agromatch-match"
        )
        self.fetcher = BoundedFetcher(
            self.logger,
            timeout=config.fetch_timeout,
            retries=config.fetch_retries,
            base_delay=config.retry_base_delay,
        )
        self.leads = LeadScorer(config, store, self.fetcher, self.logger, clock)

    def __enter__(self) -> "Matcher":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        self._match_pool.shutdown(wait=True)

    def fetch_pair(self, candidate_id: str, job_id: str) -> tuple[CandidateProfile, JobPosting]:
        candidate = self.fetcher.fetch("candidate", self.store.fetch_candidate, candidate_id)
        job = self.fetcher.fetch("job", self.store.fetch_job, job_id)
        return candidate, job

    def open_job_ids(self) -> List[str]:
        return self.fetcher.fetch("job list", lambda _: self.store.open_job_ids(), "open")

    def cached(self, candidate_id: str, job_id: str) -> Optional[MatchResult]:
        """Stored result younger than cache_ttl and computed under the current weights."""
        if self.config.cache_ttl <= 0 or not hasattr(self.store, "latest_result"):
            return None
        return self.store.latest_result(
            candidate_id,
            job_id,
            weights=self.config.weights,
            max_age=self.config.cache_ttl,
            now=self.clock(),
        )

    def match(
        self,
        candidate_id: str,
        job_id: str,
        persist: bool = False,
        use_cache: bool = False,
    ) -> MatchResult:
        """
        Score a candidate against a job.

        Args:
            candidate_id: Candidate key
            job_id: Job key
            persist: Insert the result into match history
            use_cache: Return a stored result younger than cache_ttl if any

        Raises:
            NotFound, RetrievalTimeout, ConfigurationError
        """
        if use_cache:
            hit = self.cached(candidate_id, job_id)
            if hit is not None:
                self.logger.debug("Match cache hit", candidate_id=candidate_id, job_id=job_id)
                return hit

        try:
            candidate = self.fetcher.fetch("candidate", self.store.fetch_candidate, candidate_id)
        except MatchError as e:
            self._failed(candidate_id, job_id, e)
            raise
        return self._match_fetched(candidate, job_id, persist)

    def _failed(self, candidate_id: str, job_id: str, error: MatchError) -> None:
        self.logger.record_match_failure(error.kind)
        self.logger.warning("Match failed", candidate_id=candidate_id, job_id=job_id, error=error.kind)

    def _match_fetched(self, candidate: CandidateProfile, job_id: str, persist: bool) -> MatchResult:
        try:
            job = self.fetcher.fetch("job", self.store.fetch_job, job_id)
        except MatchError as e:
            self._failed(candidate.id, job_id, e)
            raise
        return self.match_profiles(candidate, job, persist=persist)

    def match_profiles(self, candidate: CandidateProfile, job: JobPosting, persist: bool = False) -> MatchResult:
        """Score already fetched profiles, persisting the result if asked."""
        try:
            result = score_pair(candidate, job, self.config.weights, self.clock())
            if persist:
                self.reporter.persist(result, self.config.weights)
        except MatchError as e:
            self._failed(candidate.id, job.id, e)
            raise

        self.logger.record_match()
        self.logger.info("Match computed", candidate_id=candidate.id, job_id=job.id, score=result.score)
        return result

    def rank_jobs(
        self,
        candidate_id: str,
        job_ids: Optional[Sequence[str]] = None,
        persist: bool = False,
        limit: Optional[int] = None,
    ) -> RankedMatches:
        """
        Score one candidate against many jobs in parallel.

        The candidate is fetched once; failing that fetch fails the whole
        call. Each job is then an independent computation and a failure is
        recorded for that job only. Results are ordered by score, best first.
        """
        candidate = self.fetcher.fetch("candidate", self.store.fetch_candidate, candidate_id)
        if job_ids is None:
            job_ids = self.open_job_ids()
        unique_ids = list(dict.fromkeys(job_ids))

        futures = {
            job_id: self._match_pool.submit(self._match_fetched, candidate, job_id, persist)
            for job_id in unique_ids
        }
        outcome = RankedMatches(candidate_id=candidate_id)
        for job_id, future in futures.items():
            try:
                outcome.results.append(future.result())
            except MatchError as e:
                outcome.errors[job_id] = e

        outcome.results.sort(key=lambda r: (-r.score, r.job_id))
        if limit is not None:
            outcome.results = outcome.results[:limit]
        self.logger.info(
            "Ranking complete",
            candidate_id=candidate_id,
            scored=len(outcome.results),
            failed=len(outcome.errors),
        )
        return outcome
