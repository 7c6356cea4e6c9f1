"""
Result Reporting.

Responsibilities:
- Package score, sub-scores and rationale into a MatchResult.
- Persist results insert-only through the store.
- Derive follow-up advice for recruiters.

Non-Responsibilities:
- No scoring.
- No mutation of earlier results.
"""

from datetime import datetime
from typing import Any, Dict, List, Mapping

from sqlalchemy.exc import SQLAlchemyError

from .errors import PersistenceError
from .features import LANGUAGE, NEUTRAL
from .logger import StructuredLogger
from .models import CandidateProfile, JobPosting, MatchResult
from .normalize import experience_rank
from .storage import ProfileStore


def build_result(
    candidate_id: str,
    job_id: str,
    score: float,
    dimensions: Mapping[str, float],
    rationale: str,
    computed_at: datetime,
) -> MatchResult:
    return MatchResult(
        candidate_id=candidate_id,
        job_id=job_id,
        score=score,
        dimensions={name: round(value, 4) for name, value in dimensions.items()},
        rationale=rationale,
        computed_at=computed_at,
    )


class ResultReporter:
    def __init__(self, store: ProfileStore, logger: StructuredLogger):
        self.store = store
        self.logger = logger

    def persist(self, result: MatchResult, weights: Dict[str, float]) -> None:
        """
        Insert a result into match history.

        Raises:
            PersistenceError: The store rejected or failed the write
        """
        try:
            inserted = self.store.persist_result(result, weights)
        except SQLAlchemyError as e:
            self.logger.error(
                "Match result not persisted",
                candidate_id=result.candidate_id,
                job_id=result.job_id,
                error=str(e),
            )
            raise PersistenceError(
                f"Could not store result for candidate {result.candidate_id}, job {result.job_id}"
            ) from e
        if inserted is False:
            self.logger.debug(
                "Match result already stored",
                candidate_id=result.candidate_id,
                job_id=result.job_id,
            )
            return
        self.logger.record_persist()
        self.logger.debug(
            "Match result persisted",
            candidate_id=result.candidate_id,
            job_id=result.job_id,
            score=result.score,
        )


def advise(result: MatchResult, candidate: CandidateProfile, job: JobPosting) -> Dict[str, List[str]]:
    """Recommendations and red flags for a scored pair."""
    recommendations: List[str] = []
    red_flags: List[str] = []

    have = experience_rank(candidate.experience_level)
    need = experience_rank(job.min_experience)
    experience_gap = have is not None and need is not None and need > have

    if result.score < 60:
        recommendations.append("Consider skill development or additional training")
        if experience_gap:
            recommendations.append("Build more experience before applying")
    elif result.score < 80:
        recommendations.append("Strong candidate - consider for interview")
        if result.dimensions.get(LANGUAGE, NEUTRAL) < 1.0 and job.language_requirement:
            recommendations.append("Language training may improve success rate")
    else:
        recommendations.append("Excellent match - prioritize this candidate")
        recommendations.append("Fast-track to interview process")

    missing = sorted(set(job.required_skills) - set(candidate.skills)) if candidate.skills else []
    if missing:
        recommendations.append("Train for missing skills: " + ", ".join(missing))

    if experience_gap and need - have > 1:
        red_flags.append("Significant experience gap")
    if result.dimensions.get("location") == 0.0:
        red_flags.append("Preferred location is in a different country")
    if job.language_requirement and candidate.languages and job.language_requirement not in candidate.languages:
        red_flags.append(f"Does not speak required language: {job.language_requirement}")

    return {"recommendations": recommendations, "red_flags": red_flags}


def report(result: MatchResult, candidate: CandidateProfile, job: JobPosting) -> Dict[str, Any]:
    """Result JSON extended with ids and advice, used by the CLI."""
    body = result.to_dict()
    body["candidateId"] = result.candidate_id
    body["jobId"] = result.job_id
    body.update(advise(result, candidate, job))
    return body
