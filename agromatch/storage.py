"""
Storage for profiles and match history.

ProfileStore is the interface the pipeline depends on; SqlProfileStore is
the SQLAlchemy implementation. Match results are insert-only.
"""

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from sqlalchemy import func, select, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from .database import Base, Candidate, Company, Job, MatchRecord, get_engine
from .errors import NotFound, PersistenceError
from .models import CandidateProfile, CompanyProfile, JobPosting, MatchResult


@runtime_checkable
class ProfileStore(Protocol):
    """Collaborating storage interface used by the matcher."""

    def fetch_candidate(self, candidate_id: str) -> CandidateProfile:
        ...

    def fetch_job(self, job_id: str) -> JobPosting:
        ...

    def persist_result(self, result: MatchResult, weights: Dict[str, float]) -> bool:
        ...

    def open_job_ids(self) -> List[str]:
        ...


def diff_dict(old: Dict[str, Any], new: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
    changed = {}
    keys = set(old.keys()) | set(new.keys())
    for k in keys:
        ov = old.get(k)
        nv = new.get(k)
        if ov != nv:
            changed[k] = {"old": ov, "new": nv}
    return changed


def _to_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _naive_utc(dt: datetime) -> datetime:
    return _to_utc(dt).replace(tzinfo=None)


def _row_fields(row, names) -> Dict[str, Any]:
    return {n: getattr(row, n) for n in names}


_CANDIDATE_FIELDS = ("id", "name", "skills", "experience_level", "preferred_location", "languages")
_JOB_FIELDS = (
    "id", "title", "required_skills", "min_experience", "location", "contract_type",
    "language_requirement", "category", "status", "company_id",
)
_COMPANY_FIELDS = (
    "id", "name", "industry", "size", "revenue", "open_positions", "email_response_hours",
    "offers_relocation", "provides_housing", "helps_with_visa", "transport_support",
    "language_training",
)


def record_to_result(record: MatchRecord) -> MatchResult:
    return MatchResult(
        candidate_id=record.candidate_id,
        job_id=record.job_id,
        score=record.score,
        dimensions=dict(record.dimensions),
        rationale=record.rationale,
        computed_at=_to_utc(record.computed_at),
    )


class SqlProfileStore:
    """SQLite-backed ProfileStore. One engine per store, one session per call."""

    def __init__(self, db_path: Path, create: bool = True):
        self.db_path = db_path
        if create:
            db_path.parent.mkdir(parents=True, exist_ok=True)
        self.engine = get_engine(db_path)
        if create:
            Base.metadata.create_all(self.engine)
        self._sessions = sessionmaker(bind=self.engine, expire_on_commit=False)

    def session(self) -> Session:
        return self._sessions()

    def close(self) -> None:
        self.engine.dispose()

    # Reads

    def fetch_candidate(self, candidate_id: str) -> CandidateProfile:
        with self.session() as s:
            row = s.get(Candidate, candidate_id)
            if row is None:
                raise NotFound("candidate", candidate_id)
            return CandidateProfile.from_dict(_row_fields(row, _CANDIDATE_FIELDS))

    def fetch_job(self, job_id: str) -> JobPosting:
        with self.session() as s:
            row = s.get(Job, job_id)
            if row is None:
                raise NotFound("job", job_id)
            return JobPosting.from_dict(_row_fields(row, _JOB_FIELDS))

    def fetch_company(self, company_id: str) -> CompanyProfile:
        with self.session() as s:
            row = s.get(Company, company_id)
            if row is None:
                raise NotFound("company", company_id)
            return CompanyProfile.from_dict(_row_fields(row, _COMPANY_FIELDS))

    def list_jobs(self, status: Optional[str] = "open") -> List[JobPosting]:
        with self.session() as s:
            stmt = select(Job).order_by(Job.id)
            if status:
                stmt = stmt.where(Job.status == status)
            return [JobPosting.from_dict(_row_fields(r, _JOB_FIELDS)) for r in s.scalars(stmt)]

    def open_job_ids(self) -> List[str]:
        with self.session() as s:
            stmt = select(Job.id).where(Job.status == "open").order_by(Job.id)
            return list(s.scalars(stmt))

    # Writes (profiles are mutable, results are not)

    def _upsert(self, model, fields, data: Dict[str, Any]) -> Dict[str, Any]:
        with self.session() as s:
            row = s.get(model, data["id"])
            if row is None:
                s.add(model(**data))
                s.commit()
                return {"status": "new"}
            changed = diff_dict(_row_fields(row, fields), data)
            if not changed:
                return {"status": "no-change"}
            for k, v in data.items():
                setattr(row, k, v)
            s.commit()
            return {"status": "updated", "changed": sorted(changed)}

    def save_candidate(self, profile: CandidateProfile) -> Dict[str, Any]:
        return self._upsert(Candidate, _CANDIDATE_FIELDS, profile.to_dict())

    def save_job(self, job: JobPosting) -> Dict[str, Any]:
        return self._upsert(Job, _JOB_FIELDS, job.to_dict())

    def save_company(self, company: CompanyProfile) -> Dict[str, Any]:
        return self._upsert(Company, _COMPANY_FIELDS, company.to_dict())

    def persist_result(self, result: MatchResult, weights: Dict[str, float]) -> bool:
        """
        Insert a result into match history.

        Returns False when an identical result is already stored under the
        same (candidate, job, computed_at) key.

        Raises:
            PersistenceError: A different result already holds that key
        """
        record = MatchRecord(
            candidate_id=result.candidate_id,
            job_id=result.job_id,
            score=result.score,
            dimensions=dict(result.dimensions),
            rationale=result.rationale,
            weights=dict(weights),
            computed_at=_naive_utc(result.computed_at),
        )
        with self.session() as s:
            s.add(record)
            try:
                s.commit()
                return True
            except IntegrityError:
                s.rollback()
            existing = s.scalars(
                select(MatchRecord).where(
                    MatchRecord.candidate_id == result.candidate_id,
                    MatchRecord.job_id == result.job_id,
                    MatchRecord.computed_at == _naive_utc(result.computed_at),
                )
            ).first()
            if existing is not None and record_to_result(existing) == result and existing.weights == dict(weights):
                return False
            raise PersistenceError(
                f"A different result is already stored for candidate {result.candidate_id}, "
                f"job {result.job_id} at {_to_utc(result.computed_at).isoformat()}"
            )

    # Match history

    def latest_result(
        self,
        candidate_id: str,
        job_id: str,
        weights: Optional[Dict[str, float]] = None,
        max_age: Optional[float] = None,
        now: Optional[datetime] = None,
    ) -> Optional[MatchResult]:
        """
        Most recent stored result.

        Args:
            weights: Only consider results computed under these weights
            max_age: Only consider results at most this many seconds old
            now: Reference time for max_age (default: current UTC time)
        """
        stmt = (
            select(MatchRecord)
            .where(MatchRecord.candidate_id == candidate_id, MatchRecord.job_id == job_id)
            .order_by(MatchRecord.computed_at.desc(), MatchRecord.id.desc())
        )
        if max_age is not None:
            now = now or datetime.now(timezone.utc)
            cutoff = _naive_utc(now) - timedelta(seconds=max_age)
            stmt = stmt.where(MatchRecord.computed_at >= cutoff)
        with self.session() as s:
            for record in s.scalars(stmt):
                # JSON columns do not compare reliably in SQL
                if weights is None or record.weights == dict(weights):
                    return record_to_result(record)
        return None

    def result_history(self, candidate_id: str, job_id: Optional[str] = None) -> List[MatchResult]:
        stmt = select(MatchRecord).where(MatchRecord.candidate_id == candidate_id)
        if job_id:
            stmt = stmt.where(MatchRecord.job_id == job_id)
        stmt = stmt.order_by(MatchRecord.computed_at, MatchRecord.id)
        with self.session() as s:
            return [record_to_result(r) for r in s.scalars(stmt)]

    # Admin

    def stats(self) -> Dict[str, Any]:
        with self.session() as s:
            counts = {
                "candidates": s.scalar(select(func.count()).select_from(Candidate)),
                "jobs": s.scalar(select(func.count()).select_from(Job)),
                "open_jobs": s.scalar(select(func.count()).select_from(Job).where(Job.status == "open")),
                "companies": s.scalar(select(func.count()).select_from(Company)),
                "match_results": s.scalar(select(func.count()).select_from(MatchRecord)),
            }
            avg = s.scalar(select(func.avg(MatchRecord.score)))
            counts["average_score"] = round(avg, 1) if avg is not None else None
            return counts

    def ping(self) -> bool:
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
