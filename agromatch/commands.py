"""
Admin commands.

A closed set of request kinds replaces guessing the action from free text.
Payloads look like {"kind": "compute_match", "candidate_id": "...", ...}.
"""

from dataclasses import MISSING, asdict, dataclass, fields
from typing import Any, Dict, Optional, Union

from sqlalchemy.exc import SQLAlchemyError

from .errors import InvalidCommand, MatchError
from .matcher import Matcher


@dataclass(frozen=True)
class ComputeMatch:
    candidate_id: str
    job_id: str
    persist: bool = False


@dataclass(frozen=True)
class RankJobs:
    candidate_id: str
    limit: Optional[int] = 10
    persist: bool = False


@dataclass(frozen=True)
class ScoreLead:
    company_id: str


@dataclass(frozen=True)
class MatchHistory:
    candidate_id: str
    job_id: Optional[str] = None


@dataclass(frozen=True)
class GetStats:
    pass


@dataclass(frozen=True)
class CheckHealth:
    pass


Command = Union[ComputeMatch, RankJobs, ScoreLead, MatchHistory, GetStats, CheckHealth]

COMMAND_KINDS = {
    "compute_match": ComputeMatch,
    "rank_jobs": RankJobs,
    "score_lead": ScoreLead,
    "match_history": MatchHistory,
    "get_stats": GetStats,
    "check_health": CheckHealth,
}

_FIELD_TYPES = {"persist": bool, "limit": int}


def parse_command(payload: Dict[str, Any]) -> Command:
    """Build a command from a JSON payload, raising InvalidCommand on bad input."""
    if not isinstance(payload, dict):
        raise InvalidCommand("Command payload must be an object")
    kind = payload.get("kind")
    cls = COMMAND_KINDS.get(kind)
    if cls is None:
        raise InvalidCommand(f"Unknown command kind: {kind!r}. Expected one of: {', '.join(COMMAND_KINDS)}")

    known = {f.name: f for f in fields(cls)}
    unknown = set(payload) - set(known) - {"kind"}
    if unknown:
        raise InvalidCommand(f"Unexpected fields for {kind}: {', '.join(sorted(unknown))}")

    args: Dict[str, Any] = {}
    for name, f in known.items():
        if name not in payload:
            if f.default is MISSING and f.default_factory is MISSING:
                raise InvalidCommand(f"Missing required field for {kind}: {name}")
            continue
        value = payload[name]
        expected = _FIELD_TYPES.get(name, str)
        if value is None and name in ("limit", "job_id"):
            args[name] = None
            continue
        if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
            raise InvalidCommand(f"Field '{name}' for {kind} must be {expected.__name__}")
        if expected is str and not value.strip():
            raise InvalidCommand(f"Field '{name}' for {kind} must be a non-empty string")
        args[name] = value
    return cls(**args)


class CommandHandler:
    """Executes admin commands against a matcher and its store."""

    def __init__(self, matcher: Matcher):
        self.matcher = matcher
        self.store = matcher.store
        self._handlers = {
            ComputeMatch: self._compute_match,
            RankJobs: self._rank_jobs,
            ScoreLead: self._score_lead,
            MatchHistory: self._match_history,
            GetStats: self._get_stats,
            CheckHealth: self._check_health,
        }

    def handle(self, command: Command) -> Dict[str, Any]:
        handler = self._handlers.get(type(command))
        if handler is None:
            raise TypeError(f"Unhandled command type: {type(command).__name__}")
        self.matcher.logger.info("Admin command", command=type(command).__name__, args=asdict(command))
        return handler(command)

    def _compute_match(self, cmd: ComputeMatch) -> Dict[str, Any]:
        result = self.matcher.match(cmd.candidate_id, cmd.job_id, persist=cmd.persist)
        return dict(result.to_dict(), candidateId=result.candidate_id, jobId=result.job_id)

    def _rank_jobs(self, cmd: RankJobs) -> Dict[str, Any]:
        return self.matcher.rank_jobs(cmd.candidate_id, persist=cmd.persist, limit=cmd.limit).to_dict()

    def _score_lead(self, cmd: ScoreLead) -> Dict[str, Any]:
        return self.matcher.leads.score(cmd.company_id).to_dict()

    def _match_history(self, cmd: MatchHistory) -> Dict[str, Any]:
        history = self.store.result_history(cmd.candidate_id, cmd.job_id)
        return {
            "candidateId": cmd.candidate_id,
            "history": [dict(r.to_dict(), jobId=r.job_id) for r in history],
        }

    def _get_stats(self, cmd: GetStats) -> Dict[str, Any]:
        return {"stats": self.store.stats(), "metrics": self.matcher.logger.get_metrics()}

    def _check_health(self, cmd: CheckHealth) -> Dict[str, Any]:
        try:
            database = "ok" if self.store.ping() else "unavailable"
        except SQLAlchemyError as e:
            self.matcher.logger.error("Health check failed", error=str(e))
            database = "unavailable"
        return {"overall": "healthy" if database == "ok" else "degraded", "database": database}


def run_command(handler: CommandHandler, payload: Dict[str, Any]) -> Dict[str, Any]:
    """Parse and execute a payload, returning either the result or an error body."""
    try:
        return {"ok": True, "result": handler.handle(parse_command(payload))}
    except MatchError as e:
        return {"ok": False, "status": e.status_code, **e.to_dict()}
