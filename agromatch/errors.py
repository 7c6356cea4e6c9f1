"""
Error types surfaced to callers of the matching pipeline.

Each error maps to an HTTP-style status so API layers can translate
failures without inspecting messages.
"""

from typing import Any, Dict


class MatchError(Exception):
    """Base class for all pipeline failures."""

    kind = "MatchError"
    status_code = 500

    def __init__(self, message: str = ""):
        super().__init__(message or self.kind)
        self.message = message or self.kind

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.kind, "message": self.message}


class NotFound(MatchError):
    """A candidate, job or company id did not resolve. Never retried."""

    kind = "NotFound"
    status_code = 404

    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity.capitalize()} not found: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class ConfigurationError(MatchError):
    """Invalid weighting or settings. Raised at load time."""

    kind = "ConfigurationError"
    status_code = 500


class RetrievalTimeout(MatchError):
    """The backing store was slow or unavailable."""

    kind = "RetrievalTimeout"
    status_code = 503


class InvalidCommand(MatchError):
    kind = "InvalidCommand"
    status_code = 400


class PersistenceError(MatchError):
    """A computed result could not be written to match history."""

    kind = "PersistenceError"
    status_code = 503
