"""
Domain records passed between the store and the scoring pipeline.

Profiles are read-only to the scorer; results are created once and never
mutated.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from .normalize import (
    normalize_experience,
    normalize_language,
    normalize_location,
    normalize_skills,
)


@dataclass(frozen=True)
class CandidateProfile:
    id: str
    skills: List[str] = field(default_factory=list)
    experience_level: Optional[str] = None
    preferred_location: Optional[str] = None
    languages: List[str] = field(default_factory=list)
    name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CandidateProfile":
        return cls(
            id=str(data["id"]),
            skills=normalize_skills(data.get("skills")),
            experience_level=normalize_experience(data.get("experience_level")),
            preferred_location=normalize_location(data.get("preferred_location")),
            languages=sorted({normalize_language(lang) for lang in data.get("languages") or [] if lang}),
            name=data.get("name"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "skills": list(self.skills),
            "experience_level": self.experience_level,
            "preferred_location": self.preferred_location,
            "languages": list(self.languages),
        }


@dataclass(frozen=True)
class JobPosting:
    id: str
    title: str = ""
    required_skills: List[str] = field(default_factory=list)
    min_experience: Optional[str] = None
    location: Optional[str] = None
    contract_type: Optional[str] = None
    language_requirement: Optional[str] = None
    category: Optional[str] = None
    status: str = "open"
    company_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "JobPosting":
        lang = data.get("language_requirement")
        category = data.get("category")
        return cls(
            id=str(data["id"]),
            title=(data.get("title") or "").strip(),
            required_skills=normalize_skills(data.get("required_skills")),
            min_experience=normalize_experience(data.get("min_experience")),
            location=normalize_location(data.get("location")),
            contract_type=(data.get("contract_type") or None),
            language_requirement=normalize_language(lang) if lang else None,
            category=category.strip().upper() if category else None,
            status=(data.get("status") or "open").strip().lower(),
            company_id=data.get("company_id"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "required_skills": list(self.required_skills),
            "min_experience": self.min_experience,
            "location": self.location,
            "contract_type": self.contract_type,
            "language_requirement": self.language_requirement,
            "category": self.category,
            "status": self.status,
            "company_id": self.company_id,
        }


@dataclass(frozen=True)
class CompanyProfile:
    id: str
    name: str = ""
    industry: Optional[str] = None
    size: Optional[str] = None
    revenue: Optional[float] = None
    open_positions: Optional[int] = None
    email_response_hours: Optional[float] = None
    offers_relocation: bool = False
    provides_housing: bool = False
    helps_with_visa: bool = False
    transport_support: bool = False
    language_training: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CompanyProfile":
        industry = data.get("industry")
        size = data.get("size")
        return cls(
            id=str(data["id"]),
            name=(data.get("name") or "").strip(),
            industry=industry.strip().lower() if industry else None,
            size=size.strip().lower() if size else None,
            revenue=data.get("revenue"),
            open_positions=data.get("open_positions"),
            email_response_hours=data.get("email_response_hours"),
            offers_relocation=bool(data.get("offers_relocation")),
            provides_housing=bool(data.get("provides_housing")),
            helps_with_visa=bool(data.get("helps_with_visa")),
            transport_support=bool(data.get("transport_support")),
            language_training=bool(data.get("language_training")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "industry": self.industry,
            "size": self.size,
            "revenue": self.revenue,
            "open_positions": self.open_positions,
            "email_response_hours": self.email_response_hours,
            "offers_relocation": self.offers_relocation,
            "provides_housing": self.provides_housing,
            "helps_with_visa": self.helps_with_visa,
            "transport_support": self.transport_support,
            "language_training": self.language_training,
        }


@dataclass(frozen=True)
class MatchResult:
    candidate_id: str
    job_id: str
    score: float
    dimensions: Dict[str, float]
    rationale: str
    computed_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        """Stable JSON shape returned to callers."""
        return {
            "score": self.score,
            "dimensions": dict(self.dimensions),
            "rationale": self.rationale,
            "computedAt": self.computed_at.isoformat(),
        }


@dataclass(frozen=True)
class LeadScore:
    company_id: str
    score: float
    dimensions: Dict[str, float]
    rationale: str
    reasons: List[str]
    computed_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "companyId": self.company_id,
            "score": self.score,
            "dimensions": dict(self.dimensions),
            "rationale": self.rationale,
            "reasons": list(self.reasons),
            "computedAt": self.computed_at.isoformat(),
        }
