"""
Lead scoring for employer companies.

Rates how promising a Danish employer is as a client for placing Romanian
workers. Shares the aggregator and bounded fetch with candidate matching.
"""

from datetime import datetime
from typing import Callable, Dict, List

from .config import LEAD_DIMENSIONS, MatchConfig
from .errors import MatchError
from .fetching import BoundedFetcher
from .logger import StructuredLogger
from .models import CompanyProfile, LeadScore
from .scoring import aggregate

NEUTRAL = 0.5
REFERENCE_REVENUE = 5_000_000  # DKK; revenue at or above this scores 1.0
URGENT_OPEN_POSITIONS = 5
FAST_RESPONSE_HOURS = 24
STRONG_SIGNAL = 0.8

SUITABLE_INDUSTRIES = {
    "agriculture",
    "forestry",
    "horticulture",
    "manufacturing",
    "construction",
}

SIZE_SCORES = {"small": 0.7, "medium": 0.85, "large": 0.95}

RELOCATION_BONUSES = (
    ("offers_relocation", 0.25),
    ("provides_housing", 0.15),
    ("helps_with_visa", 0.10),
    ("transport_support", 0.10),
    ("language_training", 0.05),
)


def financial_health(company: CompanyProfile) -> float:
    if company.revenue is None or company.revenue < 0:
        return NEUTRAL
    return min(1.0, company.revenue / REFERENCE_REVENUE)


def hiring_urgency(company: CompanyProfile) -> float:
    if company.open_positions is None:
        return NEUTRAL
    return 0.8 if company.open_positions > URGENT_OPEN_POSITIONS else 0.5


def relocation_support(company: CompanyProfile) -> float:
    score = 0.5
    for flag, bonus in RELOCATION_BONUSES:
        if getattr(company, flag):
            score += bonus
    return min(1.0, score)


def communication(company: CompanyProfile) -> float:
    if company.email_response_hours is None:
        return NEUTRAL
    return 0.9 if company.email_response_hours < FAST_RESPONSE_HOURS else 0.6


def industry_match(company: CompanyProfile) -> float:
    if not company.industry:
        return NEUTRAL
    return 0.9 if company.industry in SUITABLE_INDUSTRIES else 0.7


def size_compatibility(company: CompanyProfile) -> float:
    if not company.size:
        return NEUTRAL
    return SIZE_SCORES.get(company.size, NEUTRAL)


LEAD_SCORERS = {
    "financial_health": financial_health,
    "hiring_urgency": hiring_urgency,
    "relocation_support": relocation_support,
    "communication": communication,
    "industry_match": industry_match,
    "size_compatibility": size_compatibility,
}


def compute_lead_features(company: CompanyProfile) -> Dict[str, float]:
    return {name: round(float(LEAD_SCORERS[name](company)), 4) for name in LEAD_DIMENSIONS}


LEAD_REASONS = {
    "financial_health": "Strong financial position",
    "hiring_urgency": "Active hiring needs",
    "relocation_support": "Good relocation support",
    "industry_match": "Industry fits Romanian talent",
}


def lead_reasons(dimensions: Dict[str, float]) -> List[str]:
    return [
        reason
        for name, reason in LEAD_REASONS.items()
        if dimensions.get(name, 0.0) > STRONG_SIGNAL
    ]


def score_company(company: CompanyProfile, weights: Dict[str, float], computed_at: datetime) -> LeadScore:
    dimensions = compute_lead_features(company)
    score, rationale = aggregate(dimensions, weights, LEAD_DIMENSIONS)
    return LeadScore(
        company_id=company.id,
        score=score,
        dimensions=dimensions,
        rationale=rationale,
        reasons=lead_reasons(dimensions),
        computed_at=computed_at,
    )


class LeadScorer:
    """Scores companies fetched from the store."""

    def __init__(
        self,
        config: MatchConfig,
        store,
        fetcher: BoundedFetcher,
        logger: StructuredLogger,
        clock: Callable[[], datetime],
    ):
        self.config = config
        self.store = store
        self.fetcher = fetcher
        self.logger = logger
        self.clock = clock

    def score(self, company_id: str) -> LeadScore:
        try:
            company = self.fetcher.fetch("company", self.store.fetch_company, company_id)
        except MatchError as e:
            self.logger.warning("Lead scoring failed", company_id=company_id, error=e.kind)
            raise
        lead = score_company(company, self.config.lead_weights, self.clock())
        self.logger.info("Lead scored", company_id=company_id, score=lead.score)
        return lead

