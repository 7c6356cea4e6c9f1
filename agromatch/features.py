"""
Feature Scoring for candidate/job matching.

Responsibilities:
- Compute one normalized sub-score in [0, 1] per dimension.
- Compare normalized fields (skills, experience, location, language).

Non-Responsibilities:
- No weighting logic.
- No persistence.

Invariant:
Missing data on either side yields the neutral score, never a mismatch.
"""

from typing import Dict

from .models import CandidateProfile, JobPosting
from .normalize import experience_rank, location_country

NEUTRAL = 0.5

SKILL = "skill"
EXPERIENCE = "experience"
LOCATION = "location"
LANGUAGE = "language"

DIMENSIONS = (SKILL, EXPERIENCE, LOCATION, LANGUAGE)

# Location fit by category
EXACT_LOCATION = 1.0
ANYWHERE_LOCATION = 0.8
SAME_COUNTRY = 0.6
UNKNOWN_COUNTRY = 0.25
OTHER_COUNTRY = 0.0


def skill_overlap(candidate: CandidateProfile, job: JobPosting) -> float:
    required = set(job.required_skills)
    held = set(candidate.skills)
    if not required or not held:
        return NEUTRAL
    return len(required & held) / len(required)


def experience_fit(candidate: CandidateProfile, job: JobPosting) -> float:
    actual = experience_rank(candidate.experience_level)
    required = experience_rank(job.min_experience)
    if actual is None or required is None:
        return NEUTRAL
    shortfall = required - actual
    if shortfall <= 0:
        return 1.0
    return max(0.0, 1.0 - 0.5 * shortfall)


def location_fit(candidate: CandidateProfile, job: JobPosting) -> float:
    wanted = candidate.preferred_location
    offered = job.location
    if not wanted or not offered:
        return NEUTRAL
    if wanted == offered:
        return EXACT_LOCATION
    if wanted == "anywhere":
        return ANYWHERE_LOCATION
    wanted_country = location_country(wanted)
    offered_country = location_country(offered)
    if wanted_country is None or offered_country is None:
        return UNKNOWN_COUNTRY
    if wanted_country == offered_country:
        return SAME_COUNTRY
    return OTHER_COUNTRY


def language_fit(candidate: CandidateProfile, job: JobPosting) -> float:
    if not job.language_requirement or not candidate.languages:
        return NEUTRAL
    return 1.0 if job.language_requirement in candidate.languages else 0.0


SCORERS = {
    SKILL: skill_overlap,
    EXPERIENCE: experience_fit,
    LOCATION: location_fit,
    LANGUAGE: language_fit,
}


def compute_features(candidate: CandidateProfile, job: JobPosting) -> Dict[str, float]:
    """Return dimension -> sub-score for a candidate/job pair."""
    return {name: float(SCORERS[name](candidate, job)) for name in DIMENSIONS}
