"""
Pytest configuration and shared fixtures.
"""

import pytest
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Any

from agromatch.config import MatchConfig
from agromatch.logger import StructuredLogger
from agromatch.models import CandidateProfile, CompanyProfile, JobPosting
from agromatch.storage import SqlProfileStore


FIXED_TIME = datetime(2026, 3, 1, 8, 30, tzinfo=timezone.utc)


@pytest.fixture
def welder_candidate() -> Dict[str, Any]:
    """Romanian candidate with machinery skills."""
    return {
        "id": "cand-1",
        "name": "Ion Popescu",
        "skills": ["Welding", " forklift "],
        "experience_level": "intermediate",
        "preferred_location": "Aarhus, Denmark",
        "languages": ["Romanian", "English"],
    }


@pytest.fixture
def welding_job() -> Dict[str, Any]:
    """Farm machinery job requiring welding."""
    return {
        "id": "job-1",
        "title": "Farm machinery welder",
        "required_skills": ["welding"],
        "min_experience": "intermediate",
        "location": "Aarhus, Denmark",
        "contract_type": "seasonal",
        "language_requirement": "english",
        "category": "agriculture",
    }


@pytest.fixture
def forestry_job() -> Dict[str, Any]:
    return {
        "id": "job-2",
        "title": "Forest worker",
        "required_skills": ["chainsaw", "tree felling", "welding"],
        "min_experience": "expert",
        "location": "Viborg",
        "contract_type": "permanent",
        "language_requirement": "danish",
        "category": "FORESTRY",
    }


@pytest.fixture
def farm_company() -> Dict[str, Any]:
    return {
        "id": "comp-1",
        "name": "Jysk Landbrug ApS",
        "industry": "Agriculture",
        "size": "medium",
        "revenue": 12_000_000,
        "open_positions": 8,
        "email_response_hours": 6,
        "offers_relocation": True,
        "provides_housing": True,
    }


@pytest.fixture
def quiet_logger(tmp_path) -> StructuredLogger:
    """Logger writing only to a temporary directory."""
    return StructuredLogger(
        name="agromatch-test",
        log_dir=tmp_path / "logs",
        enable_console=False,
    )


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_TIME


@pytest.fixture
def fast_config(tmp_path) -> MatchConfig:
    """Config with short timeouts and no backoff delay."""
    return MatchConfig(
        db_path=tmp_path / "agromatch.db",
        fetch_timeout=1.0,
        fetch_retries=1,
        retry_base_delay=0.0,
        max_workers=4,
    )


@pytest.fixture
def store(tmp_path) -> SqlProfileStore:
    store = SqlProfileStore(tmp_path / "agromatch.db")
    yield store
    store.close()


@pytest.fixture
def populated_store(store, welder_candidate, welding_job, forestry_job, farm_company) -> SqlProfileStore:
    """Store holding one candidate, two jobs and one company."""
    store.save_candidate(CandidateProfile.from_dict(welder_candidate))
    store.save_job(JobPosting.from_dict(welding_job))
    store.save_job(JobPosting.from_dict(forestry_job))
    store.save_company(CompanyProfile.from_dict(farm_company))
    return store
