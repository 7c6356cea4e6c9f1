"""
Database schema and connection management.

Uses SQLite with SQLAlchemy for profiles and match history.
"""

from datetime import datetime
from pathlib import Path
from sqlalchemy import (
    create_engine,
    Boolean,
    Column,
    DateTime,
    Float,
    Integer,
    JSON,
    String,
    UniqueConstraint,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class Candidate(Base):
    """Job seeker profile."""

    __tablename__ = "candidates"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=True)
    skills = Column(JSON, nullable=False, default=list)
    experience_level = Column(String, nullable=True)  # beginner, intermediate, expert
    preferred_location = Column(String, nullable=True)
    languages = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)


class Job(Base):
    """Job posting model."""

    __tablename__ = "jobs"

    id = Column(String, primary_key=True)
    title = Column(String, nullable=False)
    company_id = Column(String, nullable=True)
    category = Column(String, nullable=True)  # FORESTRY, AGRICULTURE, GREENHOUSE, ...
    required_skills = Column(JSON, nullable=False, default=list)
    min_experience = Column(String, nullable=True)
    location = Column(String, nullable=True)
    contract_type = Column(String, nullable=True)
    language_requirement = Column(String, nullable=True)
    status = Column(String, nullable=False, default="open")
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)


class Company(Base):
    """Employer scored as a recruitment lead."""

    __tablename__ = "companies"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    industry = Column(String, nullable=True)
    size = Column(String, nullable=True)  # small, medium, large
    revenue = Column(Float, nullable=True)
    open_positions = Column(Integer, nullable=True)
    email_response_hours = Column(Float, nullable=True)
    offers_relocation = Column(Boolean, nullable=False, default=False)
    provides_housing = Column(Boolean, nullable=False, default=False)
    helps_with_visa = Column(Boolean, nullable=False, default=False)
    transport_support = Column(Boolean, nullable=False, default=False)
    language_training = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)


class MatchRecord(Base):
    """Insert-only history of computed match results."""

    __tablename__ = "match_results"
    __table_args__ = (
        UniqueConstraint("candidate_id", "job_id", "computed_at", name="uq_match_result_key"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    candidate_id = Column(String, nullable=False, index=True)
    job_id = Column(String, nullable=False, index=True)
    score = Column(Float, nullable=False)
    dimensions = Column(JSON, nullable=False)
    rationale = Column(String, nullable=False)
    weights = Column(JSON, nullable=False)
    computed_at = Column(DateTime, nullable=False)


def get_engine(db_path: Path) -> Engine:
    """
    Create an engine usable from worker threads.

    Args:
        db_path: Path to SQLite database file
    """
    return create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False},
    )


def init_database(db_path: Path) -> None:
    """
    Initialize database and create tables.

    Args:
        db_path: Path to SQLite database file
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = get_engine(db_path)
    Base.metadata.create_all(engine)
    engine.dispose()

