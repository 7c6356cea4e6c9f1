"""Candidate/job matching and lead scoring for farm and forestry recruitment."""

__version__ = "0.1.0"
