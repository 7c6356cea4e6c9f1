"""
Configuration for the matching pipeline.

Settings are resolved in order: built-in defaults, an optional JSON file,
then AGROMATCH_* environment variables. Weights are validated here so a
bad setup fails at startup rather than per request.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .errors import ConfigurationError
from .features import DIMENSIONS
from .scoring import validate_weights

DEFAULT_WEIGHTS = {
    "skill": 0.40,
    "experience": 0.25,
    "location": 0.20,
    "language": 0.15,
}

LEAD_DIMENSIONS = (
    "financial_health",
    "hiring_urgency",
    "relocation_support",
    "communication",
    "industry_match",
    "size_compatibility",
)

DEFAULT_LEAD_WEIGHTS = {
    "financial_health": 0.25,
    "hiring_urgency": 0.20,
    "relocation_support": 0.20,
    "communication": 0.15,
    "industry_match": 0.10,
    "size_compatibility": 0.10,
}

ENV_PREFIX = "AGROMATCH_"


@dataclass(frozen=True)
class MatchConfig:
    weights: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_WEIGHTS))
    lead_weights: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_LEAD_WEIGHTS))
    db_path: Path = Path("data/agromatch.db")
    fetch_timeout: float = 5.0
    fetch_retries: int = 2
    retry_base_delay: float = 0.5
    cache_ttl: float = 0.0
    max_workers: int = 8
    log_level: str = "INFO"

    def __post_init__(self):
        validate_weights(self.weights, DIMENSIONS)
        validate_weights(self.lead_weights, LEAD_DIMENSIONS)
        if self.fetch_timeout <= 0:
            raise ConfigurationError("fetch_timeout must be positive")
        if self.fetch_retries < 0:
            raise ConfigurationError("fetch_retries must not be negative")
        if self.retry_base_delay < 0:
            raise ConfigurationError("retry_base_delay must not be negative")
        if self.cache_ttl < 0:
            raise ConfigurationError("cache_ttl must not be negative")
        if self.max_workers < 1:
            raise ConfigurationError("max_workers must be at least 1")


def parse_weights(raw: str) -> Dict[str, float]:
    """Parse 'skill=0.4,experience=0.3' into a dict."""
    weights: Dict[str, float] = {}
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        if "=" not in part:
            raise ConfigurationError(f"Invalid weight entry (expected name=value): {part}")
        name, value = part.split("=", 1)
        try:
            weights[name.strip()] = float(value)
        except ValueError:
            raise ConfigurationError(f"Invalid weight value for '{name.strip()}': {value}")
    return weights


_CASTS = {
    "fetch_timeout": float,
    "fetch_retries": int,
    "retry_base_delay": float,
    "cache_ttl": float,
    "max_workers": int,
    "log_level": str,
    "db_path": Path,
}

_ENV_NAMES = {
    "DB": "db_path",
    "FETCH_TIMEOUT": "fetch_timeout",
    "FETCH_RETRIES": "fetch_retries",
    "RETRY_BASE_DELAY": "retry_base_delay",
    "CACHE_TTL": "cache_ttl",
    "MAX_WORKERS": "max_workers",
    "LOG_LEVEL": "log_level",
}


def _cast(name: str, value: Any) -> Any:
    try:
        return _CASTS[name](value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Invalid value for {name}: {value!r}")


def load_config(path: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None) -> MatchConfig:
    """
    Build a validated MatchConfig.

    Args:
        path: Optional JSON file with any MatchConfig field
        environ: Environment mapping (default: os.environ)

    Raises:
        ConfigurationError: On unreadable files, unknown keys or bad values
    """
    environ = os.environ if environ is None else environ
    values: Dict[str, Any] = {}

    if path is not None:
        if not path.exists():
            raise ConfigurationError(f"Config file not found: {path}")
        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            raise ConfigurationError(f"Could not read config file {path}: {e}")
        if not isinstance(data, dict):
            raise ConfigurationError("Config file must contain a JSON object")
        for key, value in data.items():
            if key in ("weights", "lead_weights"):
                if not isinstance(value, dict):
                    raise ConfigurationError(f"'{key}' must be an object")
                values[key] = value
            elif key in _CASTS:
                values[key] = _cast(key, value)
            else:
                raise ConfigurationError(f"Unknown config key: {key}")

    for suffix, name in _ENV_NAMES.items():
        raw = environ.get(ENV_PREFIX + suffix)
        if raw:
            values[name] = _cast(name, raw)
    if environ.get(ENV_PREFIX + "WEIGHTS"):
        values["weights"] = parse_weights(environ[ENV_PREFIX + "WEIGHTS"])
    if environ.get(ENV_PREFIX + "LEAD_WEIGHTS"):
        values["lead_weights"] = parse_weights(environ[ENV_PREFIX + "LEAD_WEIGHTS"])

    return MatchConfig(**values)
