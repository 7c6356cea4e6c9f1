"""
Score Aggregation.

Responsibilities:
- Validate weighting configurations.
- Combine sub-scores into a 0-100 score rounded to one decimal.
- Explain the score by its top contributing dimensions.

Non-Responsibilities:
- No feature computation.
- No data retrieval.

Invariant:
Given identical sub-scores and weights, this module must always return
the same score and rationale.
"""

from typing import Dict, Iterable, List, Mapping, Sequence, Tuple

from .errors import ConfigurationError

WEIGHT_TOLERANCE = 1e-6
NEUTRAL = 0.5

LABELS = {
    "skill": "skill overlap",
    "experience": "experience fit",
    "location": "location fit",
    "language": "language fit",
    "financial_health": "financial health",
    "hiring_urgency": "hiring urgency",
    "relocation_support": "relocation support",
    "communication": "communication",
    "industry_match": "industry match",
    "size_compatibility": "company size",
}


def validate_weights(weights: Mapping[str, float], dimensions: Iterable[str]) -> Dict[str, float]:
    """
    Check a weighting configuration against the known dimensions.

    Args:
        weights: dimension -> weight
        dimensions: allowed dimension names

    Returns:
        A plain dict copy with float weights

    Raises:
        ConfigurationError: unknown dimension, negative or non-numeric
            weight, or weights not summing to 1.0 within tolerance
    """
    allowed = set(dimensions)
    if not weights:
        raise ConfigurationError("No weights configured")

    cleaned: Dict[str, float] = {}
    for name, value in weights.items():
        if name not in allowed:
            raise ConfigurationError(f"Unknown dimension in weights: {name}")
        try:
            w = float(value)
        except (TypeError, ValueError):
            raise ConfigurationError(f"Weight for '{name}' must be a number, got {value!r}")
        if w < 0:
            raise ConfigurationError(f"Weight for '{name}' must not be negative")
        cleaned[name] = w

    total = sum(cleaned.values())
    if abs(total - 1.0) > WEIGHT_TOLERANCE:
        raise ConfigurationError(f"Weights must sum to 1.0, got {total:.6f}")
    return cleaned


def contributions(sub_scores: Mapping[str, float], weights: Mapping[str, float]) -> Dict[str, float]:
    return {name: w * sub_scores.get(name, NEUTRAL) for name, w in weights.items()}


def weighted_score(sub_scores: Mapping[str, float], weights: Mapping[str, float]) -> float:
    total = sum(contributions(sub_scores, weights).values())
    total = min(1.0, max(0.0, total))
    return round(total * 100, 1)


def top_contributors(
    sub_scores: Mapping[str, float],
    weights: Mapping[str, float],
    order: Sequence[str],
    n: int = 2,
) -> List[Tuple[str, float]]:
    """Top-n (dimension, points) pairs; ties follow the given order."""
    parts = contributions(sub_scores, weights)
    rank = {name: i for i, name in enumerate(order)}
    ranked = sorted(parts.items(), key=lambda kv: (-kv[1], rank.get(kv[0], len(rank)), kv[0]))
    return [(name, round(points * 100, 1)) for name, points in ranked[:n]]


def build_rationale(top: List[Tuple[str, float]]) -> str:
    if not top:
        return "No contributing factors."
    parts = [f"{LABELS.get(name, name.replace('_', ' '))} ({points:.1f} pts)" for name, points in top]
    return "Top factors: " + ", ".join(parts)


def aggregate(
    sub_scores: Mapping[str, float],
    weights: Mapping[str, float],
    order: Sequence[str],
) -> Tuple[float, str]:
    """
    Combine sub-scores into (score, rationale).

    Weights are re-validated so a bad mapping never produces a score.
    """
    valid = validate_weights(weights, order)
    score = weighted_score(sub_scores, valid)
    rationale = build_rationale(top_contributors(sub_scores, valid, order))
    return score, rationale
