"""
Scoring utilities
zzik/scoring/utils.py

Numeric helpers shared by the recommendation, leader-matching and
prediction scorers. All functions are pure and total: degenerate inputs
(empty vectors, zero norms, zero denominators) return 0 instead of raising.
"""

import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Mapping, Sequence


def clamp(value: float, min_val: float = 0.0, max_val: float = 1.0) -> float:
    """Clamp value to range [min_val, max_val]."""
    return max(min_val, min(max_val, value))


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero (not banker's rounding)."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def average(values: Sequence[float]) -> float:
    """Arithmetic mean, 0 for an empty sequence."""
    if not values:
        return 0.0
    return sum(values) / len(values)


def sigmoid(x: float) -> float:
    """Logistic function 1 / (1 + e^-x)."""
    return 1.0 / (1.0 + math.exp(-x))


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine similarity of two vectors.

    Formula: Σ(a_i × b_i) / (‖a‖ × ‖b‖)

    Vectors of different length are compared over their common prefix.
    Returns 0.0 if either vector is empty or has zero norm.
    """
    n = min(len(a), len(b))
    if n == 0:
        return 0.0

    dot = 0.0
    norm_a = 0.0
    norm_b = 0.0
    for i in range(n):
        dot += a[i] * b[i]
        norm_a += a[i] * a[i]
        norm_b += b[i] * b[i]

    if norm_a == 0 or norm_b == 0:
        return 0.0

    return clamp(dot / (math.sqrt(norm_a) * math.sqrt(norm_b)), -1.0, 1.0)


def histogram_overlap(target: Mapping[str, float], actual: Mapping[str, float]) -> float:
    """
    Share of a target histogram covered by another histogram.

    Formula: Σ min(target_k, actual_k) / Σ target_k
    Returns 0.0 if the target is empty or sums to zero.
    """
    total = sum(target.values())
    if total <= 0:
        return 0.0
    covered = sum(min(weight, actual.get(key, 0.0)) for key, weight in target.items())
    return clamp(covered / total)


def weighted_sum(values: Mapping[str, float], weights: Mapping[str, float]) -> float:
    """Σ(value_k × weight_k) over the keys of weights; missing values count as 0."""
    return sum(values.get(key, 0.0) * weight for key, weight in weights.items())


def format_followers(count: int) -> str:
    """Human-readable follower count: 1.2M, 45.0K, 950."""
    if count >= 1_000_000:
        return f"{count / 1_000_000:.1f}M"
    if count >= 1_000:
        return f"{count / 1_000:.1f}K"
    return str(count)
