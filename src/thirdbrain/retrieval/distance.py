"""Distance metrics between embedding vectors.

A distance is a non-negative, non-NaN float where 0 means identical and
larger means less similar. Cosine distance is additionally bounded by 1.
Values that break these bounds raise NumericContractViolation rather than
being clamped; only floating point rounding within ROUNDING_TOLERANCE of a
bound is snapped onto it.
"""
import math
from typing import Callable

import numpy as np

from ..errors import InvalidInputError, NumericContractViolation

DistanceMetric = Callable[[np.ndarray, np.ndarray], float]

ROUNDING_TOLERANCE = 1e-6


def to_distance(value: float, upper: float = math.inf) -> float:
    """Validate a raw metric value as a distance in [0, upper].

    Raises:
        NumericContractViolation: If the value is NaN or out of range.
    """
    value = float(value)
    if math.isnan(value):
        raise NumericContractViolation("Distance cannot be NaN")
    if value < 0.0:
        if value < -ROUNDING_TOLERANCE:
            raise NumericContractViolation(f"Distance must be non-negative, got: {value}")
        return 0.0
    if value > upper:
        if value > upper + ROUNDING_TOLERANCE:
            raise NumericContractViolation(f"Distance must be at most {upper}, got: {value}")
        return upper
    return value


def cosine_distance(a: np.ndarray, b: np.ndarray) -> float:
    """Compute 1 - cos(a, b), bounded to [0, 1].

    Vectors pointing more than 90 degrees apart, and zero vectors, have no
    valid cosine distance and raise NumericContractViolation.
    """
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)

    norm_a = float(np.sqrt(a.dot(a)))
    norm_b = float(np.sqrt(b.dot(b)))
    if norm_a == 0.0 or norm_b == 0.0:
        raise NumericContractViolation("Cosine distance is undefined for a zero-norm vector")

    similarity = float(a.dot(b)) / (norm_a * norm_b)
    return to_distance(1.0 - similarity, upper=1.0)


def euclidean_distance(a: np.ndarray, b: np.ndarray) -> float:
    """Compute the straight-line distance sqrt(sum((a - b)^2))."""
    diff = np.asarray(a, dtype=np.float64) - np.asarray(b, dtype=np.float64)
    return to_distance(math.sqrt(float(diff.dot(diff))))


DISTANCE_METRICS: dict[str, DistanceMetric] = {
    "cosine": cosine_distance,
    "euclidean": euclidean_distance,
}


def get_distance_metric(name: str) -> DistanceMetric:
    """Look up a distance metric by name ("cosine" or "euclidean")."""
    try:
        return DISTANCE_METRICS[name]
    except KeyError:
        available = ", ".join(sorted(DISTANCE_METRICS))
        raise InvalidInputError(f"Unknown distance metric {name!r}. Available: {available}") from None
