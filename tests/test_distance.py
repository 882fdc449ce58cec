"""Tests for distance metrics."""

import math

import numpy as np
import pytest

from thirdbrain.errors import InvalidInputError, NumericContractViolation
from thirdbrain.retrieval.distance import (
    cosine_distance,
    euclidean_distance,
    get_distance_metric,
    to_distance,
)


class TestToDistance:
    """Tests for distance validation."""

    def test_accepts_values_in_range(self) -> None:
        """Test that ordinary values pass through unchanged."""
        assert to_distance(0.0) == 0.0
        assert to_distance(0.25) == 0.25
        assert to_distance(1.0, upper=1.0) == 1.0

    def test_rejects_nan(self) -> None:
        """Test that NaN is never a distance."""
        with pytest.raises(NumericContractViolation):
            to_distance(float("nan"))

    def test_rejects_negative(self) -> None:
        """Test that clearly negative values are rejected."""
        with pytest.raises(NumericContractViolation):
            to_distance(-0.5)

    def test_rejects_above_upper_bound(self) -> None:
        """Test that values past the upper bound are rejected."""
        with pytest.raises(NumericContractViolation):
            to_distance(1.5, upper=1.0)

    def test_snaps_rounding_noise(self) -> None:
        """Test that tiny rounding errors are snapped onto the bound."""
        assert to_distance(-1e-9) == 0.0
        assert to_distance(1.0 + 1e-9, upper=1.0) == 1.0

    def test_errors_are_arithmetic_errors(self) -> None:
        """Test that contract violations can be caught as ArithmeticError."""
        with pytest.raises(ArithmeticError):
            to_distance(-1.0)


class TestCosineDistance:
    """Tests for cosine distance."""

    def test_identical_vectors(self) -> None:
        """Test that a vector is at distance 0 from itself."""
        v = np.array([0.3, 0.4, 0.5], dtype=np.float32)
        assert cosine_distance(v, v) == pytest.approx(0.0, abs=1e-6)

    def test_orthogonal_vectors(self) -> None:
        """Test that orthogonal vectors are at distance 1."""
        a = np.array([1.0, 0.0])
        b = np.array([0.0, 1.0])
        assert cosine_distance(a, b) == pytest.approx(1.0)

    def test_scale_invariant(self) -> None:
        """Test that scaling a vector doesn't change its cosine distance."""
        a = np.array([1.0, 2.0, 3.0])
        b = np.array([2.0, 1.0, 0.5])
        assert cosine_distance(a, b) == pytest.approx(cosine_distance(a * 10, b))

    def test_known_value(self) -> None:
        """Test a 45 degree angle."""
        a = np.array([1.0, 0.0])
        b = np.array([1.0, 1.0])
        assert cosine_distance(a, b) == pytest.approx(1 - 1 / math.sqrt(2))

    def test_opposite_vectors_rejected(self) -> None:
        """Test that vectors more than 90 degrees apart break the bound."""
        a = np.array([1.0, 0.0])
        with pytest.raises(NumericContractViolation):
            cosine_distance(a, -a)

    def test_zero_vector_rejected(self) -> None:
        """Test that a zero vector has no cosine distance."""
        with pytest.raises(NumericContractViolation):
            cosine_distance(np.zeros(3), np.ones(3))


class TestEuclideanDistance:
    """Tests for Euclidean distance."""

    def test_known_value(self) -> None:
        assert euclidean_distance(np.array([0.0, 0.0]), np.array([3.0, 4.0])) == pytest.approx(5.0)

    def test_identical_vectors(self) -> None:
        v = np.array([1.0, -2.0, 3.0])
        assert euclidean_distance(v, v) == 0.0


class TestGetDistanceMetric:
    """Tests for metric lookup by name."""

    def test_known_names(self) -> None:
        assert get_distance_metric("cosine") is cosine_distance
        assert get_distance_metric("euclidean") is euclidean_distance

    def test_unknown_name(self) -> None:
        with pytest.raises(InvalidInputError, match="manhattan"):
            get_distance_metric("manhattan")
