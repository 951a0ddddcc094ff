"""Tests for affine rescaling and linear scoring."""

import numpy as np
import pytest

from attrition_risk.bundle.schema import validate_bundle
from attrition_risk.scoring.linear import Scaler, Scorer


class TestScaler:
    """Tests for the min-max affine transform."""

    def test_formula(self, mixed_bundle):
        """Test xs = x * scale + min per element."""
        scaler = Scaler(validate_bundle(mixed_bundle))
        xs = scaler.transform(np.array([1.0, 0.0, 0.0, 1.0, 39.0]))
        np.testing.assert_allclose(xs, [1.0, 0.0, 0.0, 1.0, 0.5])

    def test_extrapolates(self, mixed_bundle):
        """Test values outside the training range are not clamped."""
        scaler = Scaler(validate_bundle(mixed_bundle))
        xs = scaler.transform(np.array([0.0, 0.0, 0.0, 0.0, 102.0]))
        assert xs[4] == pytest.approx(2.0)
        xs = scaler.transform(np.zeros(5))
        assert xs[4] == pytest.approx(-18 / 42)

    def test_length_checked(self, dept_bundle):
        """Test a vector of the wrong length is refused."""
        scaler = Scaler(validate_bundle(dept_bundle))
        with pytest.raises(ValueError):
            scaler.transform(np.zeros(3))

    def test_malformed_parameters_fail_on_use(self, dept_bundle):
        """Test non-numeric scaler entries fail at transform time."""
        dept_bundle["scaler_scale"] = [1, "wide"]
        scaler = Scaler(validate_bundle(dept_bundle))
        with pytest.raises(ValueError):
            scaler.transform(np.zeros(2))


class TestScorer:
    """Tests for the linear score."""

    def test_intercept_plus_dot(self, dept_bundle):
        """Test score = intercept + sum(coef * xs)."""
        scorer = Scorer(validate_bundle(dept_bundle))
        assert scorer.score(np.array([1.0, 0.0])) == 1.0
        assert scorer.score(np.array([0.0, 1.0])) == -0.5
        assert scorer.score(np.array([0.0, 0.0])) == -1.0

    def test_left_to_right_accumulation(self, dept_bundle):
        """Test accumulation order is intercept first, then index order."""
        dept_bundle["intercept"] = 1e16
        dept_bundle["coef"] = [-1e16, 1.0]
        scorer = Scorer(validate_bundle(dept_bundle))
        # Summing the terms before the intercept would lose the trailing 1.0
        assert scorer.score(np.array([1.0, 1.0])) == 1.0

    def test_repeatable(self, mixed_bundle):
        """Test identical inputs give bit-identical scores."""
        scorer = Scorer(validate_bundle(mixed_bundle))
        xs = np.array([0.0, 1.0, 0.0, 1.0, 0.3])
        assert scorer.score(xs) == scorer.score(xs.copy())

    def test_malformed_coefficient(self, dept_bundle):
        """Test a non-numeric coefficient fails when scoring."""
        dept_bundle["coef"] = [2, "heavy"]
        scorer = Scorer(validate_bundle(dept_bundle))
        with pytest.raises(ValueError):
            scorer.score(np.zeros(2))
