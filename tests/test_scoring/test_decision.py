"""Tests for the probability transform and decision rule."""

import math

import pytest

from attrition_risk.scoring.decision import (
    DecisionEngine,
    PredictionResult,
    RiskDecision,
    stable_sigmoid,
    to_percentage,
)


class TestStableSigmoid:
    """Tests for the logistic transform."""

    def test_zero(self):
        """Test score 0 maps to one half."""
        assert stable_sigmoid(0.0) == 0.5

    @pytest.mark.parametrize("score", [-8.0, -1.0, -0.5, 0.25, 1.0, 8.0])
    def test_matches_logistic(self, score):
        """Test both branches agree with the textbook formula."""
        assert stable_sigmoid(score) == pytest.approx(1 / (1 + math.exp(-score)))

    def test_symmetry(self):
        """Test sigmoid(-z) == 1 - sigmoid(z)."""
        for z in (0.1, 1.3, 7.0):
            assert stable_sigmoid(-z) == pytest.approx(1 - stable_sigmoid(z))

    @pytest.mark.parametrize("score", [50.0, 500.0, 1e6])
    def test_large_positive(self, score):
        """Test large positive scores approach one without overflow."""
        assert stable_sigmoid(score) == pytest.approx(1.0)

    @pytest.mark.parametrize("score", [-50.0, -500.0, -1e6])
    def test_large_negative(self, score):
        """Test large negative scores approach zero without overflow."""
        p = stable_sigmoid(score)
        assert p == pytest.approx(0.0, abs=1e-20)
        assert p >= 0.0

    def test_non_finite(self):
        """Test infinities saturate and NaN propagates."""
        assert stable_sigmoid(math.inf) == 1.0
        assert stable_sigmoid(-math.inf) == 0.0
        assert math.isnan(stable_sigmoid(math.nan))


class TestDecisionEngine:
    """Tests for thresholded decisions."""

    def test_threshold_inclusive(self):
        """Test p == threshold classifies as high risk."""
        engine = DecisionEngine(threshold=0.5)
        assert engine.classify(0.5) is RiskDecision.HIGH_RISK
        assert engine.decide(0.0).decision is RiskDecision.HIGH_RISK

    def test_below_threshold(self):
        """Test p < threshold classifies as lower risk."""
        engine = DecisionEngine(threshold=0.5)
        assert engine.classify(0.4999999) is RiskDecision.LOWER_RISK

    def test_custom_threshold(self):
        """Test the decision follows the configured threshold."""
        engine = DecisionEngine(threshold=0.2)
        result = engine.decide(-1.0)
        assert result.probability == pytest.approx(0.2689414213699951)
        assert result.decision is RiskDecision.HIGH_RISK
        assert result.threshold_used == 0.2

    def test_nan_score_is_lower_risk(self):
        """Test a NaN probability never satisfies the threshold."""
        result = DecisionEngine().decide(math.nan)
        assert result.decision is RiskDecision.LOWER_RISK


class TestPredictionResult:
    """Tests for result formatting."""

    def make(self, p: float, threshold: float = 0.5) -> PredictionResult:
        engine = DecisionEngine(threshold)
        return PredictionResult(
            probability=p,
            score=0.0,
            decision=engine.classify(p),
            threshold_used=threshold,
        )

    @pytest.mark.parametrize(
        "p,expected",
        [(0.7310585786300049, 73.1), (0.3775406687981454, 37.8),
         (0.2689414213699951, 26.9), (0.12345, 12.3), (0.0, 0.0), (1.0, 100.0)],
    )
    def test_percentage(self, p, expected):
        """Test percentage keeps one decimal."""
        assert self.make(p).percentage == expected

    def test_percentage_rounds_half_up(self):
        """Test halves round up rather than to even."""
        assert to_percentage(0.0125) == 1.3
        assert to_percentage(0.0005) == 0.1

    def test_summary(self):
        """Test human-readable decision lines."""
        assert self.make(0.9).summary() == "High risk (p ≥ 0.5)."
        assert self.make(0.1).summary() == "Lower risk (p < 0.5)."

    def test_to_dict(self):
        """Test the output payload keys and decision label."""
        payload = self.make(0.9, threshold=0.6).to_dict()
        assert payload["decision"] == "HighRisk"
        assert payload["thresholdUsed"] == 0.6
        assert payload["probability"] == 0.9
        assert payload["percentage"] == 90.0
        assert payload["skippedFeatures"] == []
