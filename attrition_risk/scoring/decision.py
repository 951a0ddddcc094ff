"""Probability transform and risk decision.

Maps a linear score through the logistic function and compares the
probability against the decision threshold (inclusive).
"""

import math
from dataclasses import dataclass, field
from enum import Enum

from ..bundle.schema import DEFAULT_THRESHOLD


class RiskDecision(Enum):
    """Categorical outcome of a prediction."""
    HIGH_RISK = "HighRisk"      # p >= threshold
    LOWER_RISK = "LowerRisk"    # p < threshold


def stable_sigmoid(score: float) -> float:
    """
    Logistic function that only ever exponentiates a non-positive value.

    Large positive or negative scores therefore cannot overflow. NaN
    propagates unchanged.
    """
    if score >= 0:
        return 1.0 / (1.0 + math.exp(-score))
    ez = math.exp(score)
    return ez / (1.0 + ez)


def to_percentage(probability: float) -> float:
    """Probability as a percentage with one decimal, rounding halves up."""
    if math.isnan(probability):
        return probability
    return math.floor(probability * 1000 + 0.5) / 10


@dataclass(frozen=True)
class PredictionResult:
    """Outcome of one prediction."""

    probability: float
    score: float
    decision: RiskDecision
    threshold_used: float
    skipped_features: tuple[str, ...] = field(default=())

    @property
    def is_high_risk(self) -> bool:
        return self.decision is RiskDecision.HIGH_RISK

    @property
    def percentage(self) -> float:
        return to_percentage(self.probability)

    def summary(self) -> str:
        """Human-facing decision line."""
        if self.is_high_risk:
            return f"High risk (p ≥ {self.threshold_used})."
        return f"Lower risk (p < {self.threshold_used})."

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "probability": self.probability,
            "score": self.score,
            "decision": self.decision.value,
            "thresholdUsed": self.threshold_used,
            "percentage": self.percentage,
            "skippedFeatures": list(self.skipped_features),
        }


class DecisionEngine:
    """Turns a score into a probability and a thresholded decision."""

    def __init__(self, threshold: float = DEFAULT_THRESHOLD):
        self.threshold = threshold

    def classify(self, probability: float) -> RiskDecision:
        if probability >= self.threshold:
            return RiskDecision.HIGH_RISK
        return RiskDecision.LOWER_RISK

    def decide(self, score: float, skipped_features: tuple[str, ...] = ()) -> PredictionResult:
        probability = stable_sigmoid(score)
        return PredictionResult(
            probability=probability,
            score=score,
            decision=self.classify(probability),
            threshold_used=self.threshold,
            skipped_features=tuple(skipped_features),
        )
