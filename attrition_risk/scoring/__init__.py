"""Scoring package for offline linear-classifier inference.

This package provides:
- FeatureIndex / Vectorizer: selection -> raw feature vector in training order
- Scaler / Scorer: affine rescaling and linear score
- DecisionEngine: stable logistic probability and thresholded decision
- PredictionSession: bundle lifecycle and the full prediction pipeline

Usage:
    from attrition_risk.scoring import PredictionSession
    session = PredictionSession()
    session.load_file("models/bundle.json")
    result = session.predict({"JobRole": "Sales Executive"})
"""

from .features import FeatureIndex, FeatureSelection, RawVector, Vectorizer
from .linear import Scaler, Scorer
from .decision import DecisionEngine, PredictionResult, RiskDecision, stable_sigmoid
from .session import PredictionSession, SessionState

__all__ = [
    "FeatureIndex",
    "FeatureSelection",
    "RawVector",
    "Vectorizer",
    "Scaler",
    "Scorer",
    "DecisionEngine",
    "PredictionResult",
    "RiskDecision",
    "stable_sigmoid",
    "PredictionSession",
    "SessionState",
]
