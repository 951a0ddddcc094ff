"""Offline inference for an exported logistic-regression attrition model."""

from .exceptions import (
    BundleNotLoadedError,
    BundleSourceError,
    RuntimeComputeError,
    SchemaError,
    SessionStateError,
)
from .bundle import Bundle, load_bundle, validate_bundle
from .scoring import (
    FeatureSelection,
    PredictionResult,
    PredictionSession,
    RiskDecision,
)

__version__ = "0.1.0"

__all__ = [
    "Bundle",
    "load_bundle",
    "validate_bundle",
    "FeatureSelection",
    "PredictionResult",
    "PredictionSession",
    "RiskDecision",
    "SchemaError",
    "BundleSourceError",
    "RuntimeComputeError",
    "BundleNotLoadedError",
    "SessionStateError",
]
