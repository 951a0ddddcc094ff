"""Utility modules for the attrition risk predictor."""

from .logging import get_logger, RiskLogger

__all__ = [
    "get_logger",
    "RiskLogger",
]
