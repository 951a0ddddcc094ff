"""Pytest configuration and fixtures for attrition risk tests."""

import json

import pytest

from attrition_risk.config import RiskModelConfig
from attrition_risk.scoring import PredictionSession
from attrition_risk.utils.logging import get_logger


@pytest.fixture
def dept_bundle() -> dict:
    """Two-category bundle used by the worked scenarios.

    Returns:
        Bundle document with one categorical column (Dept: A, B),
        identity scaling, intercept -1 and coefficients [2, 0.5].
    """
    return {
        "cat_cols": ["Dept"],
        "num_cols": [],
        "ohe_categories": {"Dept": ["A", "B"]},
        "feature_names": ["Dept_A", "Dept_B"],
        "scaler_min": [0, 0],
        "scaler_scale": [1, 1],
        "intercept": -1,
        "coef": [2, 0.5],
        "threshold": 0.5,
    }


@pytest.fixture
def mixed_bundle() -> dict:
    """Bundle with two categorical columns and one numeric column.

    Returns:
        Bundle document whose last feature ``Age`` is min-max scaled
        over a training range of 18..60.
    """
    return {
        "cat_cols": ["JobRole", "OverTime"],
        "num_cols": ["Age"],
        "ohe_categories": {
            "JobRole": ["Research Scientist", "Sales Executive"],
            "OverTime": ["No", "Yes"],
        },
        "feature_names": [
            "JobRole_Research Scientist",
            "JobRole_Sales Executive",
            "OverTime_No",
            "OverTime_Yes",
            "Age",
        ],
        "scaler_min": [0.0, 0.0, 0.0, 0.0, -18 / 42],
        "scaler_scale": [1.0, 1.0, 1.0, 1.0, 1 / 42],
        "intercept": -1.5,
        "coef": [-0.4, 0.8, -0.3, 1.2, -0.9],
        "threshold": 0.3,
    }


@pytest.fixture
def quiet_logger():
    """Logger that only reports errors."""
    return get_logger(name="attrition_risk.tests", level="ERROR")


@pytest.fixture
def session(quiet_logger) -> PredictionSession:
    """Empty session with default configuration."""
    return PredictionSession(config=RiskModelConfig(), logger=quiet_logger)


@pytest.fixture
def ready_session(session, dept_bundle) -> PredictionSession:
    """Session with the Dept bundle loaded."""
    session.load(dept_bundle)
    return session


@pytest.fixture
def bundle_file(tmp_path, dept_bundle):
    """Dept bundle written as JSON."""
    path = tmp_path / "bundle.json"
    path.write_text(json.dumps(dept_bundle), encoding="utf-8")
    return path
