"""Configuration Management Module.

Provides typed configuration for the attrition risk predictor with
support for YAML files, environment variable overrides, and validation.

Uses Pydantic v2 for robust configuration validation.
"""

import os
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field, field_validator


class BundleConfig(BaseModel):
    """Configuration for locating and validating the model bundle."""

    path: str = Field(
        default="models/bundle.json",
        description="Bundle document (.json, .html with embedded bundle, or .joblib)",
    )
    duplicate_features: Literal["last_wins", "reject"] = Field(
        default="last_wins",
        description="How repeated names in feature_names are treated at load",
    )

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        """Validate the bundle path is not blank."""
        if not v.strip():
            raise ValueError("bundle path must not be empty")
        return v


class DecisionConfig(BaseModel):
    """Configuration for the probability decision rule."""

    default_threshold: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Threshold used when the bundle carries no numeric threshold",
    )


class OutputConfig(BaseModel):
    """Configuration for batch prediction output."""

    predictions_path: str = Field(
        default="data/predictions.csv", description="Output CSV for batch predictions"
    )


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Log level"
    )
    format: Literal["json", "text"] = Field(default="text", description="Log format")
    log_file: Optional[str] = Field(default=None, description="Log file path")
    log_metrics: bool = Field(default=True, description="Log timing metrics")


class RiskModelConfig(BaseModel):
    """Main configuration for the attrition risk predictor."""

    bundle: BundleConfig = Field(default_factory=BundleConfig)
    decision: DecisionConfig = Field(default_factory=DecisionConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"extra": "forbid"}

    @property
    def reject_duplicate_features(self) -> bool:
        """Whether duplicate feature names fail bundle validation."""
        return self.bundle.duplicate_features == "reject"


def _apply_env_overrides(config: RiskModelConfig) -> RiskModelConfig:
    """Apply environment variable overrides to configuration.

    Supports the following environment variables:
    - ATTRITION_BUNDLE_PATH, ATTRITION_DUPLICATE_FEATURES
    - ATTRITION_DEFAULT_THRESHOLD
    - ATTRITION_PREDICTIONS_PATH
    - ATTRITION_LOG_LEVEL, ATTRITION_LOG_FILE
    """
    config_dict = config.model_dump()

    # Bundle overrides
    if os.getenv("ATTRITION_BUNDLE_PATH"):
        config_dict["bundle"]["path"] = os.environ["ATTRITION_BUNDLE_PATH"]
    if os.getenv("ATTRITION_DUPLICATE_FEATURES"):
        config_dict["bundle"]["duplicate_features"] = os.environ[
            "ATTRITION_DUPLICATE_FEATURES"
        ].lower()

    # Decision overrides
    if os.getenv("ATTRITION_DEFAULT_THRESHOLD"):
        config_dict["decision"]["default_threshold"] = float(
            os.environ["ATTRITION_DEFAULT_THRESHOLD"]
        )

    # Output overrides
    if os.getenv("ATTRITION_PREDICTIONS_PATH"):
        config_dict["output"]["predictions_path"] = os.environ[
            "ATTRITION_PREDICTIONS_PATH"
        ]

    # Logging overrides
    if os.getenv("ATTRITION_LOG_LEVEL"):
        config_dict["logging"]["level"] = os.environ["ATTRITION_LOG_LEVEL"].upper()
    if os.getenv("ATTRITION_LOG_FILE"):
        config_dict["logging"]["log_file"] = os.environ["ATTRITION_LOG_FILE"]

    return RiskModelConfig.model_validate(config_dict)


def load_config(config_path: Optional[str] = None) -> RiskModelConfig:
    """Load configuration from YAML file with environment variable overrides.

    Args:
        config_path: Path to YAML config file. If None, tries default locations:
                    1. config/default.yaml
                    2. Default RiskModelConfig values

    Returns:
        Validated RiskModelConfig object.

    Raises:
        ValueError: If configuration is invalid.
    """
    config_dict: dict = {}

    if config_path:
        path = Path(config_path)
    else:
        path = Path("config/default.yaml")

    if path.exists():
        with open(path, "r") as f:
            config_dict = yaml.safe_load(f) or {}

    try:
        config = RiskModelConfig.model_validate(config_dict)
    except Exception as e:
        raise ValueError(f"Invalid configuration: {e}") from e

    return _apply_env_overrides(config)


def save_config(config: RiskModelConfig, config_path: str) -> None:
    """Save configuration to YAML file.

    Args:
        config: Configuration to save.
        config_path: Path to save YAML file.
    """
    path = Path(config_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        yaml.dump(config.model_dump(), f, default_flow_style=False, sort_keys=False)


def get_default_config() -> RiskModelConfig:
    """Get default configuration.

    Returns:
        RiskModelConfig with default values.
    """
    return RiskModelConfig()
