"""Prediction session.

Owns the validated bundle and the pipeline built from it, and enforces
the lifecycle:

    UNINITIALIZED -> LOADED -> READY -> SCORED -> READY (reset)
    UNINITIALIZED -> FAILED (schema error, terminal)

Example:
    session = PredictionSession()
    session.load_file("models/bundle.json")
    result = session.predict({"JobRole": "Sales Executive"})
    print(result.percentage, result.summary())
"""

from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from typing import Any, Optional

import pandas as pd

from ..bundle.io import read_bundle_document
from ..bundle.schema import Bundle, validate_bundle
from ..config import RiskModelConfig, get_default_config
from ..exceptions import (
    BundleNotLoadedError,
    RuntimeComputeError,
    SchemaError,
    SessionStateError,
)
from ..utils.logging import RiskLogger, get_logger
from .decision import DecisionEngine, PredictionResult
from .features import FeatureIndex, FeatureSelection, Vectorizer
from .linear import Scaler, Scorer


class SessionState(Enum):
    """Lifecycle states of a prediction session."""
    UNINITIALIZED = "uninitialized"
    LOADED = "loaded"
    READY = "ready"
    SCORED = "scored"
    FAILED = "failed"


class PredictionSession:
    """
    Loads one bundle for the lifetime of the session and runs predictions.

    Every prediction is a pure pass over the bundle:
    selection -> raw vector -> scaled vector -> score -> decision.
    A failed prediction leaves the bundle and the previous result as they
    were.
    """

    def __init__(
        self,
        config: Optional[RiskModelConfig] = None,
        logger: Optional[RiskLogger] = None,
    ):
        """
        Initialize an empty session.

        Args:
            config: Runtime configuration. Uses defaults if not provided.
            logger: Logger to report through. Built from config if not provided.
        """
        self.config = config or get_default_config()
        self.log = logger or get_logger(
            level=self.config.logging.level,
            format=self.config.logging.format,
            log_file=self.config.logging.log_file,
        )

        self.state = SessionState.UNINITIALIZED
        self.bundle: Optional[Bundle] = None
        self.index: Optional[FeatureIndex] = None
        self.last_result: Optional[PredictionResult] = None
        self.error: Optional[str] = None

        self._vectorizer: Optional[Vectorizer] = None
        self._scaler: Optional[Scaler] = None
        self._scorer: Optional[Scorer] = None
        self._engine: Optional[DecisionEngine] = None

    def load(self, document: Any) -> Bundle:
        """
        Validate a bundle document and prepare the pipeline.

        Args:
            document: Raw bundle document.

        Returns:
            The installed Bundle.

        Raises:
            SchemaError: Document failed validation, or the pipeline could
                not be built from it; the session is FAILED.
            SessionStateError: A bundle was already loaded, or loading failed before.
        """
        if self.state is SessionState.FAILED:
            raise SessionStateError(
                f"Bundle loading already failed ({self.error}); start a new session"
            )
        if self.state is not SessionState.UNINITIALIZED:
            raise SessionStateError("A bundle is already loaded for this session")

        try:
            bundle = validate_bundle(
                document,
                reject_duplicates=self.config.reject_duplicate_features,
                default_threshold=self.config.decision.default_threshold,
            )
            self.state = SessionState.LOADED
            index = FeatureIndex.from_names(bundle.feature_names)
            pipeline = (
                Vectorizer(bundle, index),
                Scaler(bundle),
                Scorer(bundle),
                DecisionEngine(bundle.threshold),
            )
        except Exception as e:
            self.state = SessionState.FAILED
            self.error = str(e)
            self.log.error("Bundle validation failed", reason=str(e))
            if isinstance(e, SchemaError):
                raise
            raise SchemaError(f"Bundle could not be prepared: {e}") from e

        # Nothing is installed until the whole pipeline is built
        self.bundle = bundle
        self.index = index
        self._vectorizer, self._scaler, self._scorer, self._engine = pipeline
        if index.duplicates:
            self.log.warning(
                "Duplicate feature names; last occurrence wins",
                duplicates=list(index.duplicates),
            )
        self.state = SessionState.READY

        self.log.log_bundle_loaded(
            num_features=bundle.n_features,
            num_categorical=len(bundle.cat_cols),
            num_numeric=len(bundle.num_cols),
            threshold=bundle.threshold,
        )
        return bundle

    def load_file(self, path: Optional[str | Path] = None) -> Bundle:
        """Read a bundle document from disk and load it.

        Args:
            path: Bundle file. Defaults to ``config.bundle.path``.
        """
        path = Path(path or self.config.bundle.path)
        self.log.debug("Reading bundle", path=str(path))
        return self.load(read_bundle_document(path))

    @property
    def is_ready(self) -> bool:
        return self.state in (SessionState.READY, SessionState.SCORED)

    def _require_ready(self) -> Bundle:
        if not self.is_ready:
            raise BundleNotLoadedError(
                f"Bundle not loaded (session is {self.state.value})"
            )
        return self.bundle

    def field_options(self) -> dict[str, list[str]]:
        """Allowed categories per categorical column, in bundle order."""
        bundle = self._require_ready()
        return {col: list(bundle.categories_for(col)) for col in bundle.cat_cols}

    def describe(self) -> str:
        """Short metadata line for the loaded bundle."""
        bundle = self._require_ready()
        return (
            f"Loaded: {bundle.n_features} features "
            f"({len(bundle.cat_cols)} categorical, {len(bundle.num_cols)} numeric)"
        )

    def _as_selection(self, selection: FeatureSelection | Mapping | pd.Series) -> FeatureSelection:
        if isinstance(selection, FeatureSelection):
            return selection
        return FeatureSelection.from_record(selection, self.bundle)

    def predict(self, selection: FeatureSelection | Mapping | pd.Series) -> PredictionResult:
        """
        Run one full prediction.

        Args:
            selection: FeatureSelection, or a flat record keyed by column name.

        Returns:
            PredictionResult with probability, score and decision.

        Raises:
            BundleNotLoadedError: No bundle is ready.
            RuntimeComputeError: Vectorizing, scaling or scoring failed.
        """
        self._require_ready()

        try:
            with self.log.timer("predict", log_result=self.config.logging.log_metrics):
                features = self._as_selection(selection)
                raw = self._vectorizer.transform(features)
                scaled = self._scaler.transform(raw.values)
                score = self._scorer.score(scaled)
                result = self._engine.decide(score, raw.skipped)
        except Exception as e:
            self.log.error("Prediction failed", error=f"{type(e).__name__}: {e}")
            raise RuntimeComputeError(f"Prediction failed: {e}") from e

        if result.skipped_features:
            self.log.warning(
                "Selection keys not found in feature_names",
                skipped=list(result.skipped_features),
            )

        self.last_result = result
        self.state = SessionState.SCORED
        self.log.log_prediction_result(
            probability=result.probability,
            score=result.score,
            decision=result.decision.value,
            skipped=len(result.skipped_features),
        )
        return result

    def predict_frame(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Score every row of a DataFrame.

        Args:
            df: Rows keyed by the bundle's categorical/numeric column names.

        Returns:
            Copy of ``df`` with probability, score, percentage and decision columns.

        Raises:
            BundleNotLoadedError: No bundle is ready.
            RuntimeComputeError: A row failed; the message names its index.
        """
        self._require_ready()

        results = []
        for idx, row in df.iterrows():
            try:
                results.append(self.predict(row))
            except RuntimeComputeError as e:
                raise RuntimeComputeError(f"Row {idx}: {e}") from e

        out = df.copy()
        out["probability"] = [r.probability for r in results]
        out["score"] = [r.score for r in results]
        out["percentage"] = [r.percentage for r in results]
        out["decision"] = [r.decision.value for r in results]
        return out

    def reset(self) -> None:
        """Clear the last result, keeping the bundle loaded."""
        self._require_ready()
        self.last_result = None
        self.state = SessionState.READY

    def __repr__(self) -> str:
        size = self.bundle.n_features if self.bundle else 0
        return f"PredictionSession(state={self.state.value}, features={size})"
