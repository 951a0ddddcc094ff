"""Bundle Schema Module.

Defines the immutable model bundle and the load-time validation that
turns a raw document into one.

The checks are deliberately shallow: required keys, a non-empty
``feature_names`` and length agreement of ``coef``, ``scaler_min`` and
``scaler_scale``. One-hot names are not cross-checked against
``ohe_categories``; such drift shows up later as skipped lookups in the
vectorizer.
"""

from collections import Counter
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from numbers import Real
from types import MappingProxyType
from typing import Any

from ..exceptions import SchemaError


REQUIRED_KEYS = (
    "cat_cols",
    "num_cols",
    "ohe_categories",
    "feature_names",
    "scaler_min",
    "scaler_scale",
    "intercept",
    "coef",
)

# Checked in this order against len(feature_names)
ALIGNED_KEYS = ("coef", "scaler_min", "scaler_scale")

DEFAULT_THRESHOLD = 0.5


@dataclass(frozen=True)
class Bundle:
    """Trained linear classifier parameters, read-only after validation."""

    cat_cols: tuple[str, ...]
    num_cols: tuple[str, ...]
    ohe_categories: Mapping[str, tuple[str, ...]]
    feature_names: tuple[str, ...]
    scaler_min: tuple[Any, ...]
    scaler_scale: tuple[Any, ...]
    intercept: Any
    coef: tuple[Any, ...]
    threshold: float = DEFAULT_THRESHOLD
    threshold_from_bundle: bool = field(default=False, compare=False)

    @property
    def n_features(self) -> int:
        """Length of the canonical feature vector."""
        return len(self.feature_names)

    def categories_for(self, col: str) -> tuple[str, ...]:
        """Allowed categories for a categorical column (empty if unknown)."""
        return self.ohe_categories.get(col, ())

    def to_document(self) -> dict:
        """Convert back to the plain document layout."""
        return {
            "cat_cols": list(self.cat_cols),
            "num_cols": list(self.num_cols),
            "ohe_categories": {k: list(v) for k, v in self.ohe_categories.items()},
            "feature_names": list(self.feature_names),
            "scaler_min": list(self.scaler_min),
            "scaler_scale": list(self.scaler_scale),
            "intercept": self.intercept,
            "coef": list(self.coef),
            "threshold": self.threshold,
        }


def _is_sequence(value: Any) -> bool:
    """Ordered sequence check that excludes strings and bytes."""
    if isinstance(value, (str, bytes)):
        return False
    if isinstance(value, Sequence):
        return True
    # numpy arrays and similar array-likes
    return hasattr(value, "__len__") and hasattr(value, "__getitem__") and not isinstance(value, Mapping)


def _as_tuple(value: Any, key: str) -> tuple:
    """Copy a list-valued entry; None means empty."""
    if value is None:
        return ()
    if not _is_sequence(value):
        raise SchemaError(f"{key} must be a list, got {type(value).__name__}")
    return tuple(value)


def resolve_threshold(value: Any, default: float = DEFAULT_THRESHOLD) -> tuple[float, bool]:
    """Return the decision threshold and whether it came from the bundle.

    Only real numbers count; booleans and anything else fall back to
    ``default``.
    """
    if isinstance(value, Real) and not isinstance(value, bool):
        return float(value), True
    return default, False


def find_duplicate_features(feature_names: Sequence[str]) -> list[str]:
    """Names occurring more than once in ``feature_names``, first-seen order."""
    counts = Counter(feature_names)
    return [name for name in dict.fromkeys(feature_names) if counts[name] > 1]


def validate_bundle(
    document: Any,
    *,
    reject_duplicates: bool = False,
    default_threshold: float = DEFAULT_THRESHOLD,
) -> Bundle:
    """
    Validate a raw bundle document and build an immutable Bundle.

    Args:
        document: Parsed bundle document (a mapping).
        reject_duplicates: Fail when ``feature_names`` repeats a name
            instead of letting the last occurrence win in the index.
        default_threshold: Threshold used when the document has no
            numeric ``threshold``.

    Returns:
        Validated Bundle.

    Raises:
        SchemaError: Missing key, empty feature set, length mismatch,
            or an entry of the wrong container type.
    """
    if not isinstance(document, Mapping):
        raise SchemaError(
            f"Bundle must be a mapping, got {type(document).__name__}"
        )

    for key in REQUIRED_KEYS:
        if key not in document:
            raise SchemaError(f"Bundle missing key: {key}")

    feature_names = document["feature_names"]
    if not _is_sequence(feature_names) or len(feature_names) == 0:
        raise SchemaError(
            "feature_names is empty. Export the bundle from the trained "
            "pipeline before loading it."
        )
    n = len(feature_names)

    for key in ALIGNED_KEYS:
        value = document[key]
        got = len(value) if _is_sequence(value) else None
        if got != n:
            raise SchemaError(f"{key} length mismatch. Expected {n}, got {got}")

    for i, name in enumerate(feature_names):
        if not isinstance(name, str):
            raise SchemaError(
                f"feature_names[{i}] must be a string, got {type(name).__name__}"
            )

    if reject_duplicates:
        duplicates = find_duplicate_features(feature_names)
        if duplicates:
            raise SchemaError(f"feature_names contains duplicates: {duplicates}")

    threshold, from_bundle = resolve_threshold(
        document.get("threshold"), default_threshold
    )

    ohe = document["ohe_categories"]
    if ohe is not None and not isinstance(ohe, Mapping):
        raise SchemaError(
            f"ohe_categories must be a mapping, got {type(ohe).__name__}"
        )
    ohe_categories = {
        col: _as_tuple(cats, f"ohe_categories[{col!r}]")
        for col, cats in (ohe or {}).items()
    }

    return Bundle(
        cat_cols=_as_tuple(document["cat_cols"], "cat_cols"),
        num_cols=_as_tuple(document["num_cols"], "num_cols"),
        ohe_categories=MappingProxyType(ohe_categories),
        feature_names=tuple(feature_names),
        scaler_min=tuple(document["scaler_min"]),
        scaler_scale=tuple(document["scaler_scale"]),
        intercept=document["intercept"],
        coef=tuple(document["coef"]),
        threshold=threshold,
        threshold_from_bundle=from_bundle,
    )
