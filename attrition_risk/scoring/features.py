"""Feature vector construction.

Rebuilds the dense training-time feature vector from a user selection:

- one-hot columns named ``<col>_<category>`` (OneHotEncoder naming)
- numeric columns under their own name

Vector order always follows ``Bundle.feature_names``.
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional

import numpy as np
import pandas as pd

from ..bundle.schema import Bundle


@dataclass(frozen=True)
class FeatureIndex:
    """Feature name -> position in the canonical vector."""

    positions: Mapping[str, int]
    size: int
    duplicates: tuple[str, ...] = ()

    @classmethod
    def from_names(cls, feature_names) -> "FeatureIndex":
        """Build the index in one pass; a repeated name keeps its last position."""
        positions: dict[str, int] = {}
        duplicates: list[str] = []
        for i, name in enumerate(feature_names):
            if name in positions and name not in duplicates:
                duplicates.append(name)
            positions[name] = i
        return cls(positions=positions, size=len(feature_names), duplicates=tuple(duplicates))

    def get(self, name: str) -> Optional[int]:
        return self.positions.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self.positions

    def __len__(self) -> int:
        return self.size


@dataclass(frozen=True)
class FeatureSelection:
    """Chosen category per categorical column, plus optional numeric inputs."""

    categorical: Mapping[str, Optional[str]] = field(default_factory=dict)
    numeric: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_record(cls, record: Mapping | pd.Series, bundle: Bundle) -> "FeatureSelection":
        """
        Split a flat record into categorical and numeric parts.

        Missing values (None, NaN) in categorical columns become unset.
        Other values are matched as strings. An integral float such as
        ``1.0`` (pandas upcasts integer columns holding NaN) is written as
        ``"1"`` when the bundle lists ``"1"`` but not ``"1.0"``.

        Args:
            record: Dict or pandas row keyed by column name.
            bundle: Bundle whose ``cat_cols``/``num_cols`` name the columns.

        Returns:
            FeatureSelection covering the bundle's columns present in the record.
        """
        categorical: dict[str, Optional[str]] = {}
        for col in bundle.cat_cols:
            if col not in record:
                continue
            value = record[col]
            categorical[col] = (
                None if _is_missing(value)
                else _category_string(value, bundle.categories_for(col))
            )

        numeric = {col: record[col] for col in bundle.num_cols if col in record}
        return cls(categorical=categorical, numeric=numeric)


@dataclass(frozen=True)
class RawVector:
    """Unscaled feature vector and the one-hot keys that found no slot."""

    values: np.ndarray
    skipped: tuple[str, ...] = ()

    def __len__(self) -> int:
        return len(self.values)


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and value == ""


def _category_string(value: Any, categories: tuple[str, ...]) -> str:
    text = str(value)
    if text in categories or not isinstance(value, float) or not value.is_integer():
        return text
    integral = str(int(value))
    return integral if integral in categories else text


def coerce_numeric(value: Any) -> float:
    """Finite numeric value, or 0.0 for anything absent, unparsable or non-finite."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


class Vectorizer:
    """
    Turns a FeatureSelection into the raw feature vector.

    Categorical columns with no chosen value contribute nothing, which
    leaves their whole one-hot block at zero. A composite key with no
    matching feature name is skipped without error and reported in
    ``RawVector.skipped`` so naming drift between the selection and the
    bundle stays visible.
    """

    def __init__(self, bundle: Bundle, index: Optional[FeatureIndex] = None):
        self.bundle = bundle
        self.index = index or FeatureIndex.from_names(bundle.feature_names)

    def transform(self, selection: FeatureSelection) -> RawVector:
        x = np.zeros(self.index.size, dtype=float)
        skipped: list[str] = []

        for col in self.bundle.cat_cols:
            chosen = selection.categorical.get(col)
            if _is_missing(chosen):
                continue
            # OneHotEncoder.get_feature_names_out naming
            key = f"{col}_{chosen}"
            i = self.index.get(key)
            if i is None:
                skipped.append(key)
                continue
            x[i] = 1.0

        for col in self.bundle.num_cols:
            i = self.index.get(col)
            if i is None:
                continue
            x[i] = coerce_numeric(selection.numeric.get(col))

        return RawVector(values=x, skipped=tuple(skipped))
