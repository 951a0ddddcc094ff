"""Affine rescaling and linear scoring."""

import numpy as np

from ..bundle.schema import Bundle


class Scaler:
    """
    Applies the bundle's pre-folded MinMaxScaler parameters.

    ``xs = x * scale + min``, matching ``MinMaxScaler.transform`` with its
    fitted ``scale_`` and ``min_``. Values outside the training range are
    extrapolated, never clamped.
    """

    def __init__(self, bundle: Bundle):
        # Conversion is deferred so malformed entries fail per prediction
        self._scale = bundle.scaler_scale
        self._min = bundle.scaler_min

    def transform(self, x: np.ndarray) -> np.ndarray:
        scale = np.asarray(self._scale, dtype=float)
        offset = np.asarray(self._min, dtype=float)
        x = np.asarray(x, dtype=float)
        if x.shape != scale.shape:
            raise ValueError(
                f"Expected vector of length {scale.shape[0]}, got {x.shape}"
            )
        return x * scale + offset


class Scorer:
    """Linear decision score: ``intercept + sum(coef[i] * xs[i])``."""

    def __init__(self, bundle: Bundle):
        self._coef = bundle.coef
        self._intercept = bundle.intercept

    def score(self, xs: np.ndarray) -> float:
        coef = [float(c) for c in self._coef]
        values = np.asarray(xs, dtype=float).tolist()
        if len(values) != len(coef):
            raise ValueError(f"Expected vector of length {len(coef)}, got {len(values)}")

        # Left-to-right accumulation keeps results bit-reproducible
        total = float(self._intercept)
        for c, v in zip(coef, values):
            total += c * v
        return total
