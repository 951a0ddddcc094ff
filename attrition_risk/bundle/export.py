"""Bundle export from fitted scikit-learn estimators.

Collects the parameters of an already fitted ``OneHotEncoder``,
``MinMaxScaler`` and binary ``LogisticRegression`` into the plain bundle
document. Nothing is fitted here.

The encoder is expected to have been fitted on ``cat_cols`` and the scaler
on the encoder output followed by the raw ``num_cols``, i.e. the column
order ``encoder.get_feature_names_out(cat_cols) + num_cols``.
"""

from typing import Optional, Sequence

import numpy as np
from sklearn.utils.validation import check_is_fitted

from .schema import DEFAULT_THRESHOLD


def _as_float_list(values) -> list[float]:
    return [float(v) for v in np.asarray(values, dtype=float).ravel()]


def export_bundle(
    encoder,
    scaler,
    model,
    cat_cols: Sequence[str],
    num_cols: Optional[Sequence[str]] = None,
    threshold: float = DEFAULT_THRESHOLD,
) -> dict:
    """
    Build a bundle document from fitted estimators.

    Args:
        encoder: Fitted OneHotEncoder over ``cat_cols``.
        scaler: Fitted MinMaxScaler over the encoded + numeric matrix.
        model: Fitted binary LogisticRegression.
        cat_cols: Categorical column names, in encoder order.
        num_cols: Numeric column names appended after the one-hot block.
        threshold: Decision threshold stored in the bundle.

    Returns:
        JSON-serializable bundle document.

    Raises:
        ValueError: Model is not binary or parameter shapes disagree.
    """
    num_cols = list(num_cols or [])
    cat_cols = list(cat_cols)

    check_is_fitted(encoder, "categories_")
    check_is_fitted(scaler, ["min_", "scale_"])
    check_is_fitted(model, ["coef_", "intercept_"])

    coef = np.asarray(model.coef_)
    if coef.ndim != 2 or coef.shape[0] != 1:
        raise ValueError(
            f"Only binary linear models are supported, got coef_ shape {coef.shape}"
        )

    feature_names = [str(name) for name in encoder.get_feature_names_out(cat_cols)]
    feature_names += num_cols

    scaler_min = _as_float_list(scaler.min_)
    scaler_scale = _as_float_list(scaler.scale_)
    weights = _as_float_list(coef[0])

    n = len(feature_names)
    for name, values in (
        ("coef", weights),
        ("scaler_min", scaler_min),
        ("scaler_scale", scaler_scale),
    ):
        if len(values) != n:
            raise ValueError(
                f"{name} has {len(values)} values but {n} features were encoded"
            )

    ohe_categories = {
        col: [str(c) for c in cats]
        for col, cats in zip(cat_cols, encoder.categories_)
    }

    return {
        "cat_cols": cat_cols,
        "num_cols": num_cols,
        "ohe_categories": ohe_categories,
        "feature_names": feature_names,
        "scaler_min": scaler_min,
        "scaler_scale": scaler_scale,
        "intercept": float(np.asarray(model.intercept_).ravel()[0]),
        "coef": weights,
        "threshold": float(threshold),
    }
