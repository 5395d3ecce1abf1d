"""
estimators/ground_truth.py — Realised ATT by event-time lag.

Computed from the potential outcomes of the generated panel, not estimated.
Pre-treatment lags are 0 by construction: ``treated`` is False there and
zeroes the gap. This is not a placebo test.
"""

import pandas as pd


def true_effects_by_lag(df: pd.DataFrame) -> pd.DataFrame:
    """
    Mean of ``treated * (y1 - y0)`` over ever-treated rows, per ``t_centered``.

    Returns
    -------
    pd.DataFrame
        Columns ``lag`` and ``true_effect``, sorted by lag.
    """
    ever = df[df["in_treatment"].astype(bool)]
    gap = ever["treated"].astype(float) * (ever["y1"] - ever["y0"])

    out = (gap
           .groupby(ever["t_centered"].astype("int64"))
           .mean()
           .rename("true_effect")
           .rename_axis("lag")
           .reset_index()
           .sort_values("lag")
           .reset_index(drop=True))
    return out
