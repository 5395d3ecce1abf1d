"""
estimators/twfe.py — Static Two-Way Fixed Effects estimator.

Contains the pooled TWFE comparison including:
- Point estimation via two-way demeaning
- Weight diagnostics for detecting negative weights on treated cells
"""

import numpy as np
import pandas as pd
from dataclasses import dataclass

from estimators.demean import absorb_twoway, group_codes


@dataclass
class TWFEDiagnostics:
    """Implicit weights the static TWFE slope puts on the panel's treated cells."""
    prop_treated_negative: float
    n_treated_negative: int
    min_weight_treated: float
    max_weight_treated: float
    n_treated_cells: int = 0

    def __str__(self):
        return (f"treated cells with negative weight: {self.n_treated_negative}"
                f"/{self.n_treated_cells} ({self.prop_treated_negative:.1%}), "
                f"weights in [{self.min_weight_treated:.6f}, {self.max_weight_treated:.6f}]")


class TWFEEstimator:
    """
    Static Two-Way Fixed Effects (TWFE) estimator.

    Estimates the coefficient on the treatment indicator in:
    y_it = alpha_i + lambda_t + b * treated_it + eps_it

    Under staggered timing with effects that vary by cohort or grow with time
    since onset, b is a weighted average of cell effects in which some
    treated cells receive negative weight.

    Attributes
    ----------
    estimate : float
        Point estimate of treatment effect (after calling fit)
    diagnostics : TWFEDiagnostics
        Weight diagnostics (after calling fit)

    References
    ----------
    - Goodman-Bacon (2021): Difference-in-differences with variation in treatment timing
    - de Chaisemartin & D'Haultfœuille (2020): Two-way fixed effects estimators with
      heterogeneous treatment effects
    """

    def __init__(self):
        self._estimate = np.nan
        self._diagnostics = None

    def fit(self, df: pd.DataFrame, y: str = "y", d: str = "treated",
            unit: str = "indiv", time: str = "t") -> "TWFEEstimator":
        unit_code, _ = group_codes(df[unit].to_numpy())
        time_code, _ = group_codes(df[time].to_numpy())

        D = df[d].to_numpy(dtype=np.float64)
        y_til = absorb_twoway(df[y].to_numpy(dtype=np.float64), unit_code, time_code)
        d_til = absorb_twoway(D, unit_code, time_code)

        denom = (d_til ** 2).sum()

        if np.isclose(denom, 0.0):
            self._estimate = np.nan
            self._diagnostics = TWFEDiagnostics(0.0, 0, 0.0, 0.0)
            return self

        self._estimate = float((d_til * y_til).sum() / denom)

        weights = d_til / denom
        treated_w = weights[D == 1]

        if len(treated_w) == 0:
            self._diagnostics = TWFEDiagnostics(0.0, 0, 0.0, 0.0)
        else:
            neg = treated_w < 0
            self._diagnostics = TWFEDiagnostics(
                prop_treated_negative=float(neg.mean()),
                n_treated_negative=int(neg.sum()),
                min_weight_treated=float(treated_w.min()),
                max_weight_treated=float(treated_w.max()),
                n_treated_cells=len(treated_w),
            )
        return self

    @property
    def estimate(self) -> float:
        """Slope on `treated`; NaN when it has no within variation."""
        return self._estimate

    @property
    def diagnostics(self) -> TWFEDiagnostics:
        """Negative-weight summary of the treated cells, from the last fit."""
        return self._diagnostics

    @property
    def name(self) -> str:
        return "TWFE"


def true_att(df: pd.DataFrame) -> float:
    """Realised ATT over all treated cells, the target of the static estimate."""
    cells = df[df["treated"].astype(bool)]
    if cells.empty:
        return np.nan
    return float((cells["y1"] - cells["y0"]).mean())
