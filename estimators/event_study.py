"""
estimators/event_study.py — Dynamic (event-time) Two-Way Fixed Effects estimator.

Estimates, for every event-time lag l present among ever-treated units,

    y_it = alpha_i + lambda_t + sum_l b_l * 1[in_treatment_i, t_centered_it = l]
           + controls_it + eps_it

with unit and period fixed effects absorbed rather than dummy-coded.
"""

import warnings
from typing import Optional, Sequence

import numpy as np
import pandas as pd

from estimators.demean import absorb_twoway, fit_ols, independent_columns
from exceptions import CollinearTermsWarning

ESTIMATE_COLUMNS = ["lag", "estimate", "std_error", "statistic", "p_value"]


class EventStudyTWFEEstimator:
    """
    Event-study TWFE estimator.

    Lags are visited in increasing order; a lag indicator collinear with the
    absorbed fixed effects (or with earlier lags) is dropped and reported with
    NaN. A full set of lags is always collinear with the unit effects, so at
    least one lag is normally dropped.

    Parameters
    ----------
    vcov : {"cluster", "iid"}
        Clustered by unit (default) or homoskedastic standard errors.
    controls : sequence of str, optional
        Extra regressors (e.g. ``["x"]``), demeaned with the lag indicators.

    Attributes
    ----------
    estimates : pd.DataFrame
        One row per lag: lag, estimate, std_error, statistic, p_value
    dropped_lags : list of int
        Lags dropped for collinearity in the last fit
    """

    def __init__(self, vcov: str = "cluster", controls: Optional[Sequence[str]] = None):
        if vcov not in ("cluster", "iid"):
            raise ValueError(f"vcov must be 'cluster' or 'iid'; got {vcov!r}")
        self.vcov = vcov
        self.controls = list(controls or [])
        self._estimates = None
        self._dropped = []
        self._n_obs = 0

    def fit(self, df: pd.DataFrame, y: str = "y", unit: str = "indiv",
            time: str = "t", ever: str = "in_treatment",
            rel: str = "t_centered") -> "EventStudyTWFEEstimator":
        """
        Fit the event study on a panel.

        Parameters
        ----------
        df : pd.DataFrame
            Panel as produced by ``generate_panel``.
        y, unit, time, ever, rel : str
            Outcome, unit id, period, ever-treated flag and event-time columns.

        Raises
        ------
        numpy.linalg.LinAlgError
            If no lag term is identified or the normal equations are singular.
        """
        unit_key = df[unit].astype("category")
        time_key = df[time].astype("category")
        ever_d = df[ever].astype(np.float64).to_numpy()
        rel_key = df[rel].astype("category")

        lags = sorted(int(v) for v in df.loc[df[ever].astype(bool), rel].dropna().unique())

        rel_codes = rel_key.cat.codes.to_numpy()
        rel_cats = list(rel_key.cat.categories)
        X_lags = np.column_stack([
            ever_d * (rel_codes == rel_cats.index(lag)) for lag in lags
        ]) if lags else np.zeros((len(df), 0))

        X = X_lags
        if self.controls:
            X = np.column_stack([X_lags, df[self.controls].to_numpy(dtype=np.float64)])

        unit_code = unit_key.cat.codes.to_numpy().astype(np.int64)
        time_code = time_key.cat.codes.to_numpy().astype(np.int64)
        n_units = len(unit_key.cat.categories)
        n_periods = len(time_key.cat.categories)

        y_til = absorb_twoway(df[y].to_numpy(dtype=np.float64), unit_code, time_code)
        X_til = absorb_twoway(X, unit_code, time_code) if X.shape[1] else X

        keep = independent_columns(X_til)
        kept_lags = [lags[j] for j in keep if j < len(lags)]
        self._dropped = [lag for lag in lags if lag not in kept_lags]

        if not kept_lags:
            raise np.linalg.LinAlgError(
                "No identified event-time term: every lag indicator is collinear "
                "with the unit and period fixed effects."
            )
        if self._dropped:
            warnings.warn(
                f"Dropped event-time lags collinear with the fixed effects: {self._dropped}",
                CollinearTermsWarning,
                stacklevel=2,
            )

        cluster_ids = unit_code if self.vcov == "cluster" else None
        beta, se, tstat, pval, _ = fit_ols(
            y_til, X_til[:, keep], cluster_ids,
            n_absorbed=n_units + n_periods - 1,
            nested_absorbed=n_units,
        )

        by_lag = dict(zip(kept_lags, zip(beta, se, tstat, pval)))
        rows = []
        for lag in lags:
            b, s, t_, p = by_lag.get(lag, (np.nan,) * 4)
            rows.append({
                "lag": lag,
                "estimate": float(b),
                "std_error": float(s),
                "statistic": float(t_),
                "p_value": float(p),
            })

        self._estimates = pd.DataFrame(rows, columns=ESTIMATE_COLUMNS)
        self._n_obs = len(df)
        return self

    @property
    def estimates(self) -> pd.DataFrame:
        """Lag-indexed coefficient table from the last fit."""
        return self._estimates

    @property
    def dropped_lags(self):
        return list(self._dropped)

    @property
    def n_obs(self) -> int:
        return self._n_obs

    @property
    def name(self) -> str:
        """Estimator name for reporting."""
        return "TWFE-ES"


def estimate_event_study(df: pd.DataFrame, vcov: str = "cluster",
                         controls: Optional[Sequence[str]] = None) -> pd.DataFrame:
    """Fit :class:`EventStudyTWFEEstimator` and return its lag table."""
    return EventStudyTWFEEstimator(vcov=vcov, controls=controls).fit(df).estimates
