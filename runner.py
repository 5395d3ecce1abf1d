#runner.py — Single simulation runs and Monte Carlo repetitions.

from typing import Optional, Sequence

import numpy as np
import pandas as pd

from dgps import EventTimeDGP, SimulationParams
from estimators import EventStudyTWFEEstimator, true_effects_by_lag


def run_simulation(params: SimulationParams, seed: Optional[int] = None,
                   vcov: str = "cluster", estimator=None) -> pd.DataFrame:
    """
    Generate one panel, fit the event study and attach the ground truth.

    Parameters
    ----------
    params : SimulationParams
        Parameter set of the run.
    seed : int, optional
        Seed of the generator. Identical seeds give identical tables.
    vcov : str
        Passed to :class:`EventStudyTWFEEstimator` when ``estimator`` is None.
    estimator : EventStudyEstimatorProtocol, optional
        Estimator to use instead of the default event-study TWFE.

    Returns
    -------
    pd.DataFrame
        One row per lag: estimate columns, ``true_effect``, then one column
        per parameter and ``seed``.
    """
    panel = EventTimeDGP.from_params(params).sample(seed=seed)

    if estimator is None:
        estimator = EventStudyTWFEEstimator(vcov=vcov)
    estimates = estimator.fit(panel).estimates
    truth = true_effects_by_lag(panel)

    result = estimates.merge(truth, on="lag", how="left")
    for key, value in params.as_dict().items():
        result[key] = value
    result["seed"] = seed
    return result


class SimulationRunner:
    """
    Monte Carlo runner: repeats :func:`run_simulation` with consecutive seeds.

    Parameters
    ----------
    params : SimulationParams
        Parameter set shared by every replication.
    vcov : str
        Standard-error type of the event-study fit.

    Example
    -------
    >>> from dgps import SimulationParams
    >>> runner = SimulationRunner(SimulationParams(N_i=40, N_t=10))
    >>> results = runner.simulate(n_sim=100, first_seed=42)
    >>> summary = summarize_by_lag(results)
    """

    def __init__(self, params: SimulationParams, vcov: str = "cluster"):
        self.params = params
        self.vcov = vcov

    def simulate(self, n_sim: int = 100, first_seed: int = 1000,
                 verbose: bool = False) -> pd.DataFrame:
        """
        Run Monte Carlo simulation.

        Parameters
        ----------
        n_sim : int
            Number of replications
        first_seed : int
            Starting seed (incremented by 1 for each replication)
        verbose : bool
            Print progress updates

        Returns
        -------
        pd.DataFrame
            Concatenated run tables with a ``rep`` column
        """
        tables = []

        for r in range(n_sim):
            if verbose and n_sim > 1 and (r + 1) % 100 == 0:
                print(f"  {r + 1}/{n_sim} replications done...")

            res = run_simulation(self.params, seed=first_seed + r, vcov=self.vcov)
            res.insert(0, "rep", r)
            tables.append(res)

        if not tables:
            raise ValueError("n_sim must be at least 1.")
        return pd.concat(tables, ignore_index=True)


def center_at_lag(results: pd.DataFrame, center_lag: int = 0,
                  by: Optional[Sequence[str]] = None) -> pd.DataFrame:
    """
    Subtract, within each run, the estimate and the true effect at ``center_lag``.

    Lag coefficients are identified only relative to the lag dropped for
    collinearity, so they are comparable with the truth once both series
    share a reference. A run is identified by ``by`` plus ``rep`` when the
    table has one; a table without either is treated as a single run.

    Adds ``estimate_centered`` and ``true_effect_centered`` (NaN for runs
    where ``center_lag`` is absent or was dropped).
    """
    run_keys = list(by or [])
    if "rep" in results.columns:
        run_keys.append("rep")

    at_center = (results.loc[results["lag"] == center_lag,
                             run_keys + ["estimate", "true_effect"]]
                 .rename(columns={"estimate": "_est0", "true_effect": "_true0"}))

    if run_keys:
        out = results.merge(at_center, on=run_keys, how="left")
    else:
        first = at_center.iloc[0] if len(at_center) else {"_est0": np.nan, "_true0": np.nan}
        out = results.assign(_est0=first["_est0"], _true0=first["_true0"])

    out["estimate_centered"] = out["estimate"] - out["_est0"]
    out["true_effect_centered"] = out["true_effect"] - out["_true0"]
    return out.drop(columns=["_est0", "_true0"])


def summarize_by_lag(results: pd.DataFrame,
                     by: Optional[Sequence[str]] = None,
                     center_lag: int = 0) -> pd.DataFrame:
    """
    Bias, SD and RMSE of the lag estimates across replications.

    Estimates and true effects are first centred at ``center_lag`` within
    each run (see :func:`center_at_lag`); ``mean_estimate`` and
    ``true_effect`` are reported on that centred scale. Rows with a NaN
    centred estimate (lags dropped for collinearity, or runs missing
    ``center_lag``) are excluded.

    Parameters
    ----------
    results : pd.DataFrame
        Output of :meth:`SimulationRunner.simulate` (or several concatenated).
    by : sequence of str, optional
        Extra grouping columns, e.g. ``["het_indiv", "het_time"]``.
    center_lag : int
        Reference lag shared by the estimates and the truth.
    """
    keys = list(by or []) + ["lag"]
    centered = center_at_lag(results, center_lag=center_lag, by=by)
    valid = centered[~np.isnan(centered["estimate_centered"].to_numpy(dtype=float))]
    if valid.empty:
        raise ValueError("All estimates are NaN.")

    err = valid["estimate_centered"] - valid["true_effect_centered"]
    valid = valid.assign(err=err, sq_err=err ** 2)

    summary = valid.groupby(keys, sort=True).agg(
        mean_estimate=("estimate_centered", "mean"),
        true_effect=("true_effect_centered", "mean"),
        bias=("err", "mean"),
        sd=("estimate_centered", "std"),
        mse=("sq_err", "mean"),
        n_reps=("estimate_centered", "size"),
    )
    summary["rmse"] = np.sqrt(summary["mse"])
    summary["sd"] = summary["sd"].fillna(0.0)

    return summary.reset_index()[
        keys + ["mean_estimate", "true_effect", "bias", "sd", "rmse", "n_reps"]
    ]
