"""
dgps/event_time_dgp.py — Synthetic panel with staggered, heterogeneous effects.

DGP: y0_it = alpha + gamma * x_it + indiv_fe_i + time_fe_t + e_it
     y1_it = y0_it + beta_it
     y_it  = y1_it if treated_it else y0_it

Treatment onset t_event_i is either drawn per unit from 2..N_t-1 (staggered)
or fixed at floor(N_t / 2). The unit effect beta_i depends on het_indiv;
under het_time="linear" it is scaled by time since onset on treated rows.

Panel is emitted in (indiv, t) order.
"""

from typing import Optional

import numpy as np
import pandas as pd

from dgps.params import HetIndiv, HetTime, SimulationParams
from exceptions import InvalidConfigurationError

PANEL_COLUMNS = [
    "indiv", "t", "in_treatment", "indiv_fe", "t_event", "beta_i",
    "time_fe", "post", "treated", "t_centered", "beta_it",
    "x", "e", "y0", "y1", "y",
]


class EventTimeDGP:
    """
    Event-time panel DGP.

    Takes a :class:`SimulationParams`, or its fields as keyword arguments
    (keywords given alongside ``params`` override it). Parameters are
    validated on construction so a bad mode fails before any draw.

    Example
    -------
    >>> dgp = EventTimeDGP(N_i=40, N_t=10, het_indiv="large_first")
    >>> panel = dgp.sample(seed=1)
    """

    def __init__(self, params: Optional[SimulationParams] = None, **kwargs):
        if params is None:
            params = SimulationParams(**kwargs)
        elif kwargs:
            params = params.replace(**kwargs)
        self.params = params

    @classmethod
    def from_params(cls, params: SimulationParams) -> "EventTimeDGP":
        return cls(params)

    def _unit_table(self, rng: np.random.Generator) -> pd.DataFrame:
        """One row per unit: treatment status, fixed effect, onset and effect."""
        p = self.params
        ids = np.arange(1, p.N_i + 1)

        n_treat = int(np.floor(p.N_i * p.p_treat))
        treated_ids = rng.choice(ids, size=n_treat, replace=False)
        in_treatment = np.isin(ids, treated_ids)

        indiv_fe = rng.normal(p.mu_ife, p.sigma_ife, size=p.N_i)

        if p.staggered:
            onset = rng.integers(2, p.N_t, size=p.N_i)
        else:
            onset = np.full(p.N_i, p.N_t // 2)

        if p.het_indiv is HetIndiv.LARGE_FIRST:
            beta_i = (p.N_t - onset).astype(np.float64)
        elif p.het_indiv is HetIndiv.RANDOM:
            beta_i = rng.uniform(0.5 * p.beta, 1.5 * p.beta, size=p.N_i)
        elif p.het_indiv is HetIndiv.HOMOGENEOUS:
            beta_i = np.full(p.N_i, float(p.beta))
        else:
            raise InvalidConfigurationError(f"unhandled het_indiv: {p.het_indiv!r}")
        beta_i = np.where(in_treatment, beta_i, 0.0)

        t_event = pd.Series(onset, dtype="Int64").where(in_treatment)

        return pd.DataFrame({
            "indiv": ids,
            "in_treatment": in_treatment,
            "indiv_fe": indiv_fe,
            "t_event": t_event,
            "beta_i": beta_i,
        })

    def _period_table(self, rng: np.random.Generator) -> pd.DataFrame:
        """One row per period: the time fixed effect shared by all units."""
        p = self.params
        return pd.DataFrame({
            "t": np.arange(1, p.N_t + 1),
            "time_fe": rng.normal(p.mu_tfe, p.sigma_tfe, size=p.N_t),
        })

    def sample(self, seed: Optional[int] = None) -> pd.DataFrame:
        rng = np.random.default_rng(seed)
        p = self.params

        units = self._unit_table(rng)
        periods = self._period_table(rng)

        df = (units
              .merge(periods, how="cross")
              .sort_values(["indiv", "t"], kind="stable")
              .reset_index(drop=True))

        df["post"] = (df["t"] >= df["t_event"]).fillna(False).astype(bool)
        df["treated"] = df["in_treatment"] & df["post"]
        df["t_centered"] = df["t"] - df["t_event"]

        if p.het_time is HetTime.LINEAR:
            since_onset = df["t_centered"].fillna(0).to_numpy(dtype=np.float64)
            df["beta_it"] = np.where(df["treated"],
                                     df["beta_i"] * since_onset,
                                     df["beta_i"])
        elif p.het_time is HetTime.CONSTANT:
            df["beta_it"] = df["beta_i"]
        else:
            raise InvalidConfigurationError(f"unhandled het_time: {p.het_time!r}")

        n_rows = len(df)
        df["x"] = rng.normal(p.mu_x, p.sigma_x, size=n_rows)
        df["e"] = rng.normal(0.0, p.sigma_e, size=n_rows)

        df["y0"] = p.alpha + p.gamma * df["x"] + df["indiv_fe"] + df["time_fe"] + df["e"]
        df["y1"] = df["y0"] + df["beta_it"]
        df["y"] = np.where(df["treated"], df["y1"], df["y0"])

        return df[PANEL_COLUMNS]

    @property
    def n_treated_units(self) -> int:
        return int(np.floor(self.params.N_i * self.params.p_treat))

    def describe(self) -> str:
        """Return a description of the DGP configuration."""
        p = self.params
        timing = f"staggered onset in 2..{p.N_t - 1}" if p.staggered \
            else f"common onset at t={p.N_t // 2}"
        lines = [
            "Event-time DGP Configuration:",
            f"  Panel: N_i={p.N_i}, N_t={p.N_t}, treated units={self.n_treated_units}",
            f"  Timing: {timing}",
            f"  Effects: het_indiv={p.het_indiv.value}, het_time={p.het_time.value}, beta={p.beta}",
            f"  Noise: sigma_e={p.sigma_e}, sigma_ife={p.sigma_ife}, sigma_tfe={p.sigma_tfe}",
        ]
        return "\n".join(lines)


def generate_panel(params: Optional[SimulationParams] = None,
                   seed: Optional[int] = None, **kwargs) -> pd.DataFrame:
    """
    Generate one panel.

    Either pass a :class:`SimulationParams` or its fields as keywords.
    """
    return EventTimeDGP(params, **kwargs).sample(seed=seed)
