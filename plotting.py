"""
plotting.py — Fitted vs. true event-time effects.
"""

import os
from typing import Optional, Tuple

import matplotlib.pyplot as plt
import pandas as pd

from dgps import SimulationParams
from runner import center_at_lag, run_simulation


def recenter(result: pd.DataFrame, lag_window: Tuple[int, int] = (-5, 5),
             center_lag: int = 0) -> pd.DataFrame:
    """
    Restrict a result table to ``lag_window`` and subtract each series' value
    at ``center_lag`` (NaN if that lag is absent or was dropped).

    Multi-replication tables are centred within each ``rep``.
    """
    lo, hi = lag_window
    centered = center_at_lag(result, center_lag=center_lag)
    win = centered[(centered["lag"] >= lo) & (centered["lag"] <= hi)]
    order = ["rep", "lag"] if "rep" in win.columns else ["lag"]
    return win.sort_values(order, kind="stable").reset_index(drop=True)


def plot_effects(result: pd.DataFrame, lag_window: Tuple[int, int] = (-5, 5),
                 center_lag: int = 0, title: Optional[str] = None, ax=None):
    """Scatter the centred TWFE estimates and true effects against lag."""
    data = recenter(result, lag_window=lag_window, center_lag=center_lag)

    if ax is None:
        fig, ax = plt.subplots(figsize=(6.2, 4.0))
    else:
        fig = ax.figure

    ax.scatter(data["lag"], data["estimate_centered"], marker="o", s=28,
               label="TWFE estimate")
    ax.scatter(data["lag"], data["true_effect_centered"], marker="x", s=36,
               label="True effect")
    ax.axhline(0, linestyle="--", linewidth=1, color="black")
    ax.axvline(center_lag, linestyle=":", linewidth=1, color="black")
    ax.set_xlabel("Event time (periods since onset)")
    ax.set_ylabel(f"Effect relative to lag {center_lag}")
    if title:
        ax.set_title(title)
    ax.grid(True, alpha=0.25)
    ax.legend(frameon=False)
    return fig


def plot_simulation(params: SimulationParams, seed: Optional[int] = None,
                    staggered: Optional[bool] = None,
                    het_indiv: Optional[str] = None,
                    het_time: Optional[str] = None,
                    lag_window: Tuple[int, int] = (-5, 5),
                    path: Optional[str] = None):
    """
    Run one simulation with the given overrides and plot it.

    Saves the figure to ``path`` and closes it when a path is given;
    otherwise returns the open figure.
    """
    run_params = params.replace(staggered=staggered, het_indiv=het_indiv,
                                het_time=het_time)
    result = run_simulation(run_params, seed=seed)

    title = (f"staggered={run_params.staggered}, "
             f"het_indiv={run_params.het_indiv.value}, het_time={run_params.het_time.value}")
    fig = plot_effects(result, lag_window=lag_window, title=title)
    fig.tight_layout()

    if path is not None:
        outdir = os.path.dirname(path)
        if outdir:
            os.makedirs(outdir, exist_ok=True)
        fig.savefig(path, bbox_inches="tight")
        plt.close(fig)
    return fig
