import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import pytest

from plotting import plot_effects, plot_simulation, recenter

pytestmark = pytest.mark.filterwarnings("ignore::exceptions.CollinearTermsWarning")


def _result():
    return pd.DataFrame({
        "lag": [-3, -2, -1, 0, 1, 2, 7],
        "estimate": [-1.1, -0.9, -1.0, 0.2, 0.3, np.nan, 5.0],
        "true_effect": [0.0, 0.0, 0.0, 1.0, 1.0, 1.0, 1.0],
    })


def test_recenter_window_and_zero_at_center():
    out = recenter(_result(), lag_window=(-2, 2))
    assert out["lag"].tolist() == [-2, -1, 0, 1, 2]
    row0 = out[out["lag"] == 0].iloc[0]
    assert row0["estimate_centered"] == 0.0
    assert row0["true_effect_centered"] == 0.0
    assert out.loc[out["lag"] == -1, "true_effect_centered"].iloc[0] == -1.0
    assert np.isnan(out.loc[out["lag"] == 2, "estimate_centered"].iloc[0])


def test_recenter_missing_center_is_nan():
    out = recenter(_result(), lag_window=(-3, 3), center_lag=5)
    assert out["estimate_centered"].isna().all()


def test_recenter_within_each_rep():
    two = pd.concat([_result().assign(rep=0),
                     _result().assign(rep=1, estimate=lambda d: d["estimate"] + 4.0)],
                    ignore_index=True)
    out = recenter(two, lag_window=(-3, 3))

    at0 = out[out["lag"] == 0]
    assert at0["rep"].tolist() == [0, 1]
    assert (at0["estimate_centered"] == 0.0).all()
    np.testing.assert_allclose(out.loc[out["rep"] == 1, "estimate_centered"].dropna(),
                               out.loc[out["rep"] == 0, "estimate_centered"].dropna())


def test_plot_effects_draws_both_series():
    fig = plot_effects(_result(), lag_window=(-3, 3), title="demo")
    ax = fig.axes[0]
    assert len(ax.collections) == 2
    assert ax.get_title() == "demo"
    plt.close(fig)


def test_plot_simulation_saves_figure(tmp_path, staggered_params):
    path = tmp_path / "figs" / "run.png"
    plot_simulation(staggered_params, seed=3, het_indiv="large_first",
                    het_time="linear", path=str(path))
    assert path.exists()
    assert path.stat().st_size > 0


def test_plot_simulation_applies_overrides(staggered_params):
    fig = plot_simulation(staggered_params, seed=4, staggered=True, het_indiv="random")
    assert "het_indiv=random" in fig.axes[0].get_title()
    plt.close(fig)
