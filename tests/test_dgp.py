import numpy as np
import pandas as pd
import pytest

from dgps import EventTimeDGP, HetIndiv, HetTime, PANEL_COLUMNS, SimulationParams, generate_panel
from exceptions import InvalidConfigurationError


def test_shape_and_order(staggered_params):
    df = generate_panel(staggered_params, seed=1)
    assert list(df.columns) == PANEL_COLUMNS
    assert len(df) == staggered_params.N_i * staggered_params.N_t
    assert df["indiv"].tolist() == list(np.repeat(np.arange(1, 41), 8))
    assert df["t"].tolist() == list(np.tile(np.arange(1, 9), 40))


def test_draw_once_per_unit_and_period(staggered_params):
    df = generate_panel(staggered_params, seed=2)
    per_unit = df.groupby("indiv")[["indiv_fe", "t_event", "beta_i", "in_treatment"]]
    assert (per_unit.nunique(dropna=False) == 1).all().all()
    assert (df.groupby("t")["time_fe"].nunique() == 1).all()


def test_treatment_bookkeeping(staggered_params):
    df = generate_panel(staggered_params, seed=3)

    assert not (df["treated"] & ~df["in_treatment"]).any()

    never = df[~df["in_treatment"]]
    assert (never["beta_i"] == 0).all()
    assert never["t_event"].isna().all()
    assert never["t_centered"].isna().all()
    assert not never["post"].any()

    ever = df[df["in_treatment"]]
    assert ever["t_event"].between(2, staggered_params.N_t - 1).all()
    assert (ever["post"] == (ever["t"] >= ever["t_event"])).all()
    for _, unit in ever.groupby("indiv"):
        assert unit["t_centered"].diff().dropna().eq(1).all()


def test_treated_share():
    df = generate_panel(SimulationParams(N_i=25, N_t=5, p_treat=0.3), seed=4)
    n_treated_units = df.loc[df["in_treatment"], "indiv"].nunique()
    assert n_treated_units == 7


def test_common_timing_at_midpoint():
    df = generate_panel(SimulationParams(N_i=10, N_t=9, p_treat=0.5, staggered=False), seed=5)
    assert (df.loc[df["in_treatment"], "t_event"] == 4).all()


def test_homogeneous_constant_effect(staggered_params):
    df = generate_panel(staggered_params, seed=6)
    treated = df[df["treated"]]
    assert (treated["beta_i"] == 2.0).all()
    assert (treated["beta_it"] == 2.0).all()
    np.testing.assert_allclose(treated["y1"] - treated["y0"], 2.0)
    np.testing.assert_array_equal(df["y"], np.where(df["treated"], df["y1"], df["y0"]))


def test_large_first_rewards_early_onset():
    params = SimulationParams(N_i=60, N_t=12, p_treat=1.0, het_indiv="large_first")
    df = generate_panel(params, seed=7)
    units = df.groupby("indiv")[["t_event", "beta_i"]].first()

    np.testing.assert_array_equal(units["beta_i"], 12 - units["t_event"].astype(int))
    early = units.sort_values("t_event")
    for (_, a), (_, b) in zip(early.iloc[:-1].iterrows(), early.iloc[1:].iterrows()):
        if a["t_event"] < b["t_event"]:
            assert a["beta_i"] > b["beta_i"]


def test_random_effects_within_band():
    params = SimulationParams(N_i=50, N_t=6, p_treat=0.8, het_indiv="random", beta=2.0)
    df = generate_panel(params, seed=8)
    beta = df.loc[df["in_treatment"], "beta_i"]
    assert beta.between(1.0, 3.0).all()
    assert beta.nunique() > 1


def test_linear_effect_scales_with_event_time():
    params = SimulationParams(N_i=30, N_t=10, p_treat=0.5, het_time="linear", beta=1.5)
    df = generate_panel(params, seed=9)
    treated = df[df["treated"]]
    expected = treated["beta_i"] * treated["t_centered"].astype(float)
    np.testing.assert_allclose(treated["beta_it"], expected)
    np.testing.assert_allclose(treated["y1"] - treated["y0"], expected)
    assert (treated.loc[treated["t_centered"] == 0, "beta_it"] == 0).all()


def test_deterministic_scenario(deterministic_params):
    df = generate_panel(deterministic_params, seed=0)
    assert (df["t_event"] == 4).all()
    assert (df.loc[df["post"], "y"] == 2.0).all()
    assert (df.loc[~df["post"], "y"] == 1.0).all()


def test_same_seed_same_panel(staggered_params):
    a = generate_panel(staggered_params, seed=11)
    b = generate_panel(staggered_params, seed=11)
    pd.testing.assert_frame_equal(a, b)

    c = generate_panel(staggered_params, seed=12)
    assert not a["y"].equals(c["y"])


def test_keyword_entry_point_matches_params(staggered_params):
    a = generate_panel(staggered_params, seed=13)
    b = EventTimeDGP(**staggered_params.as_dict()).sample(seed=13)
    pd.testing.assert_frame_equal(a, b)


def test_dgp_from_params_object(staggered_params):
    dgp = EventTimeDGP(staggered_params)
    assert dgp.params is staggered_params
    assert EventTimeDGP.from_params(staggered_params).params is staggered_params

    smaller = EventTimeDGP(staggered_params, N_i=5)
    assert smaller.params.N_i == 5
    assert smaller.params.N_t == staggered_params.N_t
    assert staggered_params.N_i == 40


def test_too_few_periods_for_staggering():
    with pytest.raises(ValueError):
        generate_panel(SimulationParams(N_i=4, N_t=2, staggered=True), seed=0)


@pytest.mark.parametrize("kwargs", [
    {"staggered": "yes"},
    {"staggered": 1},
    {"het_indiv": "heterogeneous"},
    {"het_time": "quadratic"},
    {"het_time": None},
])
def test_invalid_configuration(kwargs):
    with pytest.raises(InvalidConfigurationError):
        SimulationParams(**kwargs)
    with pytest.raises(ValueError):
        EventTimeDGP(**kwargs)


def test_modes_coerced_to_enums():
    params = SimulationParams(het_indiv="random", het_time=HetTime.LINEAR)
    assert params.het_indiv is HetIndiv.RANDOM
    assert params.het_time is HetTime.LINEAR
    assert params.as_dict()["het_indiv"] == "random"
    assert params.replace(het_time=None).het_time is HetTime.LINEAR


def test_describe_mentions_modes():
    text = EventTimeDGP(N_i=10, N_t=6, het_indiv="large_first").describe()
    assert "large_first" in text
    assert "N_i=10" in text
