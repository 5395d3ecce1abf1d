"""
Pytest configuration: non-interactive matplotlib backend and shared panels.
"""
import matplotlib

matplotlib.use("Agg")

import pytest

from dgps import SimulationParams


@pytest.fixture
def deterministic_params():
    """Two treated units, common onset, no noise: y is 1 before onset and 2 after."""
    return SimulationParams(N_i=2, N_t=8, sigma_e=0.0, p_treat=1.0,
                            staggered=False, het_indiv="homogeneous",
                            het_time="constant", alpha=1.0, beta=1.0)


@pytest.fixture
def staggered_params():
    return SimulationParams(N_i=40, N_t=8, sigma_e=1.0, p_treat=0.5,
                            staggered=True, alpha=0.5, beta=2.0,
                            sigma_ife=1.0, sigma_tfe=1.0, sigma_x=1.0, gamma=0.3)
