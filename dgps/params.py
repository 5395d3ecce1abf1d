"""
dgps/params.py — Parameter set shared by the generator, the orchestrator
and the plots.

Heterogeneity modes are closed enums; plain strings are accepted and coerced
on construction so scenario tables can be written with literals.
"""

from dataclasses import asdict, dataclass, replace
from enum import Enum
from typing import Any, Dict

import numpy as np

from exceptions import InvalidConfigurationError


class HetIndiv(str, Enum):
    """How the treatment effect varies across units."""
    HOMOGENEOUS = "homogeneous"
    RANDOM = "random"
    LARGE_FIRST = "large_first"


class HetTime(str, Enum):
    """How the treatment effect evolves with time since onset."""
    CONSTANT = "constant"
    LINEAR = "linear"


def _coerce_mode(value, enum_cls, name: str):
    if isinstance(value, enum_cls):
        return value
    allowed = [m.value for m in enum_cls]
    if isinstance(value, str) and value in allowed:
        return enum_cls(value)
    raise InvalidConfigurationError(
        f"{name} must be one of {allowed}; got {value!r}"
    )


@dataclass(frozen=True)
class SimulationParams:
    """
    Inputs of one simulation run.

    Parameters
    ----------
    N_i, N_t : int
        Number of units and of periods.
    sigma_e : float
        Standard deviation of the idiosyncratic error.
    p_treat : float
        Share of units ever treated (``floor(N_i * p_treat)`` units).
    staggered : bool
        Draw onset per unit from periods 2..N_t-1 if True, otherwise every
        treated unit starts at ``floor(N_t / 2)``.
    het_indiv : HetIndiv or str
        'homogeneous', 'random' or 'large_first'.
    het_time : HetTime or str
        'constant' or 'linear'.
    alpha, beta : float
        Intercept and base effect size.
    mu_ife, sigma_ife, mu_tfe, sigma_tfe : float
        Mean / sd of the unit and period fixed effects (0 disables them).
    mu_x, sigma_x, gamma : float
        Mean / sd of the covariate and its coefficient in the outcome.
    """

    N_i: int = 50
    N_t: int = 10
    sigma_e: float = 1.0
    p_treat: float = 0.5
    staggered: bool = True
    het_indiv: HetIndiv = HetIndiv.HOMOGENEOUS
    het_time: HetTime = HetTime.CONSTANT
    alpha: float = 0.0
    beta: float = 1.0
    mu_ife: float = 0.0
    sigma_ife: float = 0.0
    mu_tfe: float = 0.0
    sigma_tfe: float = 0.0
    mu_x: float = 0.0
    sigma_x: float = 0.0
    gamma: float = 0.0

    def __post_init__(self):
        if not isinstance(self.staggered, (bool, np.bool_)):
            raise InvalidConfigurationError(
                f"staggered must be a boolean; got {self.staggered!r}"
            )
        # frozen dataclass: coerced values go through object.__setattr__
        object.__setattr__(self, "staggered", bool(self.staggered))
        object.__setattr__(self, "het_indiv",
                           _coerce_mode(self.het_indiv, HetIndiv, "het_indiv"))
        object.__setattr__(self, "het_time",
                           _coerce_mode(self.het_time, HetTime, "het_time"))

    def as_dict(self) -> Dict[str, Any]:
        """Flat mapping of the parameters, enum modes as their string value."""
        out = asdict(self)
        out["het_indiv"] = self.het_indiv.value
        out["het_time"] = self.het_time.value
        return out

    def replace(self, **overrides) -> "SimulationParams":
        """Validated copy with some fields replaced; ``None`` values are ignored."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes)
