"""
protocols.py - Interface definitions for DGPs and estimators.

Uses typing.Protocol for structural subtyping: classes do NOT need to
explicitly inherit from these; they just need the right methods/properties.
"""
from typing import Protocol, runtime_checkable
import pandas as pd


@runtime_checkable
class DGPProtocol(Protocol):
    """Protocol for data generating processes."""

    def sample(self, seed: int | None = None) -> pd.DataFrame:
        """Generate one panel.
        Must return a DataFrame with at least: indiv, t, in_treatment,
        t_centered, treated, y0, y1, y
        """
        ...


@runtime_checkable
class EventStudyEstimatorProtocol(Protocol):
    """Protocol for estimators reporting one coefficient per event-time lag."""

    def fit(self, df: pd.DataFrame) -> "EventStudyEstimatorProtocol":
        """Fit estimator to a panel with columns: indiv, t, in_treatment, t_centered, y"""
        ...

    @property
    def estimates(self) -> pd.DataFrame:
        """Table with columns lag, estimate, std_error, p_value."""
        ...

    @property
    def name(self) -> str:
        """Estimator name for reporting."""
        ...
