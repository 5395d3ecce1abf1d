"""dgps package — Data Generating Processes."""

from dgps.params import HetIndiv, HetTime, SimulationParams
from dgps.event_time_dgp import EventTimeDGP, generate_panel, PANEL_COLUMNS

__all__ = [
    "HetIndiv",
    "HetTime",
    "SimulationParams",
    "EventTimeDGP",
    "generate_panel",
    "PANEL_COLUMNS",
]
