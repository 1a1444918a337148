"""Scenario execution and mass accounting."""

from .mass_balance import MassBalanceChecker, MassBalanceResult
from .runner import SimulationResult, TIME_SERIES_COLUMNS, run_scenario, sample_state

__all__ = [
    "MassBalanceChecker",
    "MassBalanceResult",
    "SimulationResult",
    "TIME_SERIES_COLUMNS",
    "run_scenario",
    "sample_state",
]
