"""Mass balance checking for glucose simulations.

Every flux of the engine moves mass between pools except renal excretion
(leaves the system) and the non-negativity floor (re-creates mass). Meals add
mass to the stomach. Per step the identity

    after - before == ingested - renal + floor_correction

must therefore hold up to round-off.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np
import pandas as pd

from ..contracts.types import StepFluxes


@dataclass
class MassBalanceResult:
    """Results from a mass balance check."""

    is_balanced: bool
    initial_mass: float
    final_mass: float
    total_ingested: float
    total_excreted: float
    total_floor_correction: float
    expected_final_mass: float
    mass_difference: float
    relative_error: float
    max_step_residual: float
    n_steps: int

    time_points: np.ndarray = field(repr=False)
    total_mass_time_series: np.ndarray = field(repr=False)

    error_message: Optional[str] = None

    def to_dataframe(self) -> pd.DataFrame:
        """Convert mass balance results to a two-column DataFrame."""
        data = {
            "Metric": [
                "Initial Mass (mmol)",
                "Ingested (mmol)",
                "Renal Excretion (mmol)",
                "Floor Correction (mmol)",
                "Expected Final Mass (mmol)",
                "Final Mass (mmol)",
                "Mass Difference (mmol)",
                "Relative Error (%)",
                "Is Balanced?",
            ],
            "Value": [
                self.initial_mass,
                self.total_ingested,
                self.total_excreted,
                self.total_floor_correction,
                self.expected_final_mass,
                self.final_mass,
                self.mass_difference,
                self.relative_error * 100,
                "Yes" if self.is_balanced else "No",
            ],
        }
        return pd.DataFrame(data)


class MassBalanceChecker:
    """Accumulates per-step mass accounting for a simulation run."""

    def __init__(self, tolerance: float = 1e-9):
        """Initialize mass balance checker.

        Args:
            tolerance: Relative error tolerance for the balance check
        """
        self.tolerance = tolerance
        self._initial_mass: Optional[float] = None
        self._final_mass = 0.0
        self._ingested = 0.0
        self._excreted = 0.0
        self._floor = 0.0
        self._max_residual = 0.0
        self._n_steps = 0
        self._times: List[float] = []
        self._totals: List[float] = []

    def record(
        self,
        time_min: float,
        mass_before: float,
        mass_after: float,
        ingested: float = 0.0,
        fluxes: Optional[StepFluxes] = None,
    ) -> float:
        """Record one step (or a meal-only event when ``fluxes`` is None).

        Returns:
            The residual of the step's mass identity (mmol)
        """
        if self._initial_mass is None:
            self._initial_mass = mass_before
            self._times.append(time_min)
            self._totals.append(mass_before)

        renal = fluxes.renal_excretion if fluxes is not None else 0.0
        floor = fluxes.floor_correction if fluxes is not None else 0.0
        residual = (mass_after - mass_before) - (ingested - renal + floor)

        self._ingested += ingested
        self._excreted += renal
        self._floor += floor
        self._max_residual = max(self._max_residual, abs(residual))
        self._final_mass = mass_after
        if fluxes is not None:
            self._n_steps += 1
            self._times.append(time_min + fluxes.dt)
            self._totals.append(mass_after)
        return residual

    def result(self) -> MassBalanceResult:
        """Summarize the recorded steps."""
        initial = self._initial_mass if self._initial_mass is not None else 0.0
        expected = initial + self._ingested - self._excreted + self._floor
        difference = self._final_mass - expected
        scale = max(initial + self._ingested, 1e-12)
        relative_error = abs(difference) / scale

        is_balanced = relative_error <= self.tolerance and self._max_residual / scale <= self.tolerance
        message = None
        if not is_balanced:
            message = (
                f"Mass difference {difference:.3e} mmol exceeds tolerance "
                f"(max step residual {self._max_residual:.3e} mmol)"
            )

        return MassBalanceResult(
            is_balanced=is_balanced,
            initial_mass=initial,
            final_mass=self._final_mass if self._initial_mass is not None else 0.0,
            total_ingested=self._ingested,
            total_excreted=self._excreted,
            total_floor_correction=self._floor,
            expected_final_mass=expected,
            mass_difference=difference,
            relative_error=relative_error,
            max_step_residual=self._max_residual,
            n_steps=self._n_steps,
            time_points=np.asarray(self._times, dtype=float),
            total_mass_time_series=np.asarray(self._totals, dtype=float),
            error_message=message,
        )
