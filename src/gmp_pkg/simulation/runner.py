"""Batch scenario runner.

Drives a ``MetabolicSimulator`` at a fixed cadence without any wall-clock
pacing: meals are ingested when simulated time reaches their scheduled time,
``advance(dt)`` is called until the run duration is reached and a row is
sampled at t=0 and every ``sample_interval_min`` minutes.
"""

from __future__ import annotations
import math
import uuid
from collections import deque
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

import numpy as np
import pandas as pd

from ..config import constants
from ..contracts.errors import ModelError
from ..contracts.types import ScheduledMeal
from ..domain.entities import Compartment, Meal, ModelParameters
from ..domain.state import SimulationState
from ..engine.context import RunContext
from ..engine.simulator import MetabolicSimulator
from .mass_balance import MassBalanceChecker, MassBalanceResult

TIME_SERIES_COLUMNS = [
    "time_min",
    "blood_glucose_mM",
    "stomach_glucose_g",
    "intestine_lumen_mM",
    "intestine_tissue_mM",
    "liver_balance_mmol",
    "muscle_uptake_mmol",
    "adipose_uptake_mmol",
    "insulin_signal",
    "renal_excretion_mmol",
]


@dataclass
class SimulationResult:
    """Outputs of one scenario run."""

    run_id: str
    time_series: pd.DataFrame
    final_state: SimulationState
    parameters: ModelParameters
    meals: List[ScheduledMeal] = field(default_factory=list)
    mass_balance: Optional[MassBalanceResult] = None
    runtime_seconds: float = 0.0
    metadata: Dict[str, Any] = field(default_factory=dict)

    def summary_metrics(self) -> Dict[str, float]:
        """Glycemic summary of the sampled blood glucose curve."""
        if self.time_series.empty:
            return {}

        t = self.time_series["time_min"].to_numpy(dtype=float)
        bg = self.time_series["blood_glucose_mM"].to_numpy(dtype=float)
        excess = np.clip(bg - constants.FASTING_BLOOD_GLUCOSE_MM, 0.0, None)
        peak_index = int(np.argmax(bg))

        return {
            "peak_blood_glucose_mM": float(bg[peak_index]),
            "time_to_peak_min": float(t[peak_index]),
            "final_blood_glucose_mM": float(bg[-1]),
            "incremental_auc_mM_min": float(np.sum((excess[1:] + excess[:-1]) / 2.0 * np.diff(t))),
            "peak_insulin_signal": float(self.time_series["insulin_signal"].max()),
            "total_renal_excretion_mmol": float(self.final_state.cumulative.renal_excretion),
            "glucose_ingested_mmol": float(sum(item.meal.glucose_mmol for item in self.meals)),
        }

    def to_csv(self, path: Union[str, Path]) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.time_series.to_csv(path, index=False)
        return path


def sample_state(simulator: MetabolicSimulator, time_min: Optional[float] = None) -> Dict[str, float]:
    """One time series row from the simulator's current state.

    ``time_min`` replaces the simulator clock, which accumulates round-off
    when ``dt`` is not exactly representable.
    """
    state = simulator.get_state()
    glucose = state.nutrients.glucose
    return {
        "time_min": state.time if time_min is None else time_min,
        "blood_glucose_mM": simulator.get_concentration(Compartment.BLOOD),
        "stomach_glucose_g": glucose.stomach / constants.GRAMS_TO_MMOL,
        "intestine_lumen_mM": simulator.get_concentration(Compartment.INTESTINE_LUMEN),
        "intestine_tissue_mM": simulator.get_concentration(Compartment.INTESTINE_TISSUE),
        "liver_balance_mmol": glucose.liver,
        "muscle_uptake_mmol": glucose.muscle,
        "adipose_uptake_mmol": glucose.adipose,
        "insulin_signal": state.hormones.insulin_signal,
        "renal_excretion_mmol": state.cumulative.renal_excretion,
    }


def _as_schedule(meals: Iterable[Union[ScheduledMeal, Meal]]) -> List[ScheduledMeal]:
    schedule = [
        item if isinstance(item, ScheduledMeal) else ScheduledMeal(time_min=0.0, meal=item)
        for item in meals
    ]
    return sorted(schedule, key=lambda item: item.time_min)


def run_scenario(
    parameters: ModelParameters,
    meals: Iterable[Union[ScheduledMeal, Meal]] = (),
    duration_min: float = constants.DEFAULT_DURATION_MIN,
    dt_min: float = constants.DEFAULT_DT_MIN,
    sample_interval_min: float = constants.DEFAULT_SAMPLE_INTERVAL_MIN,
    check_mass_balance: bool = True,
    context: Optional[RunContext] = None,
) -> SimulationResult:
    """Run a meal scenario from the fasting baseline.

    Args:
        parameters: Model parameters for the run
        meals: Meals to ingest; bare ``Meal`` objects are taken at t=0
        duration_min: Simulated minutes to run
        dt_min: Euler step size
        sample_interval_min: Time series sampling interval
        check_mass_balance: Track per-step mass accounting
        context: Run context for logging and timing

    Returns:
        SimulationResult with the sampled time series

    Raises:
        ModelError: If the cadence settings are not positive
    """
    if duration_min <= 0 or dt_min <= 0 or sample_interval_min <= 0:
        raise ModelError(
            "duration, step size and sample interval must be positive",
            {"duration_min": duration_min, "dt_min": dt_min, "sample_interval_min": sample_interval_min},
        )

    context = context or RunContext(run_id=f"run-{uuid.uuid4().hex[:8]}")
    schedule = _as_schedule(meals)
    pending = deque(schedule)

    # A trailing fraction of a step shorter than 1e-6 dt is round-off
    n_steps = max(1, math.ceil(duration_min / dt_min - 1e-6))
    steps_per_sample = max(1, int(round(sample_interval_min / dt_min)))
    time_tolerance = dt_min * 1e-6

    simulator = MetabolicSimulator(parameters)
    checker = MassBalanceChecker() if check_mass_balance else None
    rows: List[Dict[str, float]] = []

    context.start_run()
    context.logger.info(
        "Scenario configured",
        n_steps=n_steps,
        dt_min=dt_min,
        n_meals=len(schedule),
    )

    for step in range(n_steps + 1):
        now = min(step * dt_min, duration_min)
        mass_before = simulator.total_mass()
        ingested = 0.0
        while pending and pending[0].time_min <= now + time_tolerance:
            ingested += simulator.ingest_meal(pending.popleft().meal)

        if step % steps_per_sample == 0:
            rows.append(sample_state(simulator, time_min=now))

        if step == n_steps:
            if checker is not None and ingested:
                checker.record(now, mass_before, simulator.total_mass(), ingested)
            break

        # The last step is shortened so the run ends exactly at duration_min
        fluxes = simulator.advance(min(dt_min, duration_min - now))
        if checker is not None:
            checker.record(now, mass_before, simulator.total_mass(), ingested, fluxes)

    if pending:
        context.logger.warning(
            "Meals scheduled after the end of the run were not ingested",
            skipped=[item.time_min for item in pending],
        )

    runtime = context.end_run()
    mass_balance = checker.result() if checker is not None else None
    if mass_balance is not None and not mass_balance.is_balanced:
        context.logger.warning("Mass balance check failed", error=mass_balance.error_message)

    return SimulationResult(
        run_id=context.run_id,
        time_series=pd.DataFrame(rows, columns=TIME_SERIES_COLUMNS),
        final_state=simulator.get_state(),
        parameters=parameters,
        meals=[item for item in schedule if item not in pending],
        mass_balance=mass_balance,
        runtime_seconds=runtime,
        metadata=context.get_runtime_metadata(),
    )
