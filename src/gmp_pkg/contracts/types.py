"""Type definitions for engine outputs."""

from __future__ import annotations
from dataclasses import asdict, dataclass
from typing import Dict

from ..domain.entities import Meal


@dataclass(frozen=True)
class StepFluxes:
    """Fluxes computed during a single integration step (mmol per step)."""

    dt: float
    """Step size in minutes"""

    insulin_signal: float
    """Insulin signal derived from the pre-step blood concentration"""

    gastric_emptying: float = 0.0
    sglt1: float = 0.0
    apical_glut2: float = 0.0
    paracellular: float = 0.0
    absorption: float = 0.0
    """Total Lumen -> Tissue flux after capping at lumen mass"""

    basolateral_export: float = 0.0
    hepatic_glucose_output: float = 0.0
    hepatic_uptake: float = 0.0
    muscle_uptake: float = 0.0
    adipose_uptake: float = 0.0
    renal_excretion: float = 0.0

    floor_correction: float = 0.0
    """Mass re-created by clamping pools at zero during the commit"""

    @property
    def net_liver(self) -> float:
        """Net hepatic balance (uptake minus output)."""
        return self.hepatic_uptake - self.hepatic_glucose_output

    @property
    def peripheral_uptake(self) -> float:
        return self.muscle_uptake + self.adipose_uptake

    def to_dict(self) -> Dict[str, float]:
        data = asdict(self)
        data["net_liver"] = self.net_liver
        data["peripheral_uptake"] = self.peripheral_uptake
        return data


@dataclass(frozen=True)
class ScheduledMeal:
    """Meal to ingest once simulated time reaches ``time_min``."""

    time_min: float
    meal: Meal
