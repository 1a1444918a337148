"""Simulation state containers.

The compartment set is closed, so glucose pools live in a fixed record with
one field per compartment instead of a sparse mapping. ``copy()`` performs a
structural clone; snapshots handed to callers never share mutable references
with the engine.
"""

from __future__ import annotations
from dataclasses import dataclass, field, fields, replace
from typing import Dict, Iterator, Tuple, Union

from ..config import constants
from .entities import Compartment, ModelParameters, Nutrient

CompartmentKey = Union[Compartment, str]


@dataclass
class CompartmentPools:
    """Glucose mass (mmol) per compartment."""

    stomach: float = 0.0
    intestine_lumen: float = 0.0
    intestine_tissue: float = 0.0
    liver: float = 0.0  # net hepatic balance, not a physical pool
    blood: float = 0.0
    muscle: float = 0.0  # cumulative uptake sink
    adipose: float = 0.0  # cumulative uptake sink

    def __getitem__(self, compartment: CompartmentKey) -> float:
        return getattr(self, Compartment(compartment).field_name)

    def __setitem__(self, compartment: CompartmentKey, value: float) -> None:
        setattr(self, Compartment(compartment).field_name, float(value))

    def items(self) -> Iterator[Tuple[Compartment, float]]:
        for compartment in Compartment:
            yield compartment, self[compartment]

    def total(self) -> float:
        return sum(getattr(self, f.name) for f in fields(self))

    def to_dict(self) -> Dict[str, float]:
        return {compartment.value: mass for compartment, mass in self.items()}

    def copy(self) -> "CompartmentPools":
        return replace(self)


@dataclass
class NutrientPools:
    """Pools per tracked nutrient."""

    glucose: CompartmentPools = field(default_factory=CompartmentPools)

    def __getitem__(self, nutrient: Union[Nutrient, str]) -> CompartmentPools:
        return getattr(self, Nutrient.parse(nutrient).value)

    def copy(self) -> "NutrientPools":
        return NutrientPools(glucose=self.glucose.copy())


@dataclass
class Hormones:
    insulin_signal: float = 0.0


@dataclass
class Cumulative:
    renal_excretion: float = 0.0  # mmol


@dataclass
class SimulationState:
    """Complete mutable state of a metabolic simulation."""

    time: float = 0.0  # minutes
    nutrients: NutrientPools = field(default_factory=NutrientPools)
    hormones: Hormones = field(default_factory=Hormones)
    cumulative: Cumulative = field(default_factory=Cumulative)

    @classmethod
    def fasting(cls, params: ModelParameters) -> "SimulationState":
        """Fasting baseline: blood at 5.0 mM, every other pool empty."""
        glucose = CompartmentPools(blood=constants.FASTING_BLOOD_GLUCOSE_MM * params.vol_blood)
        return cls(nutrients=NutrientPools(glucose=glucose))

    def copy(self) -> "SimulationState":
        return SimulationState(
            time=self.time,
            nutrients=self.nutrients.copy(),
            hormones=replace(self.hormones),
            cumulative=replace(self.cumulative),
        )

    def to_dict(self) -> Dict[str, object]:
        return {
            "time": self.time,
            "nutrients": {"glucose": self.nutrients.glucose.to_dict()},
            "hormones": {"insulin_signal": self.hormones.insulin_signal},
            "cumulative": {"renal_excretion": self.cumulative.renal_excretion},
        }
