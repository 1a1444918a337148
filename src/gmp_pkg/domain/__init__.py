"""Domain models for glucose metabolism."""

from .entities import Compartment, Meal, ModelParameters, Nutrient
from .state import (
    CompartmentPools,
    Cumulative,
    Hormones,
    NutrientPools,
    SimulationState,
)

__all__ = [
    "Compartment",
    "Meal",
    "ModelParameters",
    "Nutrient",
    "CompartmentPools",
    "Cumulative",
    "Hormones",
    "NutrientPools",
    "SimulationState",
]
