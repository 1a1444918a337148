"""Glucose Metabolism Platform.

Compartmental simulation of postprandial glucose metabolism under insulin
feedback.
"""

__version__ = "0.1.0"

from .domain import Compartment, Meal, ModelParameters, Nutrient, SimulationState
from .engine import MetabolicSimulator

__all__ = [
    "__version__",
    "Compartment",
    "Meal",
    "ModelParameters",
    "Nutrient",
    "SimulationState",
    "MetabolicSimulator",
]
