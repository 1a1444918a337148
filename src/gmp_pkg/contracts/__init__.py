"""Core contracts and interfaces."""

from .errors import (
    GMPError,
    ConfigError,
    ModelError,
    ValidationError,
    CatalogError,
)
from .types import ScheduledMeal, StepFluxes

__all__ = [
    "GMPError",
    "ConfigError",
    "ModelError",
    "ValidationError",
    "CatalogError",
    "ScheduledMeal",
    "StepFluxes",
]
