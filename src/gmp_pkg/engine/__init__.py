"""Simulation engine."""

from .simulator import MetabolicSimulator, michaelis_menten
from .context import RunContext

__all__ = [
    "MetabolicSimulator",
    "michaelis_menten",
    "RunContext",
]
