"""Main API facade for the GMP package.

This module provides the primary interface used by the CLI and by scripts.
All high-level operations flow through these functions.
"""

from __future__ import annotations
import uuid
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import structlog

from .catalog import get_default_catalog
from .config import (
    AppConfig, default_config, load_config, validate_config,
    hydrate_parameters, hydrate_meals,
)
from .contracts.types import ScheduledMeal
from .domain.entities import ModelParameters
from .engine import MetabolicSimulator, RunContext
from .simulation.runner import SimulationResult, run_scenario

logger = structlog.get_logger()


def get_default_config() -> AppConfig:
    """Get default configuration.

    Returns:
        Default configuration: reference parameters, 75 g OGTT at t=0
    """
    return default_config()


def load_config_from_file(path: Union[str, Path]) -> AppConfig:
    """Load and validate configuration from file.

    Raises:
        ConfigError: If configuration cannot be loaded or is invalid
    """
    config = load_config(path)
    validate_config(config)
    return config


def validate_configuration(config: AppConfig) -> None:
    """Validate configuration for common issues.

    Raises:
        ValidationError: If configuration has errors
    """
    validate_config(config)


def list_catalog_entries(category: str) -> List[str]:
    """List entry names in a catalog category ('parameters' or 'meals')."""
    return get_default_catalog().list_entries(category)


def get_catalog_entry(category: str, name: str) -> Dict[str, Any]:
    """Get a catalog entry as a plain dictionary."""
    return get_default_catalog().get_entry(category, name).model_dump()


def create_simulator(
    config: Optional[AppConfig] = None,
    parameter_overrides: Optional[Mapping[str, Any]] = None,
) -> MetabolicSimulator:
    """Create a fasting simulator from configured parameters.

    Meals are not ingested; the caller drives the simulator.
    """
    config = config or default_config()
    params = hydrate_parameters(config, extra_overrides=parameter_overrides)
    return MetabolicSimulator(params)


def resolve_scenario(
    config: AppConfig,
    parameter_overrides: Optional[Mapping[str, Any]] = None,
) -> Tuple[ModelParameters, List[ScheduledMeal]]:
    """Resolve the parameters and meal schedule a run would use.

    Raises:
        ConfigError: If a catalog reference or override is invalid
    """
    params = hydrate_parameters(config, extra_overrides=parameter_overrides)
    return params, hydrate_meals(config)


def run_single_simulation(
    config: AppConfig,
    parameter_overrides: Optional[Mapping[str, Any]] = None,
    run_id: Optional[str] = None,
    artifact_directory: Optional[Union[str, Path]] = None,
) -> SimulationResult:
    """Run one scenario described by a configuration.

    Args:
        config: Application configuration
        parameter_overrides: Parameter values applied on top of the configuration
        run_id: Custom run identifier
        artifact_directory: If given, the time series is written to
            ``<artifact_directory>/<run_id>/time_series.csv``

    Returns:
        SimulationResult of the run
    """
    run_id = run_id or f"run-{uuid.uuid4().hex[:8]}"
    params, meals = resolve_scenario(config, parameter_overrides)

    context = RunContext(run_id=run_id, artifact_dir=artifact_directory or config.run.artifact_dir)
    result = run_scenario(
        params,
        meals,
        duration_min=config.run.duration_min,
        dt_min=config.run.dt_min,
        sample_interval_min=config.run.sample_interval_min,
        check_mass_balance=config.run.check_mass_balance,
        context=context,
    )

    if artifact_directory is not None:
        path = result.to_csv(context.get_artifact_path("time_series.csv"))
        result.metadata["time_series_path"] = str(path)
        logger.info("Time series written", run_id=run_id, path=str(path))

    return result


def calculate_summary_metrics(result: SimulationResult) -> Dict[str, float]:
    """Summary metrics of a scenario run."""
    return result.summary_metrics()
