"""Configuration validation utilities."""

from typing import List
import structlog

from ..contracts.errors import ValidationError
from ..domain.entities import Meal, ModelParameters
from . import constants
from .model import AppConfig

logger = structlog.get_logger()

_MEAL_FIELDS = set(Meal.model_fields.keys())


def validate_config(config: AppConfig) -> None:
    """Validate configuration for common issues and conflicts.

    Args:
        config: Configuration to validate

    Raises:
        ValidationError: If configuration is invalid
    """
    errors: List[str] = []
    warnings: List[str] = []

    _validate_cadence(config, errors, warnings)
    _validate_parameter_overrides(config, errors)
    _validate_meal_schedule(config, errors, warnings)

    for warning in warnings:
        logger.warning(warning)

    if errors:
        raise ValidationError(
            f"Configuration validation failed: {'; '.join(errors)}"
        )


def _is_multiple(value: float, step: float) -> bool:
    ratio = value / step
    return abs(ratio - round(ratio)) < 1e-9


def _validate_cadence(config: AppConfig, errors: List[str], warnings: List[str]) -> None:
    """Check step size and sampling settings."""
    run = config.run

    if not _is_multiple(run.sample_interval_min, run.dt_min):
        errors.append(
            f"sample_interval_min={run.sample_interval_min} must be a multiple of dt_min={run.dt_min}"
        )

    if run.dt_min > constants.MAX_RECOMMENDED_DT_MIN:
        warnings.append(
            f"dt_min={run.dt_min} may overshoot; explicit Euler is only reliable for small steps"
        )

    if not _is_multiple(run.duration_min, run.dt_min):
        warnings.append(
            f"duration_min={run.duration_min} is not a multiple of dt_min; "
            "the last step is shortened"
        )

    if not _is_multiple(run.duration_min, run.sample_interval_min):
        warnings.append(
            f"duration_min={run.duration_min} is not a multiple of sample_interval_min; "
            "the final state will not be sampled"
        )


def _validate_parameter_overrides(config: AppConfig, errors: List[str]) -> None:
    """Reject overrides that do not name a model parameter."""
    unknown = set(config.parameters.overrides) - set(ModelParameters.field_names())
    if unknown:
        errors.append(f"Unknown parameter overrides: {sorted(unknown)}")


def _validate_meal_schedule(config: AppConfig, errors: List[str], warnings: List[str]) -> None:
    """Check meal timing and inline meal fields."""
    run = config.run

    for index, event in enumerate(config.meals):
        label = event.ref or f"meals[{index}]"

        if event.ref is None and not event.overrides:
            errors.append(f"{label} needs a catalog ref or inline meal values")

        unknown = set(event.overrides) - _MEAL_FIELDS
        if unknown:
            errors.append(f"{label} has unknown meal fields: {sorted(unknown)}")

        if event.time_min < 0:
            errors.append(f"{label} is scheduled at negative time {event.time_min}")
        elif event.time_min > run.duration_min:
            errors.append(
                f"{label} at t={event.time_min} is after the end of the run ({run.duration_min} min)"
            )
        elif not _is_multiple(event.time_min, run.dt_min):
            warnings.append(
                f"{label} at t={event.time_min} is ingested at the next step boundary"
            )
