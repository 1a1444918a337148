"""Resolve catalog references in a configuration into domain objects."""

from __future__ import annotations
from typing import Any, Dict, List, Mapping, Optional

import structlog
from pydantic import ValidationError as PydanticValidationError

from ..catalog import ReadOnlyCatalog, get_default_catalog
from ..contracts.errors import CatalogError, ConfigError
from ..contracts.types import ScheduledMeal
from ..domain.entities import Meal, ModelParameters
from .model import AppConfig, EntityRef

logger = structlog.get_logger()


def hydrate_parameters(
    config: AppConfig,
    catalog: Optional[ReadOnlyCatalog] = None,
    extra_overrides: Optional[Mapping[str, Any]] = None,
) -> ModelParameters:
    """Build the model parameters named by ``config.parameters``.

    Args:
        config: Application configuration
        catalog: Catalog to resolve references against (default catalog if None)
        extra_overrides: Overrides applied on top of the configured ones

    Raises:
        ConfigError: If the reference is unknown or an override is invalid
    """
    ref = config.parameters
    overrides: Dict[str, Any] = dict(ref.overrides)
    overrides.update(extra_overrides or {})

    try:
        if ref.ref is None:
            base = ModelParameters.reference()
        else:
            base = _catalog(catalog).get_entry("parameters", ref.ref)
        params = base.with_overrides(overrides)
    except CatalogError as e:
        raise ConfigError(e.message, e.details) from e
    except PydanticValidationError as e:
        raise ConfigError(f"Invalid model parameters: {e}", {"overrides": overrides}) from e

    logger.debug("Parameters hydrated", ref=ref.ref, overrides=sorted(overrides))
    return params


def hydrate_meal(event: EntityRef, catalog: Optional[ReadOnlyCatalog] = None) -> Meal:
    """Resolve one meal reference plus inline overrides."""
    try:
        data: Dict[str, Any] = {}
        if event.ref is not None:
            data = _catalog(catalog).get_entry("meals", event.ref).model_dump()
        data.update(event.overrides)
        return Meal.model_validate(data)
    except CatalogError as e:
        raise ConfigError(e.message, e.details) from e
    except PydanticValidationError as e:
        raise ConfigError(f"Invalid meal {event.ref or event.overrides}: {e}") from e


def hydrate_meals(config: AppConfig, catalog: Optional[ReadOnlyCatalog] = None) -> List[ScheduledMeal]:
    """Resolve the configured meal schedule, ordered by ingestion time."""
    catalog = _catalog(catalog) if any(e.ref for e in config.meals) else catalog
    scheduled = [
        ScheduledMeal(time_min=event.time_min, meal=hydrate_meal(event, catalog))
        for event in config.meals
    ]
    return sorted(scheduled, key=lambda item: item.time_min)


def _catalog(catalog: Optional[ReadOnlyCatalog]) -> ReadOnlyCatalog:
    return catalog if catalog is not None else get_default_catalog()
