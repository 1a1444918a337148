"""Configuration data models."""

from __future__ import annotations
from typing import Any, Dict, List, Optional, Union
from pathlib import Path
from pydantic import BaseModel, Field, model_validator

from . import constants


class RunConfig(BaseModel):
    """Batch run cadence and output settings."""

    duration_min: float = Field(constants.DEFAULT_DURATION_MIN, gt=0, description="Simulated minutes")
    dt_min: float = Field(constants.DEFAULT_DT_MIN, gt=0, description="Euler step size in minutes")
    sample_interval_min: float = Field(
        constants.DEFAULT_SAMPLE_INTERVAL_MIN, gt=0, description="Time series sampling interval"
    )
    artifact_dir: str = "results"
    check_mass_balance: bool = True


class EntityRef(BaseModel):
    """Reference to a catalog entity with optional overrides."""

    ref: Optional[str] = None
    overrides: Dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _inline_alias(cls, data: Any) -> Any:
        # Handle TOML "inline" alias
        if isinstance(data, dict) and "inline" in data:
            data = dict(data)
            data["overrides"] = data.pop("inline")
        return data


class MealEvent(EntityRef):
    """Meal scheduled at a simulated time."""

    time_min: float = Field(0.0, description="Ingestion time in simulated minutes")


def _default_meals() -> List[MealEvent]:
    return [MealEvent(ref="ogtt_75g", time_min=0.0)]


class AppConfig(BaseModel):
    """Complete application configuration."""

    run: RunConfig = Field(default_factory=RunConfig)
    parameters: EntityRef = Field(default_factory=lambda: EntityRef(ref="reference_90kg"))
    meals: List[MealEvent] = Field(default_factory=_default_meals)

    def model_dump_toml(self) -> str:
        """Export configuration as TOML string."""
        import tomli_w
        return tomli_w.dumps(self.model_dump(exclude_none=True))

    @classmethod
    def from_toml_file(cls, path: Union[Path, str]) -> "AppConfig":
        """Load configuration from TOML file."""
        try:
            import tomllib
        except ImportError:
            import tomli as tomllib

        with open(path, "rb") as f:
            data = tomllib.load(f)
        return cls.model_validate(data)
