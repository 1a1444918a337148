"""Domain entity schemas using Pydantic.

Compartments and nutrients are closed enumerations. ``Meal`` and
``ModelParameters`` are validated on construction so that degenerate inputs
(negative grams, zero volumes, non-finite rates) fail fast instead of
propagating NaN through the integration.
"""

from __future__ import annotations
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..config import constants


class Compartment(str, Enum):
    """Anatomical pools of tracked glucose mass."""

    STOMACH = "Stomach"
    INTESTINE_LUMEN = "IntestineLumen"
    INTESTINE_TISSUE = "IntestineTissue"
    LIVER = "Liver"
    BLOOD = "Blood"
    MUSCLE = "Muscle"
    ADIPOSE = "Adipose"

    @property
    def field_name(self) -> str:
        """Attribute name of this compartment on ``CompartmentPools``."""
        return _FIELD_NAMES[self]

    @property
    def has_volume(self) -> bool:
        """Whether concentrations are defined for this compartment."""
        return self in _VOLUME_PARAMETERS

    @property
    def volume_parameter(self) -> Optional[str]:
        return _VOLUME_PARAMETERS.get(self)


_FIELD_NAMES = {
    Compartment.STOMACH: "stomach",
    Compartment.INTESTINE_LUMEN: "intestine_lumen",
    Compartment.INTESTINE_TISSUE: "intestine_tissue",
    Compartment.LIVER: "liver",
    Compartment.BLOOD: "blood",
    Compartment.MUSCLE: "muscle",
    Compartment.ADIPOSE: "adipose",
}

# Sinks (stomach, muscle, adipose) have no physiological volume
_VOLUME_PARAMETERS = {
    Compartment.BLOOD: "vol_blood",
    Compartment.INTESTINE_LUMEN: "vol_intestine_lumen",
    Compartment.INTESTINE_TISSUE: "vol_intestine_tissue",
    Compartment.LIVER: "vol_liver",
}


class Nutrient(str, Enum):
    """Nutrients tracked by the engine."""

    GLUCOSE = "glucose"

    @classmethod
    def parse(cls, value: "str | Nutrient") -> "Nutrient":
        try:
            return cls(value)
        except ValueError:
            raise ValueError(
                f"Unsupported nutrient: {value!r} (supported: {list(constants.SUPPORTED_NUTRIENTS)})"
            ) from None


class Meal(BaseModel):
    """A single meal; only carbohydrate is metabolized."""

    model_config = ConfigDict(frozen=True, extra="forbid", allow_inf_nan=False)

    name: Optional[str] = Field(None, description="Meal name")
    description: Optional[str] = Field(None, description="Meal description")

    carbs: float = Field(0.0, ge=0, description="Carbohydrate in grams")
    protein: float = Field(0.0, ge=0, description="Protein in grams (inert)")
    fat: float = Field(0.0, ge=0, description="Fat in grams (inert)")
    fiber: float = Field(0.0, ge=0, description="Fiber in grams (inert)")

    @property
    def glucose_mmol(self) -> float:
        """Glucose load of the meal in mmol."""
        return self.carbs * constants.GRAMS_TO_MMOL


class ModelParameters(BaseModel):
    """Rate constants, affinities, volumes and feedback gains for one run.

    Every field is required. ``reference()`` builds the reference 90 kg
    adult set; ``with_overrides()`` returns a validated copy.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", allow_inf_nan=False)

    # Gastric emptying
    k_GE_base: float = Field(..., ge=0, description="Gastric emptying rate (kcal/min)")

    # Intestinal absorption
    Vmax_SGLT1: float = Field(..., ge=0, description="SGLT1 maximal flux (mmol/min)")
    Kt_SGLT1: float = Field(..., gt=0, description="SGLT1 affinity (mM)")
    G50_GLUT2: float = Field(..., ge=0, description="Lumen glucose for half GLUT2 recruitment (mM)")
    Vmax_apGLUT2_factor: float = Field(..., ge=0, description="Apical GLUT2 capacity (mmol/min per mM)")
    k_para_factor: float = Field(..., ge=0, description="Paracellular permeability (mmol/min per mM)")
    k_export_IntT: float = Field(..., ge=0, description="Basolateral export rate (1/min)")

    # Liver
    HGO_basal: float = Field(..., ge=0, description="Basal hepatic glucose output (mmol/min)")
    Vmax_hep_uptake: float = Field(..., ge=0, description="Hepatic uptake capacity (mmol/min)")
    Km_hep_uptake: float = Field(..., gt=0, description="Hepatic uptake affinity (mM)")

    # Peripheral uptake
    Vmax_muscle_basal: float = Field(..., ge=0, description="Basal muscle uptake capacity (mmol/min)")
    Km_muscle: float = Field(..., gt=0, description="Muscle uptake affinity (mM)")
    Vmax_adipose_basal: float = Field(..., ge=0, description="Basal adipose uptake capacity (mmol/min)")
    Km_adipose: float = Field(..., gt=0, description="Adipose uptake affinity (mM)")

    # Renal
    renal_threshold: float = Field(..., ge=0, description="Renal glucose threshold (mM)")
    k_excrete: float = Field(..., ge=0, description="Excretion rate (mmol/min per mM excess)")

    # Hormonal effects
    delta_I_HGO: float = Field(..., ge=0, le=1, description="Insulin suppression of HGO")
    gamma_I_periph: float = Field(..., ge=0, description="Insulin stimulation of peripheral uptake")

    # Volumes
    vol_intestine_lumen: float = Field(..., gt=0, description="Intestinal lumen volume (L)")
    vol_intestine_tissue: float = Field(..., gt=0, description="Intestinal tissue volume (L)")
    vol_blood: float = Field(..., gt=0, description="Blood volume (L)")
    vol_liver: float = Field(..., gt=0, description="Liver intracellular water (L)")

    @classmethod
    def reference(cls) -> "ModelParameters":
        """Reference 90 kg adult parameter set."""
        return cls(**constants.REFERENCE_PARAMETERS)

    @classmethod
    def field_names(cls) -> list[str]:
        return list(cls.model_fields.keys())

    def with_overrides(self, overrides: Optional[Dict[str, Any]] = None, **kwargs: Any) -> "ModelParameters":
        """Return a validated copy with the given parameters replaced."""
        data = self.model_dump()
        data.update(overrides or {})
        data.update(kwargs)
        return type(self).model_validate(data)

    def volume_of(self, compartment: Compartment) -> Optional[float]:
        """Volume (L) of a compartment, or None for amount-only sinks."""
        name = compartment.volume_parameter
        return getattr(self, name) if name else None
