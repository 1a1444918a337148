"""Postprandial glucose metabolism engine.

The engine owns the compartment state and advances it with a single
fixed-step forward-Euler rule. Every flux of a step is computed from the
pre-step snapshot and all deltas are committed in one batch:

1. insulin signal from blood glucose elevation
2. gastric emptying (Stomach -> IntestineLumen)
3. SGLT1 + apical GLUT2 + paracellular absorption (Lumen -> Tissue)
4. basolateral export (Tissue -> Blood)
5. hepatic output/uptake (net balance tracked on Liver)
6. insulin-stimulated muscle and adipose uptake
7. renal excretion above threshold
8. batch commit with a floor at zero, ``time += dt``

There are no timers; callers decide when and how often to call ``advance``.
"""

from __future__ import annotations
import math
from typing import Any, Mapping, Optional, Union

import structlog

from ..config import constants
from ..contracts.errors import ModelError
from ..contracts.types import StepFluxes
from ..domain.entities import Compartment, Meal, ModelParameters, Nutrient
from ..domain.state import SimulationState

logger = structlog.get_logger()


def _sigmoid(x: float) -> float:
    """Logistic function without overflow for large |x|."""
    if x >= 0:
        return 1.0 / (1.0 + math.exp(-x))
    z = math.exp(x)
    return z / (1.0 + z)


def michaelis_menten(vmax: float, km: float, concentration: float) -> float:
    """Saturable rate ``vmax * C / (km + C)``."""
    return vmax * concentration / (km + concentration)


class MetabolicSimulator:
    """Compartmental glucose simulator under insulin feedback.

    Args:
        parameters: Model parameters, fixed for the lifetime of the simulator.
            Construct a new simulator to change them.
    """

    def __init__(self, parameters: ModelParameters):
        self._params = parameters
        self._state = SimulationState.fasting(parameters)
        self._last_fluxes: Optional[StepFluxes] = None

    @property
    def parameters(self) -> ModelParameters:
        return self._params

    @property
    def time(self) -> float:
        return self._state.time

    @property
    def last_fluxes(self) -> Optional[StepFluxes]:
        """Fluxes of the most recent ``advance`` call, None after reset."""
        return self._last_fluxes

    def reset(self) -> None:
        """Restore the fasting baseline, discarding all history."""
        self._state = SimulationState.fasting(self._params)
        self._last_fluxes = None
        logger.debug("Simulator reset to fasting baseline")

    def ingest_meal(self, meal: Union[Meal, Mapping[str, Any]]) -> float:
        """Add the meal's carbohydrate to the stomach as glucose.

        Meals superpose; time and the other pools are untouched. Protein,
        fat and fiber are accepted but have no effect.

        Returns:
            Glucose mass added to the stomach (mmol)
        """
        if not isinstance(meal, Meal):
            meal = Meal.model_validate(meal)

        added = meal.glucose_mmol
        self._state.nutrients.glucose.stomach += added
        logger.debug(
            "Meal ingested",
            meal=meal.name,
            carbs_g=meal.carbs,
            glucose_mmol=added,
            time_min=self._state.time,
        )
        return added

    def get_state(self) -> SimulationState:
        """Return an independent copy of the current state."""
        return self._state.copy()

    def get_concentration(
        self,
        compartment: Union[Compartment, str],
        nutrient: Union[Nutrient, str] = Nutrient.GLUCOSE,
    ) -> float:
        """Concentration (mM) in a compartment with a volume.

        Stomach, Muscle and Adipose have no physiological volume; their raw
        mass (mmol) is returned unchanged.
        """
        compartment = Compartment(compartment)
        amount = self._state.nutrients[nutrient][compartment]
        volume = self._params.volume_of(compartment)
        if volume is None:
            return amount
        return amount / volume

    def total_mass(self, nutrient: Union[Nutrient, str] = Nutrient.GLUCOSE) -> float:
        """Sum of all tracked pools (mmol)."""
        return self._state.nutrients[nutrient].total()

    def advance(self, dt: float) -> StepFluxes:
        """Advance the state by one explicit Euler step of ``dt`` minutes.

        Returns:
            The fluxes computed for this step

        Raises:
            ModelError: If ``dt`` is negative or not finite
        """
        if not math.isfinite(dt) or dt < 0:
            raise ModelError(
                f"Step size must be a finite, non-negative number of minutes, got {dt}",
                {"dt": dt},
            )

        p = self._params
        pools = self._state.nutrients.glucose

        # Pre-step snapshot
        stomach = pools.stomach
        lumen = pools.intestine_lumen
        tissue = pools.intestine_tissue
        c_blood = self.get_concentration(Compartment.BLOOD)
        c_lumen = self.get_concentration(Compartment.INTESTINE_LUMEN)
        c_tissue = self.get_concentration(Compartment.INTESTINE_TISSUE)

        # Hormones: proportional, memoryless
        insulin = max(
            0.0,
            (c_blood - constants.FASTING_BLOOD_GLUCOSE_MM) / constants.INSULIN_SIGNAL_SCALE_MM,
        )

        # Gastric emptying, inversely proportional to remaining energy
        stomach_energy = stomach / constants.GRAMS_TO_MMOL / constants.KCAL_PER_G_CARB
        if stomach_energy > 0:
            gastric_emptying = p.k_GE_base / stomach_energy * stomach * dt
        else:
            gastric_emptying = 0.0

        # Intestinal absorption
        sglt1 = michaelis_menten(p.Vmax_SGLT1, p.Kt_SGLT1, c_lumen) * dt
        recruitment = _sigmoid((c_lumen - p.G50_GLUT2) / constants.GLUT2_RECRUITMENT_WIDTH_MM)
        apical_glut2 = recruitment * p.Vmax_apGLUT2_factor * max(0.0, c_lumen - c_tissue) * dt
        paracellular = p.k_para_factor * max(0.0, c_lumen - c_blood) * dt
        absorption = min(lumen, sglt1 + apical_glut2 + paracellular)

        export = min(tissue, p.k_export_IntT * tissue * dt)

        # Liver
        hgo = p.HGO_basal * max(0.0, 1.0 - p.delta_I_HGO * insulin) * dt
        hepatic_uptake = michaelis_menten(p.Vmax_hep_uptake, p.Km_hep_uptake, c_blood) * dt
        net_liver = hepatic_uptake - hgo

        # Peripheral uptake
        multiplier = 1.0 + p.gamma_I_periph * insulin
        muscle = michaelis_menten(p.Vmax_muscle_basal * multiplier, p.Km_muscle, c_blood) * dt
        adipose = michaelis_menten(p.Vmax_adipose_basal * multiplier, p.Km_adipose, c_blood) * dt

        # Renal
        if c_blood > p.renal_threshold:
            renal = p.k_excrete * (c_blood - p.renal_threshold) * dt
        else:
            renal = 0.0

        deltas = {
            Compartment.STOMACH: -gastric_emptying,
            Compartment.INTESTINE_LUMEN: gastric_emptying - absorption,
            Compartment.INTESTINE_TISSUE: absorption - export,
            Compartment.BLOOD: export - net_liver - muscle - adipose - renal,
            Compartment.LIVER: net_liver,
            Compartment.MUSCLE: muscle,
            Compartment.ADIPOSE: adipose,
        }

        # Commit; mass lost to the floor is not conserved
        floor_correction = 0.0
        for compartment, delta in deltas.items():
            updated = pools[compartment] + delta
            if updated < 0:
                floor_correction -= updated
                updated = 0.0
            pools[compartment] = updated

        self._state.hormones.insulin_signal = insulin
        self._state.cumulative.renal_excretion += renal
        self._state.time += dt

        self._last_fluxes = StepFluxes(
            dt=dt,
            insulin_signal=insulin,
            gastric_emptying=gastric_emptying,
            sglt1=sglt1,
            apical_glut2=apical_glut2,
            paracellular=paracellular,
            absorption=absorption,
            basolateral_export=export,
            hepatic_glucose_output=hgo,
            hepatic_uptake=hepatic_uptake,
            muscle_uptake=muscle,
            adipose_uptake=adipose,
            renal_excretion=renal,
            floor_correction=floor_correction,
        )
        return self._last_fluxes
