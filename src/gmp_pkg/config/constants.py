"""Global constants for glucose metabolism modeling."""

from __future__ import annotations

# Physical constants
GLUCOSE_MW = 180.156  # g/mol
GRAMS_TO_MMOL = 1000.0 / GLUCOSE_MW  # mmol per gram of glucose
KCAL_PER_G_CARB = 4.0  # kcal/g

# Hormonal feedback
FASTING_BLOOD_GLUCOSE_MM = 5.0  # mM, fasting baseline and insulin setpoint
INSULIN_SIGNAL_SCALE_MM = 2.0  # mM of excess glucose per unit insulin signal

# Apical GLUT2 recruitment sigmoid width
GLUT2_RECRUITMENT_WIDTH_MM = 5.0  # mM

# Supported nutrients (only glucose is metabolized)
SUPPORTED_NUTRIENTS = ("glucose",)

# Reference 90 kg adult
REFERENCE_PARAMETERS = {
    # Gastric emptying
    "k_GE_base": 2.3,  # kcal/min
    # Intestinal absorption
    "Vmax_SGLT1": 5.5,  # mmol/min
    "Kt_SGLT1": 5.0,  # mM
    "G50_GLUT2": 40.0,  # mM
    "Vmax_apGLUT2_factor": 0.05,  # mmol/min per mM
    "k_para_factor": 0.005,  # mmol/min per mM
    "k_export_IntT": 1.5,  # 1/min
    # Liver
    "HGO_basal": 1.0,  # mmol/min
    "Vmax_hep_uptake": 2.0,  # mmol/min
    "Km_hep_uptake": 15.0,  # mM
    # Peripheral uptake
    "Vmax_muscle_basal": 0.4,  # mmol/min
    "Km_muscle": 5.0,  # mM
    "Vmax_adipose_basal": 0.1,  # mmol/min
    "Km_adipose": 5.0,  # mM
    # Renal
    "renal_threshold": 10.0,  # mM
    "k_excrete": 0.1,  # mmol/min per mM excess
    # Hormonal effects
    "delta_I_HGO": 0.8,  # unitless
    "gamma_I_periph": 4.0,  # unitless
    # Volumes
    "vol_intestine_lumen": 0.5,  # L
    "vol_intestine_tissue": 0.2,  # L
    "vol_blood": 6.8,  # L
    "vol_liver": 1.5,  # L
}

# Batch driver cadence
DEFAULT_DURATION_MIN = 300.0
DEFAULT_DT_MIN = 1.0
DEFAULT_SAMPLE_INTERVAL_MIN = 5.0
MAX_RECOMMENDED_DT_MIN = 5.0
