"""Pytest configuration and fixtures."""

import sys
import tempfile
from pathlib import Path

SRC_ROOT = Path(__file__).resolve().parents[1] / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

import pytest

from gmp_pkg.domain.entities import ModelParameters
from gmp_pkg.engine.simulator import MetabolicSimulator


@pytest.fixture
def temp_dir():
    """Temporary directory for test artifacts."""
    with tempfile.TemporaryDirectory() as tmp:
        yield Path(tmp)


@pytest.fixture
def reference_params() -> ModelParameters:
    """Reference 90 kg adult parameters."""
    return ModelParameters.reference()


@pytest.fixture
def simulator(reference_params: ModelParameters) -> MetabolicSimulator:
    """Fasting simulator with reference parameters."""
    return MetabolicSimulator(reference_params)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Keep user configuration and GMP_* variables out of the tests."""
    import os

    for key in list(os.environ):
        if key.startswith("GMP_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def sample_toml_config(temp_dir: Path) -> Path:
    """Sample TOML configuration file."""
    config_content = """
[run]
duration_min = 120.0
dt_min = 0.5
sample_interval_min = 10.0
artifact_dir = "test_results"

[parameters]
ref = "reference_90kg"

[parameters.overrides]
renal_threshold = 9.0

[[meals]]
ref = "mixed_breakfast"
time_min = 0.0

[[meals]]
time_min = 60.0

[meals.inline]
carbs = 30.0
"""

    config_file = temp_dir / "test_config.toml"
    config_file.write_text(config_content)
    return config_file
