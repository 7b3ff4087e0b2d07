"""Shared test fixtures for seascape tests."""

import numpy as np
import pytest

from seascape.config import Config, OceanConfig, TerrainConfig
from seascape.ocean.waves import Wave, WaveBank
from seascape.terrain import noise
from seascape.terrain.noise import PermutationTable


@pytest.fixture(autouse=True)
def restore_shared_table(monkeypatch: pytest.MonkeyPatch) -> None:
    """Undo any reseed of the process-wide permutation table after each test."""
    monkeypatch.setattr(noise, "_shared_table", None)


@pytest.fixture
def table() -> PermutationTable:
    """Explicit table with the default seed."""
    return PermutationTable.from_seed(noise.DEFAULT_SEED)


@pytest.fixture
def single_wave() -> WaveBank:
    """One wave: wavelength 10, amplitude 1, speed 1, heading +X."""
    return WaveBank([Wave(10.0, 1.0, 1.0, (1.0, 0.0))])


@pytest.fixture
def small_config() -> Config:
    """Scene small enough to rebuild many times per test."""
    return Config(
        noise_seed=2024,
        terrain=TerrainConfig(resolution=8, size=50.0, max_height=10.0),
        ocean=OceanConfig(size=100.0, resolution=8, wave_height=1.0),
    )


@pytest.fixture
def flat_heights() -> np.ndarray:
    """5x5 zero height grid for a resolution-4 layout."""
    return np.zeros((5, 5))
