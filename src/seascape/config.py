"""Surface configuration models and TOML loading."""

import tomllib
from pathlib import Path

from pydantic import BaseModel, Field, FiniteFloat

from .terrain_types import TerrainType

Color = tuple[FiniteFloat, FiniteFloat, FiniteFloat]


class TerrainConfig(BaseModel):
    """Island heightfield parameters."""

    resolution: int = Field(default=128, gt=0, description="Grid cells per side")
    size: float = Field(default=100.0, gt=0, description="World units per side")
    max_height: float = Field(default=20.0, description="Maximum elevation")
    terrain_type: TerrainType = Field(
        default=TerrainType.ISLAND, description="Inland relief style"
    )
    noise_frequency: float = Field(
        default=1.0, gt=0, description="Starting frequency for fBm octaves"
    )
    erosion_strength: float = Field(
        default=0.15,
        ge=0.0,
        le=1.0,
        description="Largest slope-based height reduction (0 disables)",
    )
    voronoi_seed: int = Field(default=7919, description="Seed for the Voronoi cell set")


class OceanConfig(BaseModel):
    """Animated ocean surface parameters."""

    size: float = Field(default=200.0, gt=0, description="World units per side")
    resolution: int = Field(default=256, gt=0, description="Grid cells per side")
    wave_height: float = Field(default=2.0, description="Global amplitude multiplier")
    wave_speed: float = Field(default=1.0, description="Global phase speed multiplier")
    wave_frequency: float = Field(
        default=1.0, description="Animation time multiplier per update"
    )
    wave_seed: int = Field(default=42, description="Seed for detail wave directions")
    uv_repeat: float = Field(default=10.0, gt=0, description="Texture tiling across the grid")
    water_color: Color = Field(default=(0.1, 0.3, 0.5), description="Base water RGB")
    foam_color: Color = Field(default=(0.9, 0.95, 1.0), description="Foam RGB")
    transparency: float = Field(
        default=0.7, ge=0.0, le=1.0, description="Surface alpha"
    )


class Config(BaseModel):
    """Complete configuration for an island scene."""

    noise_seed: int = Field(default=1337, description="Permutation table seed")
    terrain: TerrainConfig = Field(default_factory=TerrainConfig)
    ocean: OceanConfig = Field(default_factory=OceanConfig)


def load_config(config_path: Path) -> Config:
    """Load configuration from a TOML file.

    Args:
        config_path: Path to the TOML config file.

    Returns:
        Parsed Config object.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        tomllib.TOMLDecodeError: If TOML is malformed.
        pydantic.ValidationError: If values are out of range.
    """
    with open(config_path, "rb") as f:
        data = tomllib.load(f)
    return Config.model_validate(data)


def find_config(name: str) -> Path:
    """Find a config file by name.

    Searches in the following order:
    1. Exact path if name contains path separator or ends in .toml
    2. configs/{name}.toml, then configs/{name}, under the working directory
    3. The same two names in the source checkout's configs/

    Args:
        name: Config name or path.

    Returns:
        Path to the config file.

    Raises:
        FileNotFoundError: If config file is not found.
    """
    if "/" in name or name.endswith(".toml"):
        path = Path(name)
        if path.exists():
            return path
        raise FileNotFoundError(f"Config file not found: {name}")

    configs_dirs = _configs_dirs()
    for configs_dir in configs_dirs:
        for config_path in (configs_dir / f"{name}.toml", configs_dir / name):
            if config_path.is_file():
                return config_path

    searched = ", ".join(str(d) for d in configs_dirs)
    raise FileNotFoundError(
        f"Config '{name}' not found in {searched}. "
        f"Available configs: {list_configs()}"
    )


def list_configs() -> list[str]:
    """List available config names."""
    names = set()
    for configs_dir in _configs_dirs():
        names.update(p.stem for p in configs_dir.glob("*.toml"))
    return sorted(names)


def _configs_dirs() -> list[Path]:
    """Existing config directories: the working directory's, then the checkout's.

    The checkout directory is absent when the package is installed from a wheel.
    """
    dirs = []
    for candidate in (Path.cwd() / "configs", Path(__file__).parent.parent.parent / "configs"):
        candidate = candidate.resolve()
        if candidate.is_dir() and candidate not in dirs:
            dirs.append(candidate)
    return dirs
