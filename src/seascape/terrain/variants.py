"""Per-type base relief strategies.

Each terrain type contributes one capability: a normalized base noise in
[0, 1] at world coordinates. New relief styles register a variant instead
of extending a central branch.
"""

from dataclasses import dataclass
from typing import Protocol

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ..terrain_types import TerrainType
from .fractal import VoronoiCellSet, canyon, fbm, plateaus, ridged, voronoi
from .noise import PermutationTable

# Noise cells across one world size at frequency 1.0
FEATURE_SCALE = 6.0


@dataclass(frozen=True)
class NoiseContext:
    """Parameters shared by every base-noise evaluation of one terrain."""

    size: float
    frequency: float
    table: PermutationTable | None = None
    cells: VoronoiCellSet | None = None

    def feature_coords(
        self, x: ArrayLike, z: ArrayLike
    ) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
        """Map world coordinates to size-independent noise coordinates."""
        scale = FEATURE_SCALE / self.size
        return (
            np.asarray(x, dtype=np.float64) * scale,
            np.asarray(z, dtype=np.float64) * scale,
        )


class TerrainVariant(Protocol):
    """Strategy computing the base relief for one terrain type."""

    terrain_type: TerrainType

    def base_noise(
        self, x: ArrayLike, z: ArrayLike, context: NoiseContext
    ) -> NDArray[np.float64]:
        ...


class IslandVariant:
    """Rolling fBm hills."""

    terrain_type = TerrainType.ISLAND

    def base_noise(self, x, z, context):
        u, v = context.feature_coords(x, z)
        h = fbm(u, v, 5, context.frequency, context.table)
        return np.clip(0.5 + 1.2 * h, 0.0, 1.0)


class RidgedVariant:
    """Sharp mountain crests."""

    terrain_type = TerrainType.RIDGED

    def base_noise(self, x, z, context):
        u, v = context.feature_coords(x, z)
        return ridged(u * 0.6, v * 0.6, context.frequency, context.table)


class VoronoiVariant:
    """Rounded domes centered on the fixed cell set."""

    terrain_type = TerrainType.VORONOI

    def base_noise(self, x, z, context):
        if context.cells is None:
            raise ValueError("Voronoi relief requires a cell set")
        # World space is centered; cell space starts at the corner
        half = context.size * 0.5
        return voronoi(
            np.asarray(x, dtype=np.float64) + half,
            np.asarray(z, dtype=np.float64) + half,
            context.cells,
        )


class CanyonVariant:
    """Channels carved through a rolling base."""

    terrain_type = TerrainType.CANYON

    def base_noise(self, x, z, context):
        u, v = context.feature_coords(x, z)
        return canyon(u, v, context.frequency, context.table)


class PlateauVariant:
    """Stepped mesas."""

    terrain_type = TerrainType.PLATEAUS

    def base_noise(self, x, z, context):
        u, v = context.feature_coords(x, z)
        return plateaus(u, v, context.frequency, context.table)


_VARIANTS: dict[TerrainType, TerrainVariant] = {}


def register_variant(variant: TerrainVariant) -> None:
    """Register (or replace) the strategy for ``variant.terrain_type``."""
    _VARIANTS[variant.terrain_type] = variant


def get_variant(terrain_type: TerrainType) -> TerrainVariant:
    """Look up the strategy for a terrain type.

    Raises:
        KeyError: If no variant is registered for the type.
    """
    try:
        return _VARIANTS[terrain_type]
    except KeyError:
        raise KeyError(f"No relief variant registered for {terrain_type!r}") from None


for _variant in (
    IslandVariant(),
    RidgedVariant(),
    VoronoiVariant(),
    CanyonVariant(),
    PlateauVariant(),
):
    register_variant(_variant)
