"""Island shaping: organic radial mask, coastline style, zoned elevation."""

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .fractal import fbm
from .noise import PermutationTable, perlin
from .variants import NoiseContext, TerrainVariant

# Normalized radius (fraction of world size) where the mask reaches zero
ISLAND_RADIUS = 0.55
MASK_EXPONENT = 1.8

# Zone thresholds on the island mask
OCEAN_EDGE = 0.05
SHELF_EDGE = 0.25
COAST_EDGE = 0.40
PEAK_EDGE = 0.85

# Elevations in world units
OCEAN_FLOOR = -15.0
SHELF_DEPTH = -2.0
BEACH_HEIGHT = 1.2
RIPPLE_AMPLITUDE = 0.2

BEACH_THRESHOLD = 0.55

# Fractions of max height
CLIFF_FRACTION = 0.25
ROCK_DETAIL = 0.06
INLAND_FLOOR = 0.35
INLAND_DETAIL = 0.1
PEAK_GAIN = 0.35
CRATER_DEPTH = 0.3


def _polar(
    x: ArrayLike, z: ArrayLike, size: float
) -> tuple[NDArray[np.float64], NDArray[np.float64], NDArray[np.float64]]:
    """Normalized radius and unit-circle angle components for (x, z)."""
    nx = np.asarray(x, dtype=np.float64) / size
    nz = np.asarray(z, dtype=np.float64) / size
    theta = np.arctan2(nz, nx)
    return np.sqrt(nx * nx + nz * nz), np.cos(theta), np.sin(theta)


def island_mask(
    x: ArrayLike,
    z: ArrayLike,
    size: float,
    table: PermutationTable | None = None,
) -> NDArray[np.float64]:
    """How far inland (x, z) lies, from 1 at the center to 0 past the coast.

    The radial distance is perturbed by two low-frequency noise samples
    taken along the unit circle of the polar angle, so the silhouette is
    irregular yet continuous all the way around.

    Args:
        x: World X coordinates.
        z: World Z coordinates.
        size: World size (units per side).
        table: Permutation table override.

    Returns:
        Mask values in [0, 1].
    """
    radius, c, s = _polar(x, z, size)
    distance = radius / ISLAND_RADIUS

    wobble = (
        0.18 * perlin(c * 1.3 + 17.3, s * 1.3 + 5.9, table)
        + 0.08 * perlin(c * 3.1 + 42.1, s * 3.1 + 27.4, table)
    )
    perturbed = distance * (1.0 + wobble)

    return np.clip(1.0 - perturbed, 0.0, 1.0) ** MASK_EXPONENT


def coastline_variation(
    x: ArrayLike,
    z: ArrayLike,
    size: float,
    table: PermutationTable | None = None,
) -> NDArray[np.float64]:
    """Angular coastline style in [0, 1]; above 0.55 is beach, else cliff."""
    _, c, s = _polar(x, z, size)
    blend = 0.7 * perlin(c * 2.2 + 71.3, s * 2.2 + 33.7, table) + 0.3 * perlin(
        c * 5.3 + 12.9, s * 5.3 + 88.1, table
    )
    return np.clip(0.5 + 0.9 * blend, 0.0, 1.0)


def _progress(mask: NDArray[np.float64], low: float, high: float) -> NDArray[np.float64]:
    return np.clip((mask - low) / (high - low), 0.0, 1.0)


def final_height(
    x: ArrayLike,
    z: ArrayLike,
    variant: TerrainVariant,
    context: NoiseContext,
    max_height: float,
) -> NDArray[np.float64]:
    """Compose the five-zone island elevation profile.

    Zones by mask value: ocean floor, shelf ramp, coastline (beach or cliff),
    inland relief from the variant's base noise, and a central peak or crater.

    Args:
        x: World X coordinates.
        z: World Z coordinates.
        variant: Relief strategy for the inland zone.
        context: Shared noise parameters (size, frequency, table, cells).
        max_height: Configured maximum elevation.

    Returns:
        Elevation clamped to ``[OCEAN_FLOOR, max(max_height, 0)]``.
    """
    x, z = np.broadcast_arrays(
        np.asarray(x, dtype=np.float64), np.asarray(z, dtype=np.float64)
    )
    table = context.table
    u, v = context.feature_coords(x, z)

    mask = island_mask(x, z, context.size, table)
    beach = coastline_variation(x, z, context.size, table) > BEACH_THRESHOLD
    base = variant.base_noise(x, z, context)

    # Shelf ramp
    t_shelf = _progress(mask, OCEAN_EDGE, SHELF_EDGE)
    shelf = OCEAN_FLOOR + (SHELF_DEPTH - OCEAN_FLOOR) * t_shelf**1.5

    # Coastline
    t_coast = _progress(mask, SHELF_EDGE, COAST_EDGE)
    ripple = RIPPLE_AMPLITUDE * np.sin(u * 10.0) * np.cos(v * 8.0) * (1.0 - t_coast)
    beach_height = SHELF_DEPTH + (BEACH_HEIGHT - SHELF_DEPTH) * t_coast**0.8 + ripple

    cliff_top = max(CLIFF_FRACTION * max_height, BEACH_HEIGHT)
    rock = fbm(u * 12.0, v * 12.0, 3, context.frequency, table)
    cliff_height = (
        SHELF_DEPTH
        + (cliff_top - SHELF_DEPTH) * t_coast**0.35
        + rock * ROCK_DETAIL * max_height * t_coast
    )
    coast = np.where(beach, beach_height, cliff_height)
    coast_top = np.where(beach, BEACH_HEIGHT, cliff_top)

    # Inland
    t_inland = _progress(mask, COAST_EDGE, PEAK_EDGE)
    target = max_height * (INLAND_FLOOR + (1.0 - INLAND_FLOOR) * base)
    detail = fbm(u * 3.0, v * 3.0, 4, context.frequency, table)
    inland = (
        coast_top
        + (target - coast_top) * t_inland**1.3
        + detail * INLAND_DETAIL * max_height * t_inland
    )

    # Central peak or crater
    excess = _progress(mask, PEAK_EDGE, 1.0) ** 2
    center = inland + np.where(
        base > 0.5, PEAK_GAIN * max_height * excess, -CRATER_DEPTH * max_height * excess
    )

    height = np.select(
        [mask < OCEAN_EDGE, mask < SHELF_EDGE, mask < COAST_EDGE, mask <= PEAK_EDGE],
        [np.full_like(mask, OCEAN_FLOOR), shelf, coast, inland],
        default=center,
    )
    return np.clip(height, OCEAN_FLOOR, max(max_height, 0.0))
