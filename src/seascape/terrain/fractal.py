"""Fractal height functions built from the Perlin kernel.

Provides fBm, ridged, Voronoi-cell, canyon and plateau relief, plus the
single cosmetic slope-based erosion filter.
"""

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.spatial import cKDTree

from .noise import PermutationTable, perlin, smoothstep

VORONOI_CELL_COUNT = 32
VORONOI_SEED = 7919

PLATEAU_STEPS = 5
CANYON_CHANNEL_POWER = 4.0


def fbm(
    x: ArrayLike,
    z: ArrayLike,
    octaves: int = 5,
    frequency: float = 1.0,
    table: PermutationTable | None = None,
) -> NDArray[np.float64]:
    """Fractal Brownian motion.

    Sums octaves of Perlin noise, doubling frequency and halving amplitude
    each time, starting from amplitude 0.5.

    Args:
        x: X coordinates.
        z: Z coordinates.
        octaves: Number of noise layers to sum.
        frequency: Starting frequency (the configured noise frequency).
        table: Permutation table override.

    Returns:
        Noise values, bounded by the amplitude sum (< 1).
    """
    x = np.asarray(x, dtype=np.float64)
    z = np.asarray(z, dtype=np.float64)

    value = np.zeros(np.broadcast(x, z).shape, dtype=np.float64)
    amplitude = 0.5

    for _ in range(octaves):
        value += amplitude * perlin(x * frequency, z * frequency, table)
        frequency *= 2.0
        amplitude *= 0.5

    return value


def ridged(
    x: ArrayLike,
    z: ArrayLike,
    frequency: float = 1.0,
    table: PermutationTable | None = None,
) -> NDArray[np.float64]:
    """Ridged relief: folds fBm valleys into sharp crests, in [0, 1]."""
    h = fbm(x, z, 6, frequency, table)
    return (1.0 - np.abs(h)) ** 2


class VoronoiCellSet:
    """Fixed cell centers inside [0, size] x [0, size].

    Drawn once from a fixed seed so Voronoi relief stays identical across
    regenerations and terrain-type switches.
    """

    def __init__(
        self,
        size: float,
        count: int = VORONOI_CELL_COUNT,
        seed: int = VORONOI_SEED,
    ):
        rng = np.random.default_rng(seed)
        self.size = float(size)
        self.points: NDArray[np.float64] = rng.uniform(0.0, self.size, size=(count, 2))
        self.points.flags.writeable = False
        self._tree = cKDTree(self.points)

    def __len__(self) -> int:
        return len(self.points)

    def nearest_distance(self, x: ArrayLike, z: ArrayLike) -> NDArray[np.float64]:
        """Distance from each (x, z) to the closest cell center."""
        x, z = np.broadcast_arrays(
            np.asarray(x, dtype=np.float64), np.asarray(z, dtype=np.float64)
        )
        distance, _ = self._tree.query(np.stack([x, z], axis=-1))
        return np.asarray(distance, dtype=np.float64)


def voronoi(x: ArrayLike, z: ArrayLike, cells: VoronoiCellSet) -> NDArray[np.float64]:
    """Cell relief: 1 at a cell center, falling to 0 at ``0.1 * size`` away.

    Coordinates are in cell space, i.e. [0, size] on both axes.
    """
    distance = cells.nearest_distance(x, z)
    return 1.0 - np.clip(distance / (cells.size * 0.1), 0.0, 1.0)


def canyon(
    x: ArrayLike,
    z: ArrayLike,
    frequency: float = 1.0,
    table: PermutationTable | None = None,
) -> NDArray[np.float64]:
    """Canyon relief with linear, erosion-like channels, in [0, 1].

    A low-frequency base is cut by a sinusoidal channel mask; inside the
    channels a high-frequency detail layer roughens the floor.
    """
    x = np.asarray(x, dtype=np.float64)
    z = np.asarray(z, dtype=np.float64)

    base = fbm(x * 0.5, z * 0.5, 4, frequency, table)
    detail = fbm(x * 4.0, z * 4.0, 3, frequency, table)

    # Channel direction wanders with the base field
    phase = (x + 0.35 * z + base * 4.0) * frequency * 3.0
    channel = (0.5 + 0.5 * np.sin(phase)) ** CANYON_CHANNEL_POWER

    height = 0.55 + 0.9 * base - 0.45 * channel + 0.25 * detail * channel
    return np.clip(height, 0.0, 1.0)


def plateaus(
    x: ArrayLike,
    z: ArrayLike,
    frequency: float = 1.0,
    table: PermutationTable | None = None,
    steps: int = PLATEAU_STEPS,
) -> NDArray[np.float64]:
    """Stepped mesas: fBm quantized into ``steps`` levels plus fine detail."""
    x = np.asarray(x, dtype=np.float64)
    z = np.asarray(z, dtype=np.float64)

    value = np.clip(0.5 + fbm(x, z, 5, frequency, table), 0.0, 1.0)
    level = np.minimum(np.floor(value * steps), steps - 1) / (steps - 1)
    detail = 0.04 * fbm(x * 6.0, z * 6.0, 2, frequency, table)

    return np.clip(level + detail, 0.0, 1.0)


def erosion_filter(
    height: ArrayLike,
    slope: ArrayLike,
    strength: float = 0.15,
) -> NDArray[np.float64]:
    """Attenuate positive heights on steep slopes.

    Args:
        height: Elevation values.
        slope: Slope magnitude (rise over run) at the same points.
        strength: Largest fractional reduction, reached on the steepest slopes.

    Returns:
        Attenuated elevation; non-positive heights are returned unchanged.
    """
    height = np.asarray(height, dtype=np.float64)
    attenuation = strength * smoothstep(0.3, 1.5, slope)
    return np.where(height > 0.0, height * (1.0 - attenuation), height)


def compute_slope(
    elevation: NDArray[np.float64],
    spacing: float = 1.0,
) -> NDArray[np.float64]:
    """Compute slope magnitude from a 2D elevation grid.

    Args:
        elevation: 2D elevation array.
        spacing: World distance between neighboring samples.

    Returns:
        2D slope magnitude array (|gradient|).
    """
    grad_z, grad_x = np.gradient(elevation, spacing)
    return np.sqrt(grad_x**2 + grad_z**2)
