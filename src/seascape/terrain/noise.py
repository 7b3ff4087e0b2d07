"""Gradient noise kernel for terrain generation.

Provides classic 2D Perlin noise backed by a shared permutation table.
All functions are vectorized over numpy arrays and also accept scalars.
"""

import numpy as np
import structlog
from numpy.typing import ArrayLike, NDArray

logger = structlog.get_logger()

TABLE_SIZE = 256
DEFAULT_SEED = 1337

# Keeps the 2D gradient set inside [-1, 1]
_OUTPUT_SCALE = 0.507


class PermutationTable:
    """Shuffled lookup table of 0..255, duplicated to 512 entries.

    The underlying array is read-only so a table can be shared freely
    between noise calls and surface instances.
    """

    def __init__(self, values: ArrayLike):
        base = np.asarray(values, dtype=np.int64)
        if base.shape != (TABLE_SIZE,):
            raise ValueError(
                f"Permutation table needs {TABLE_SIZE} entries, got {base.size}"
            )
        if not np.array_equal(np.sort(base), np.arange(TABLE_SIZE)):
            raise ValueError("Permutation table must be a permutation of 0..255")

        self.values: NDArray[np.int64] = np.concatenate([base, base])
        self.values.flags.writeable = False

    @classmethod
    def from_seed(cls, seed: int) -> "PermutationTable":
        """Build a table by shuffling 0..255 with a seeded generator."""
        rng = np.random.default_rng(seed)
        return cls(rng.permutation(TABLE_SIZE))

    def __len__(self) -> int:
        return len(self.values)


_shared_table: PermutationTable | None = None


def get_permutation_table() -> PermutationTable:
    """Return the process-wide table, creating it on first use."""
    global _shared_table
    if _shared_table is None:
        _shared_table = PermutationTable.from_seed(DEFAULT_SEED)
        logger.debug("permutation_table_created", seed=DEFAULT_SEED)
    return _shared_table


def reseed(seed: int) -> PermutationTable:
    """Replace the process-wide table with one shuffled from ``seed``.

    Surfaces built before the call keep their meshes; they pick up the new
    table on their next regeneration.
    """
    global _shared_table
    _shared_table = PermutationTable.from_seed(seed)
    logger.info("permutation_table_reseeded", seed=seed)
    return _shared_table


def fade(t: ArrayLike) -> NDArray[np.float64]:
    """Quintic smootherstep curve 6t^5 - 15t^4 + 10t^3."""
    t = np.asarray(t, dtype=np.float64)
    return t * t * t * (t * (t * 6.0 - 15.0) + 10.0)


def lerp(t: ArrayLike, a: ArrayLike, b: ArrayLike) -> NDArray[np.float64]:
    """Linear interpolation from a to b."""
    return a + t * (np.asarray(b) - a)


def grad(hash_value: ArrayLike, x: ArrayLike, y: ArrayLike) -> NDArray[np.float64]:
    """Dot product of a hashed gradient direction with the offset (x, y).

    The low three bits pick one of eight directions: bit 2 swaps the axes,
    bits 0 and 1 flip the signs of the two components.
    """
    h = np.asarray(hash_value, dtype=np.int64) & 7
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)

    u = np.where(h < 4, x, y)
    v = np.where(h < 4, y, x)
    return np.where(h & 1, -u, u) + np.where(h & 2, -2.0 * v, 2.0 * v)


def perlin(
    x: ArrayLike,
    z: ArrayLike,
    table: PermutationTable | None = None,
) -> NDArray[np.float64]:
    """Evaluate 2D Perlin noise.

    Args:
        x: X coordinates (scalar or array).
        z: Z coordinates, broadcastable against ``x``.
        table: Permutation table; the shared table when omitted.

    Returns:
        Noise values in [-1, 1], zero at integer lattice points.
    """
    p = (table if table is not None else get_permutation_table()).values

    x = np.asarray(x, dtype=np.float64)
    z = np.asarray(z, dtype=np.float64)

    x_floor = np.floor(x)
    z_floor = np.floor(z)
    xi = x_floor.astype(np.int64) & 255
    zi = z_floor.astype(np.int64) & 255

    xf = x - x_floor
    zf = z - z_floor
    u = fade(xf)
    v = fade(zf)

    a = p[xi] + zi
    b = p[xi + 1] + zi

    aa = p[a]
    ab = p[a + 1]
    ba = p[b]
    bb = p[b + 1]

    bottom = lerp(u, grad(aa, xf, zf), grad(ba, xf - 1.0, zf))
    top = lerp(u, grad(ab, xf, zf - 1.0), grad(bb, xf - 1.0, zf - 1.0))

    return _OUTPUT_SCALE * lerp(v, bottom, top)


def smoothstep(edge0: float, edge1: float, x: ArrayLike) -> NDArray[np.float64]:
    """Smooth Hermite interpolation between 0 and 1.

    Args:
        edge0: Lower edge of transition.
        edge1: Upper edge of transition.
        x: Input values.

    Returns:
        Smoothly interpolated values in [0, 1].
    """
    t = np.clip((np.asarray(x, dtype=np.float64) - edge0) / (edge1 - edge0), 0.0, 1.0)
    return t * t * (3.0 - 2.0 * t)
