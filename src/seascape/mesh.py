"""Regular grid layout, triangulation, normals and mesh snapshots.

Both surfaces share this topology: (R+1)^2 vertices in row-major order
(z outer, x inner) and two triangles per cell wound so a flat grid faces +Y.
"""

import math
import numbers
from dataclasses import dataclass
from functools import cached_property

import numpy as np
from numpy.typing import NDArray

from .exceptions import InvalidParameterError

UP = (0.0, 1.0, 0.0)
NORMAL_EPSILON = 1e-8


def require_positive(name: str, value: float) -> None:
    """Reject non-finite or non-positive values.

    Raises:
        InvalidParameterError: If ``value`` is not a finite number above zero.
    """
    if not math.isfinite(value) or value <= 0:
        raise InvalidParameterError(f"{name} must be a positive number, got {value!r}")


def require_finite(name: str, value: float) -> None:
    """Reject NaN and infinities.

    Raises:
        InvalidParameterError: If ``value`` is not finite.
    """
    if not math.isfinite(value):
        raise InvalidParameterError(f"{name} must be finite, got {value!r}")


@dataclass(frozen=True)
class GridLayout:
    """Square grid of ``resolution`` cells per side spanning ``size`` units."""

    resolution: int
    size: float

    def __post_init__(self) -> None:
        if isinstance(self.resolution, bool) or not isinstance(
            self.resolution, numbers.Integral
        ):
            raise InvalidParameterError(
                f"resolution must be an integer, got {self.resolution!r}"
            )
        object.__setattr__(self, "resolution", int(self.resolution))
        object.__setattr__(self, "size", float(self.size))
        require_positive("resolution", self.resolution)
        require_positive("size", self.size)

    @property
    def side(self) -> int:
        """Vertices per side."""
        return self.resolution + 1

    @property
    def vertex_count(self) -> int:
        return self.side * self.side

    @property
    def triangle_count(self) -> int:
        return 2 * self.resolution * self.resolution

    @cached_property
    def fractions(self) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
        """Per-vertex (x/R, z/R) as (side, side) arrays indexed [z, x]."""
        steps = np.arange(self.side, dtype=np.float64) / self.resolution
        fz, fx = np.meshgrid(steps, steps, indexing="ij")
        return fx, fz

    @cached_property
    def world_xz(self) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
        """World X and Z of every vertex as (side, side) arrays indexed [z, x]."""
        fx, fz = self.fractions
        return (fx - 0.5) * self.size, (fz - 0.5) * self.size

    def uvs(self, repeat: float = 1.0) -> NDArray[np.float32]:
        """Texture coordinates, tiled ``repeat`` times across the grid."""
        fx, fz = self.fractions
        return (np.stack([fx.ravel(), fz.ravel()], axis=1) * repeat).astype(np.float32)

    def positions(self, heights: NDArray[np.float64]) -> NDArray[np.float64]:
        """Vertex positions for a (side, side) height grid."""
        wx, wz = self.world_xz
        return np.stack([wx.ravel(), np.ravel(heights), wz.ravel()], axis=1)

    @cached_property
    def indices(self) -> NDArray[np.uint32]:
        """Flat triangle index buffer, six indices per cell."""
        r = self.resolution
        z, x = np.meshgrid(np.arange(r), np.arange(r), indexing="ij")
        i0 = (z * self.side + x).ravel()
        i1 = i0 + 1
        i2 = i0 + self.side
        i3 = i2 + 1

        cells = np.stack([i0, i2, i1, i1, i2, i3], axis=1)
        flat = cells.ravel().astype(np.uint32)
        flat.flags.writeable = False
        return flat

    def grid_coords(self, world_x: float, world_z: float) -> tuple[float, float]:
        """Fractional grid indices of a world position."""
        return (
            (world_x / self.size + 0.5) * self.resolution,
            (world_z / self.size + 0.5) * self.resolution,
        )


def compute_vertex_normals(
    positions: NDArray[np.float64],
    indices: NDArray[np.uint32],
) -> NDArray[np.float64]:
    """Area-weighted vertex normals.

    Accumulates each triangle's unnormalized face normal onto its three
    vertices, then normalizes. Vertices whose accumulated normal is shorter
    than ``NORMAL_EPSILON`` get the up vector.

    Args:
        positions: (N, 3) vertex positions.
        indices: Flat triangle index buffer.

    Returns:
        (N, 3) unit normals.
    """
    triangles = np.asarray(indices, dtype=np.int64).reshape(-1, 3)
    p0 = positions[triangles[:, 0]]
    p1 = positions[triangles[:, 1]]
    p2 = positions[triangles[:, 2]]
    face_normals = np.cross(p1 - p0, p2 - p0)

    accumulated = np.zeros_like(positions, dtype=np.float64)
    for corner in range(3):
        np.add.at(accumulated, triangles[:, corner], face_normals)

    length = np.linalg.norm(accumulated, axis=1, keepdims=True)
    degenerate = length[:, 0] < NORMAL_EPSILON
    normals = accumulated / np.where(degenerate[:, None], 1.0, length)
    normals[degenerate] = UP
    return normals


def bilinear(h00: float, h10: float, h01: float, h11: float, tx: float, tz: float) -> float:
    """Bilinear blend of four corner values at fractional offsets (tx, tz)."""
    bottom = h00 * (1.0 - tx) + h10 * tx
    top = h01 * (1.0 - tx) + h11 * tx
    return bottom * (1.0 - tz) + top * tz


@dataclass(frozen=True, eq=False)
class MeshSnapshot:
    """Immutable vertex/index buffers handed to a renderer.

    Arrays are float32 (uint32 for indices) and read-only.
    """

    positions: NDArray[np.float32]
    normals: NDArray[np.float32]
    uvs: NDArray[np.float32]
    indices: NDArray[np.uint32]

    @classmethod
    def build(
        cls,
        positions: NDArray,
        normals: NDArray,
        uvs: NDArray,
        indices: NDArray,
    ) -> "MeshSnapshot":
        """Copy buffers into read-only GPU-ready arrays and check invariants.

        Raises:
            ValueError: If buffer lengths disagree or an index is out of range.
        """
        arrays = (
            np.array(positions, dtype=np.float32),
            np.array(normals, dtype=np.float32),
            np.array(uvs, dtype=np.float32),
            np.array(indices, dtype=np.uint32),
        )
        for array in arrays:
            array.flags.writeable = False

        snapshot = cls(*arrays)
        snapshot.validate()
        return snapshot

    @property
    def vertex_count(self) -> int:
        return len(self.positions)

    @property
    def triangle_count(self) -> int:
        return len(self.indices) // 3

    @property
    def triangles(self) -> NDArray[np.uint32]:
        """Index buffer viewed as (T, 3)."""
        return self.indices.reshape(-1, 3)

    @property
    def heights(self) -> NDArray[np.float32]:
        return self.positions[:, 1]

    def validate(self) -> None:
        """Check buffer invariants.

        Raises:
            ValueError: If any invariant is violated.
        """
        n = len(self.positions)
        if len(self.normals) != n:
            raise ValueError(f"Expected {n} normals, got {len(self.normals)}")
        if len(self.uvs) != n:
            raise ValueError(f"Expected {n} UVs, got {len(self.uvs)}")
        if len(self.indices) % 3 != 0:
            raise ValueError("Index buffer length must be a multiple of 3")
        if len(self.indices) and int(self.indices.max()) >= n:
            raise ValueError("Index buffer references a missing vertex")
