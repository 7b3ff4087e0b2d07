"""Render hand-off: mesh snapshot plus the uniforms to draw it with."""

from dataclasses import dataclass, field
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .mesh import MeshSnapshot
from .resources import RenderProgram


def as_matrix(value: ArrayLike | None) -> NDArray[np.float32]:
    """Coerce a 4x4 matrix, defaulting to identity.

    Raises:
        ValueError: If the value is not 4x4.
    """
    if value is None:
        return np.eye(4, dtype=np.float32)
    matrix = np.asarray(value, dtype=np.float32)
    if matrix.shape != (4, 4):
        raise ValueError(f"Expected a 4x4 matrix, got shape {matrix.shape}")
    return matrix


@dataclass(frozen=True, eq=False)
class RenderPacket:
    """Everything a renderer needs to draw one surface for one frame."""

    mesh: MeshSnapshot
    program: RenderProgram
    uniforms: dict[str, Any] = field(default_factory=dict)
    blend: bool = False
    depth_write: bool = True


def base_uniforms(
    view: ArrayLike | None,
    projection: ArrayLike | None,
) -> dict[str, Any]:
    """Model/view/projection uniforms with an identity model matrix."""
    return {
        "modelMatrix": as_matrix(None),
        "viewMatrix": as_matrix(view),
        "projectionMatrix": as_matrix(projection),
    }
