"""Mesh persistence: save and load surface buffers."""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
import structlog

from .mesh import MeshSnapshot

if TYPE_CHECKING:
    from .scene import IslandScene

logger = structlog.get_logger()

FORMAT_VERSION = 1
_ARRAYS = ("positions", "normals", "uvs", "indices")


def _prefixed(prefix: str, mesh: MeshSnapshot) -> dict[str, np.ndarray]:
    return {f"{prefix}{name}": getattr(mesh, name) for name in _ARRAYS}


def _encode(metadata: dict) -> np.ndarray:
    return np.frombuffer(json.dumps(metadata).encode("utf-8"), dtype=np.uint8)


def _decode(data) -> dict:
    if "metadata" not in data:
        return {}
    return json.loads(data["metadata"].tobytes().decode("utf-8"))


def save_mesh(path: Path, mesh: MeshSnapshot, **metadata) -> None:
    """Save one mesh to disk.

    Uses numpy's compressed .npz format.

    Args:
        path: Output path (should end with .npz).
        mesh: Mesh buffers to store.
        **metadata: Extra JSON-serializable fields stored with the mesh.
    """
    info = {
        "version": FORMAT_VERSION,
        "vertex_count": mesh.vertex_count,
        "triangle_count": mesh.triangle_count,
        "saved_at": datetime.now(timezone.utc).isoformat(),
        **metadata,
    }

    np.savez_compressed(path, metadata=_encode(info), **_prefixed("", mesh))

    logger.info(
        "mesh_saved",
        path=str(path),
        vertices=mesh.vertex_count,
        size_kb=round(path.stat().st_size / 1024, 1),
    )


def load_mesh(path: Path, prefix: str = "") -> tuple[MeshSnapshot, dict]:
    """Load a mesh from disk.

    Args:
        path: Path to .npz file.
        prefix: Array name prefix, e.g. ``"terrain_"`` for scene files.

    Returns:
        Tuple of (mesh, metadata dict).

    Raises:
        FileNotFoundError: If file doesn't exist.
        ValueError: If arrays are missing or inconsistent.
    """
    if not path.exists():
        raise FileNotFoundError(f"Mesh file not found: {path}")

    with np.load(path) as data:
        missing = [name for name in _ARRAYS if f"{prefix}{name}" not in data]
        if missing:
            raise ValueError(f"Invalid mesh file: missing {', '.join(missing)}")

        mesh = MeshSnapshot.build(*(data[f"{prefix}{name}"] for name in _ARRAYS))
        metadata = _decode(data)

    logger.info("mesh_loaded", path=str(path), vertices=mesh.vertex_count)
    return mesh, metadata


def save_scene(path: Path, scene: "IslandScene") -> None:
    """Save the terrain and the current ocean frame into one file.

    Arrays are stored as ``terrain_*`` and ``ocean_*``; the metadata records
    the configuration and the ocean time so the frame can be reproduced.
    """
    info = {
        "version": FORMAT_VERSION,
        "config": scene.config.model_dump(mode="json"),
        "ocean_time": scene.ocean.time,
        "frame": scene.frame,
        "saved_at": datetime.now(timezone.utc).isoformat(),
    }

    np.savez_compressed(
        path,
        metadata=_encode(info),
        **_prefixed("terrain_", scene.terrain.mesh),
        **_prefixed("ocean_", scene.ocean.mesh),
    )

    logger.info(
        "scene_saved",
        path=str(path),
        size_kb=round(path.stat().st_size / 1024, 1),
    )
