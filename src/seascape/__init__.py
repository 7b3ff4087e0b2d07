"""Procedural island heightfield and animated ocean surfaces."""

from .config import Config, OceanConfig, TerrainConfig, find_config, load_config
from .exceptions import InvalidParameterError, ResourceError, SeascapeError
from .mesh import GridLayout, MeshSnapshot, compute_vertex_normals
from .ocean import Ocean, Wave, WaveBank, initialize_waves
from .persistence import load_mesh, save_mesh, save_scene
from .render import RenderPacket
from .resources import RenderProgram, ResourceRegistry, SharedResource
from .scene import IslandScene
from .terrain import Terrain
from .terrain_types import TerrainType

__all__ = [
    # Surfaces
    "Terrain",
    "Ocean",
    "IslandScene",
    "TerrainType",
    # Waves
    "Wave",
    "WaveBank",
    "initialize_waves",
    # Mesh
    "GridLayout",
    "MeshSnapshot",
    "compute_vertex_normals",
    # Render hand-off
    "RenderPacket",
    "RenderProgram",
    "ResourceRegistry",
    "SharedResource",
    # Config
    "Config",
    "TerrainConfig",
    "OceanConfig",
    "find_config",
    "load_config",
    # Persistence
    "load_mesh",
    "save_mesh",
    "save_scene",
    # Exceptions
    "SeascapeError",
    "InvalidParameterError",
    "ResourceError",
]
