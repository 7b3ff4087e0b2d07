"""Island heightfield mesh builder."""

import math
from typing import Callable

import numpy as np
import structlog
from numpy.typing import ArrayLike, NDArray

from ..config import TerrainConfig
from ..exceptions import InvalidParameterError
from ..mesh import (
    GridLayout,
    MeshSnapshot,
    bilinear,
    compute_vertex_normals,
    require_finite,
    require_positive,
)
from ..render import RenderPacket, base_uniforms
from ..resources import TERRAIN_UNIFORMS, RenderProgram, SharedResource
from ..terrain_types import TerrainType
from .fractal import VORONOI_SEED, VoronoiCellSet, compute_slope, erosion_filter
from .island import final_height
from .noise import PermutationTable
from .variants import NoiseContext, get_variant

logger = structlog.get_logger()

RebuildListener = Callable[[MeshSnapshot], None]


def _parse_type(value: "str | TerrainType") -> TerrainType:
    try:
        return TerrainType.parse(value)
    except ValueError as e:
        raise InvalidParameterError(str(e)) from e


class Terrain:
    """Static island surface, rebuilt in full whenever a parameter changes.

    The mesh is built on construction. Every setter regenerates the grid,
    recomputes normals and publishes a fresh ``MeshSnapshot`` to rebuild
    listeners; ``set_type`` with the current type does nothing.
    """

    def __init__(
        self,
        resolution: int = 128,
        size: float = 100.0,
        max_height: float = 20.0,
        terrain_type: "TerrainType | str" = TerrainType.ISLAND,
        *,
        noise_frequency: float = 1.0,
        erosion_strength: float = 0.15,
        voronoi_seed: int = VORONOI_SEED,
        table: PermutationTable | None = None,
        resource: SharedResource[RenderProgram] | None = None,
    ):
        """Initialize and build the terrain.

        Args:
            resolution: Grid cells per side (> 0).
            size: World units per side (> 0).
            max_height: Maximum elevation.
            terrain_type: Inland relief style.
            noise_frequency: Starting fBm frequency (> 0).
            erosion_strength: Slope-based attenuation in [0, 1]; 0 disables.
            voronoi_seed: Seed for this instance's Voronoi cell set.
            table: Permutation table; the process-wide table when omitted.
            resource: Shared program resource; a private one when omitted.

        Raises:
            InvalidParameterError: If a parameter is outside its domain.
        """
        self.layout = GridLayout(resolution, size)
        require_finite("max_height", max_height)
        require_positive("noise_frequency", noise_frequency)
        if not 0.0 <= erosion_strength <= 1.0:
            raise InvalidParameterError(
                f"erosion_strength must be in [0, 1], got {erosion_strength!r}"
            )

        self.max_height = float(max_height)
        self.noise_frequency = float(noise_frequency)
        self.erosion_strength = float(erosion_strength)
        self.terrain_type = _parse_type(terrain_type)

        self._table = table
        self._voronoi_seed = voronoi_seed
        self._cells: VoronoiCellSet | None = None

        if resource is None:
            resource = SharedResource(
                "terrain",
                lambda: RenderProgram(name="terrain", uniforms=TERRAIN_UNIFORMS),
            )
        self._resource = resource
        self._program = self._resource.acquire()
        self._closed = False

        self._listeners: list[RebuildListener] = []
        self._uvs = self.layout.uvs()
        self._heights: NDArray[np.float64] | None = None
        self._positions: NDArray[np.float64] | None = None
        self._normals: NDArray[np.float64] | None = None
        self._mesh: MeshSnapshot | None = None
        self.revision = 0

        try:
            self.regenerate()
        except Exception:
            self.close()
            raise

    @classmethod
    def from_config(
        cls,
        config: TerrainConfig,
        table: PermutationTable | None = None,
        resource: SharedResource[RenderProgram] | None = None,
    ) -> "Terrain":
        """Build a terrain from a validated ``TerrainConfig``."""
        return cls(
            config.resolution,
            config.size,
            config.max_height,
            config.terrain_type,
            noise_frequency=config.noise_frequency,
            erosion_strength=config.erosion_strength,
            voronoi_seed=config.voronoi_seed,
            table=table,
            resource=resource,
        )

    @property
    def resolution(self) -> int:
        return self.layout.resolution

    @property
    def size(self) -> float:
        return self.layout.size

    @property
    def built(self) -> bool:
        return self._mesh is not None

    @property
    def mesh(self) -> MeshSnapshot:
        """Current vertex/index buffers."""
        return self._mesh

    @property
    def heights(self) -> NDArray[np.float64]:
        """Elevation grid as a (R+1, R+1) array indexed [z, x]."""
        view = self._heights.view()
        view.flags.writeable = False
        return view

    @property
    def cells(self) -> VoronoiCellSet:
        """This instance's Voronoi cell set, drawn on first use."""
        if self._cells is None:
            self._cells = VoronoiCellSet(self.size, seed=self._voronoi_seed)
        return self._cells

    def noise_context(self) -> NoiseContext:
        """Noise parameters for the current state."""
        return NoiseContext(
            size=self.size,
            frequency=self.noise_frequency,
            table=self._table,
            cells=self.cells if self.terrain_type.uses_cells else None,
        )

    def final_height(self, x: ArrayLike, z: ArrayLike) -> NDArray[np.float64]:
        """Island elevation at world (x, z) for the current parameters."""
        return final_height(
            x,
            z,
            get_variant(self.terrain_type),
            self.noise_context(),
            self.max_height,
        )

    # --- Mesh generation ---

    def generate_grid(self) -> None:
        """Evaluate the elevation function at every lattice point."""
        wx, wz = self.layout.world_xz
        heights = self.final_height(wx, wz)

        if self.erosion_strength > 0.0:
            spacing = self.size / self.resolution
            heights = erosion_filter(
                heights, compute_slope(heights, spacing), self.erosion_strength
            )

        self._heights = heights
        self._positions = self.layout.positions(heights)

    def compute_normals(self) -> None:
        """Accumulate face normals onto vertices and normalize."""
        self._normals = compute_vertex_normals(self._positions, self.layout.indices)

    def regenerate(self) -> None:
        """Rebuild grid, normals and buffers from the current parameters."""
        self.generate_grid()
        self.compute_normals()
        self._refresh_buffers()
        logger.info(
            "terrain_regenerated",
            terrain_type=self.terrain_type.value,
            resolution=self.resolution,
            max_height=self.max_height,
            noise_frequency=self.noise_frequency,
            revision=self.revision,
        )

    def _refresh_buffers(self) -> None:
        self._mesh = MeshSnapshot.build(
            self._positions, self._normals, self._uvs, self.layout.indices
        )
        self.revision += 1
        for listener in list(self._listeners):
            listener(self._mesh)

    def add_rebuild_listener(self, listener: RebuildListener) -> None:
        """Call ``listener`` with each newly published mesh."""
        self._listeners.append(listener)

    def remove_rebuild_listener(self, listener: RebuildListener) -> None:
        self._listeners.remove(listener)

    # --- Parameter setters ---

    def set_type(self, terrain_type: "TerrainType | str") -> None:
        """Switch relief style; a no-op when the type is unchanged."""
        new_type = _parse_type(terrain_type)
        if new_type == self.terrain_type:
            logger.debug("terrain_type_unchanged", terrain_type=new_type.value)
            return
        self.terrain_type = new_type
        self.regenerate()

    def set_height_scale(self, max_height: float) -> None:
        require_finite("max_height", max_height)
        self.max_height = float(max_height)
        self.regenerate()

    def set_noise_frequency(self, frequency: float) -> None:
        require_positive("noise_frequency", frequency)
        self.noise_frequency = float(frequency)
        self.regenerate()

    # --- Queries ---

    def contains(self, world_x: float, world_z: float) -> bool:
        """Whether ``get_height_at`` samples the grid at this position."""
        if not (math.isfinite(world_x) and math.isfinite(world_z)):
            return False
        r = self.resolution
        gx, gz = self.layout.grid_coords(world_x, world_z)
        return 0 <= gx < r and 0 <= gz < r

    def get_height_at(self, world_x: float, world_z: float) -> float:
        """Bilinearly interpolated elevation at a world position.

        Returns 0.0 outside the grid or for non-finite coordinates; use
        ``contains`` to tell that apart from sea-level land.
        """
        if not self.contains(world_x, world_z):
            return 0.0

        r = self.resolution
        gx, gz = self.layout.grid_coords(world_x, world_z)
        x0, z0 = int(gx), int(gz)
        x1, z1 = min(x0 + 1, r - 1), min(z0 + 1, r - 1)
        tx, tz = gx - x0, gz - z0

        h = self._heights
        return float(
            bilinear(h[z0, x0], h[z0, x1], h[z1, x0], h[z1, x1], tx, tz)
        )

    # --- Frame and render hand-off ---

    def update(self, dt: float) -> None:
        """Advance animation; the island is static."""

    def render(
        self,
        view: ArrayLike | None = None,
        projection: ArrayLike | None = None,
    ) -> RenderPacket:
        """Package the current mesh and matrices for the renderer."""
        return RenderPacket(
            mesh=self.mesh,
            program=self._program,
            uniforms=base_uniforms(view, projection),
        )

    def close(self) -> None:
        """Release the shared program resource."""
        if self._closed:
            return
        self._closed = True
        self._resource.release()

    def __enter__(self) -> "Terrain":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
