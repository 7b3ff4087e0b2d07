"""Animated ocean surface mesh."""

import math

import numpy as np
import structlog
from numpy.typing import ArrayLike, NDArray

from ..config import OceanConfig
from ..exceptions import InvalidParameterError
from ..mesh import GridLayout, MeshSnapshot, require_finite
from ..render import RenderPacket, base_uniforms
from ..resources import OCEAN_UNIFORMS, RenderProgram, SharedResource
from .waves import DEFAULT_WAVE_SEED, WaveBank, initialize_waves

logger = structlog.get_logger()

Color = tuple[float, float, float]


def _color(name: str, value: ArrayLike) -> Color:
    rgb = np.asarray(value, dtype=np.float64).ravel()
    if rgb.shape != (3,) or not np.isfinite(rgb).all():
        raise InvalidParameterError(f"{name} must be three finite floats, got {value!r}")
    return float(rgb[0]), float(rgb[1]), float(rgb[2])


def _alpha(value: float) -> float:
    if not (math.isfinite(value) and 0.0 <= value <= 1.0):
        raise InvalidParameterError(f"transparency must be in [0, 1], got {value!r}")
    return float(value)


class Ocean:
    """Flat grid displaced every frame by a fixed wave bank.

    Grid topology, UVs and the wave bank never change after construction;
    ``update`` recomputes every vertex height and normal.
    """

    def __init__(
        self,
        size: float = 200.0,
        resolution: int = 256,
        wave_height: float = 2.0,
        *,
        wave_speed: float = 1.0,
        wave_frequency: float = 1.0,
        waves: WaveBank | None = None,
        seed: int = DEFAULT_WAVE_SEED,
        uv_repeat: float = 10.0,
        water_color: ArrayLike = (0.1, 0.3, 0.5),
        foam_color: ArrayLike = (0.9, 0.95, 1.0),
        transparency: float = 0.7,
        resource: SharedResource[RenderProgram] | None = None,
    ):
        """Initialize the ocean at time zero.

        Args:
            size: World units per side (> 0).
            resolution: Grid cells per side (> 0).
            wave_height: Global amplitude multiplier.
            wave_speed: Global phase speed multiplier.
            wave_frequency: Time multiplier applied on each update.
            waves: Custom wave bank; the standard bank from ``seed`` if omitted.
            seed: Seed for the standard bank's detail waves.
            uv_repeat: Texture tiling across the grid.
            water_color: Base water RGB.
            foam_color: Foam RGB.
            transparency: Surface alpha in [0, 1].
            resource: Shared program resource; a private one when omitted.

        Raises:
            InvalidParameterError: If a parameter is outside its domain.
                Nothing is acquired from ``resource`` in that case.
        """
        self.layout = GridLayout(resolution, size)
        for name, value in (
            ("wave_height", wave_height),
            ("wave_speed", wave_speed),
            ("wave_frequency", wave_frequency),
        ):
            require_finite(name, value)

        self.wave_height = float(wave_height)
        self.wave_speed = float(wave_speed)
        self.wave_frequency = float(wave_frequency)
        self.time = 0.0

        self.waves = waves if waves is not None else initialize_waves(seed)

        self.water_color = _color("water_color", water_color)
        self.foam_color = _color("foam_color", foam_color)
        self.transparency = _alpha(transparency)

        if resource is None:
            resource = SharedResource(
                "ocean",
                lambda: RenderProgram(name="ocean", uniforms=OCEAN_UNIFORMS),
            )
        self._resource = resource
        self._program = self._resource.acquire()
        self._closed = False

        try:
            self._uvs = self.layout.uvs(uv_repeat)
            self._update_mesh()
        except Exception:
            self.close()
            raise

        logger.info(
            "ocean_initialized",
            size=self.size,
            resolution=self.resolution,
            wave_count=len(self.waves),
        )

    @classmethod
    def from_config(
        cls,
        config: OceanConfig,
        resource: SharedResource[RenderProgram] | None = None,
    ) -> "Ocean":
        """Build an ocean from a validated ``OceanConfig``."""
        return cls(
            config.size,
            config.resolution,
            config.wave_height,
            wave_speed=config.wave_speed,
            wave_frequency=config.wave_frequency,
            seed=config.wave_seed,
            uv_repeat=config.uv_repeat,
            water_color=config.water_color,
            foam_color=config.foam_color,
            transparency=config.transparency,
            resource=resource,
        )

    @property
    def size(self) -> float:
        return self.layout.size

    @property
    def resolution(self) -> int:
        return self.layout.resolution

    @property
    def mesh(self) -> MeshSnapshot:
        """Vertex/index buffers for the current time."""
        return self._mesh

    # --- Wave evaluation ---

    def gerstner_wave_height(self, x: ArrayLike, z: ArrayLike, t: float) -> NDArray[np.float64]:
        return self.waves.height(x, z, t, self.wave_height, self.wave_speed)

    def gerstner_wave_normal(self, x: ArrayLike, z: ArrayLike, t: float) -> NDArray[np.float64]:
        return self.waves.normal(x, z, t, self.wave_height, self.wave_speed)

    def get_height_at(self, world_x: float, world_z: float, t: float | None = None) -> float:
        """Instantaneous analytic height, at the current time unless ``t`` is given.

        Returns 0.0 for non-finite input.
        """
        if t is None:
            t = self.time
        if not (math.isfinite(world_x) and math.isfinite(world_z) and math.isfinite(t)):
            return 0.0
        return float(self.gerstner_wave_height(world_x, world_z, t))

    # --- Per-frame update ---

    def update(self, dt: float) -> None:
        """Advance time by ``dt * wave_frequency`` and displace every vertex."""
        require_finite("dt", dt)
        self.time += dt * self.wave_frequency
        self._update_mesh()

    def _update_mesh(self) -> None:
        wx, wz = self.layout.world_xz
        heights = self.gerstner_wave_height(wx, wz, self.time)
        normals = self.gerstner_wave_normal(wx, wz, self.time)

        self._mesh = MeshSnapshot.build(
            self.layout.positions(heights),
            normals.reshape(-1, 3),
            self._uvs,
            self.layout.indices,
        )

    # --- Parameter setters ---

    def set_wave_speed(self, speed: float) -> None:
        require_finite("wave_speed", speed)
        self.wave_speed = float(speed)

    def set_wave_height(self, height: float) -> None:
        require_finite("wave_height", height)
        self.wave_height = float(height)

    def set_wave_frequency(self, frequency: float) -> None:
        require_finite("wave_frequency", frequency)
        self.wave_frequency = float(frequency)

    def set_water_color(self, color: ArrayLike) -> None:
        self.water_color = _color("water_color", color)

    def set_foam_color(self, color: ArrayLike) -> None:
        self.foam_color = _color("foam_color", color)

    def set_transparency(self, alpha: float) -> None:
        self.transparency = _alpha(alpha)

    # --- Render hand-off ---

    def render(
        self,
        view: ArrayLike | None = None,
        projection: ArrayLike | None = None,
    ) -> RenderPacket:
        """Package the mesh, matrices and water appearance for the renderer.

        The ocean is drawn blended with depth writes disabled.
        """
        uniforms = base_uniforms(view, projection)
        uniforms.update(
            waterColor=np.array(self.water_color, dtype=np.float32),
            foamColor=np.array(self.foam_color, dtype=np.float32),
            transparency=self.transparency,
            time=self.time,
        )
        return RenderPacket(
            mesh=self.mesh,
            program=self._program,
            uniforms=uniforms,
            blend=True,
            depth_write=False,
        )

    def close(self) -> None:
        """Release the shared program resource."""
        if self._closed:
            return
        self._closed = True
        self._resource.release()

    def __enter__(self) -> "Ocean":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
