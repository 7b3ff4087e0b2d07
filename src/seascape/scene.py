"""Island scene: one terrain and one surrounding ocean driven per frame."""

import structlog
from numpy.typing import ArrayLike

from .config import Config
from .ocean.surface import Ocean
from .render import RenderPacket
from .resources import ResourceRegistry
from .terrain.heightfield import Terrain
from .terrain.noise import reseed
from .terrain_types import TerrainType

logger = structlog.get_logger()


class IslandScene:
    """Owns a terrain and an ocean that share one resource registry.

    Reseeds the process-wide permutation table from ``config.noise_seed``
    before building the terrain.
    """

    def __init__(self, config: Config | None = None):
        self.config = config if config is not None else Config()
        self.registry = ResourceRegistry()
        self.frame = 0

        reseed(self.config.noise_seed)

        self.terrain = Terrain.from_config(
            self.config.terrain, resource=self.registry.terrain_program()
        )
        try:
            self.ocean = Ocean.from_config(
                self.config.ocean, resource=self.registry.ocean_program()
            )
        except Exception:
            self.terrain.close()
            raise
        self._closed = False

        logger.info(
            "scene_created",
            noise_seed=self.config.noise_seed,
            terrain_type=self.terrain.terrain_type.value,
            terrain_size=self.terrain.size,
            ocean_size=self.ocean.size,
        )

    def step(self, dt: float) -> None:
        """Advance both surfaces by ``dt`` seconds."""
        self.terrain.update(dt)
        self.ocean.update(dt)
        self.frame += 1

    def switch_terrain(self, terrain_type: "TerrainType | str") -> None:
        self.terrain.set_type(terrain_type)

    def height_at(self, world_x: float, world_z: float) -> float:
        """Surface height seen from above: the higher of land and water.

        Outside the terrain grid only the water counts.
        """
        water = self.ocean.get_height_at(world_x, world_z)
        if not self.terrain.contains(world_x, world_z):
            return water
        return max(self.terrain.get_height_at(world_x, world_z), water)

    def render(
        self,
        view: ArrayLike | None = None,
        projection: ArrayLike | None = None,
    ) -> list[RenderPacket]:
        """Packets in draw order: opaque terrain first, blended ocean last."""
        return [
            self.terrain.render(view, projection),
            self.ocean.render(view, projection),
        ]

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.terrain.close()
        self.ocean.close()
        logger.info("scene_closed", frames=self.frame)

    def __enter__(self) -> "IslandScene":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
