"""Terrain relief types."""

from enum import Enum


class TerrainType(str, Enum):
    """Relief style used for the inland zone of the island."""

    ISLAND = "island"
    RIDGED = "ridged"
    VORONOI = "voronoi"
    CANYON = "canyon"
    PLATEAUS = "plateaus"

    @property
    def uses_cells(self) -> bool:
        """Whether this relief samples the Voronoi cell set."""
        return self in _CELL_TYPES

    @classmethod
    def parse(cls, value: "str | TerrainType") -> "TerrainType":
        """Resolve a type from its value or name, case-insensitively."""
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        for terrain_type in cls:
            if key in (terrain_type.value, terrain_type.name.lower()):
                return terrain_type
        raise ValueError(
            f"Unknown terrain type '{value}'. "
            f"Expected one of: {', '.join(t.value for t in cls)}"
        )


_CELL_TYPES = frozenset({
    TerrainType.VORONOI,
})
