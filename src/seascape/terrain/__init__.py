"""Procedural island terrain.

Perlin noise, fractal relief functions, the island mask and the heightfield
mesh built from them.
"""

from .fractal import VoronoiCellSet, canyon, erosion_filter, fbm, plateaus, ridged, voronoi
from .heightfield import Terrain
from .island import coastline_variation, final_height, island_mask
from .noise import PermutationTable, get_permutation_table, perlin, reseed
from .variants import NoiseContext, TerrainVariant, get_variant, register_variant

__all__ = [
    "NoiseContext",
    "PermutationTable",
    "Terrain",
    "TerrainVariant",
    "VoronoiCellSet",
    "canyon",
    "coastline_variation",
    "erosion_filter",
    "fbm",
    "final_height",
    "get_permutation_table",
    "get_variant",
    "island_mask",
    "perlin",
    "plateaus",
    "register_variant",
    "reseed",
    "ridged",
    "voronoi",
]
