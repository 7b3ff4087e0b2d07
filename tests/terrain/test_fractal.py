"""Tests for fractal height functions."""

import numpy as np
import pytest

from seascape.terrain.fractal import (
    VORONOI_CELL_COUNT,
    VoronoiCellSet,
    canyon,
    compute_slope,
    erosion_filter,
    fbm,
    plateaus,
    ridged,
    voronoi,
)
from seascape.terrain.noise import PermutationTable


@pytest.fixture
def grid() -> tuple[np.ndarray, np.ndarray]:
    """64x64 sample points spanning a few noise cells."""
    steps = np.linspace(-4.0, 4.0, 64)
    return np.meshgrid(steps, steps)


class TestFbm:
    """Tests for fractal Brownian motion."""

    def test_output_shape(self, grid, table: PermutationTable) -> None:
        x, z = grid
        assert fbm(x, z, table=table).shape == (64, 64)

    def test_deterministic(self, grid, table: PermutationTable) -> None:
        x, z = grid
        np.testing.assert_array_equal(fbm(x, z, table=table), fbm(x, z, table=table))

    def test_bounded_by_amplitude_sum(self, grid, table: PermutationTable) -> None:
        """Amplitudes 0.5 + 0.25 + ... stay below 1."""
        x, z = grid
        result = fbm(x, z, octaves=6, table=table)
        assert np.abs(result).max() < 1.0

    def test_zero_octaves(self, grid, table: PermutationTable) -> None:
        x, z = grid
        np.testing.assert_array_equal(fbm(x, z, octaves=0, table=table), 0.0)

    def test_more_octaves_more_detail(self, grid, table: PermutationTable) -> None:
        """More octaves adds higher frequency variation."""
        x, z = grid
        low = fbm(x, z, octaves=1, table=table)
        high = fbm(x, z, octaves=6, table=table)
        grad_low = np.abs(np.diff(low, axis=0)).mean()
        grad_high = np.abs(np.diff(high, axis=0)).mean()
        assert grad_high > grad_low

    def test_frequency_scales_input(self, table: PermutationTable) -> None:
        """Doubling frequency equals sampling at doubled coordinates."""
        x = np.linspace(0.1, 3.0, 30)
        np.testing.assert_allclose(
            fbm(x, x, 3, frequency=2.0, table=table),
            fbm(x * 2.0, x * 2.0, 3, frequency=1.0, table=table),
        )


class TestRidged:
    """Tests for ridged relief."""

    def test_range(self, grid, table: PermutationTable) -> None:
        result = ridged(*grid, table=table)
        assert result.min() >= 0.0
        assert result.max() <= 1.0

    def test_crest_where_fbm_crosses_zero(self, table: PermutationTable) -> None:
        """Ridged noise is 1 at the origin, where every octave vanishes."""
        assert float(ridged(0.0, 0.0, table=table)) == pytest.approx(1.0)


class TestVoronoi:
    """Tests for the Voronoi cell set and cell relief."""

    def test_cell_count_and_bounds(self) -> None:
        cells = VoronoiCellSet(100.0)
        assert len(cells) == VORONOI_CELL_COUNT
        assert cells.points.min() >= 0.0
        assert cells.points.max() <= 100.0

    def test_fixed_seed_reproduces_points(self) -> None:
        np.testing.assert_array_equal(
            VoronoiCellSet(100.0, seed=3).points, VoronoiCellSet(100.0, seed=3).points
        )

    def test_points_read_only(self) -> None:
        cells = VoronoiCellSet(100.0)
        with pytest.raises(ValueError):
            cells.points[0, 0] = 1.0

    def test_peak_at_cell_center(self) -> None:
        cells = VoronoiCellSet(100.0)
        cx, cz = cells.points[0]
        assert float(voronoi(cx, cz, cells)) == pytest.approx(1.0)

    def test_zero_far_from_cells(self) -> None:
        cells = VoronoiCellSet(100.0)
        assert float(voronoi(-500.0, -500.0, cells)) == 0.0

    def test_range(self) -> None:
        cells = VoronoiCellSet(50.0)
        steps = np.linspace(0.0, 50.0, 40)
        x, z = np.meshgrid(steps, steps)
        result = voronoi(x, z, cells)
        assert result.shape == (40, 40)
        assert result.min() >= 0.0
        assert result.max() <= 1.0

    def test_nearest_distance(self) -> None:
        cells = VoronoiCellSet(10.0, count=1, seed=0)
        px, pz = cells.points[0]
        assert float(cells.nearest_distance(px + 3.0, pz + 4.0)) == pytest.approx(5.0)


class TestCanyonAndPlateaus:
    """Tests for canyon and plateau relief."""

    def test_canyon_range(self, grid, table: PermutationTable) -> None:
        result = canyon(*grid, table=table)
        assert result.min() >= 0.0
        assert result.max() <= 1.0

    def test_canyon_has_relief(self, grid, table: PermutationTable) -> None:
        assert canyon(*grid, table=table).std() > 0.01

    def test_plateaus_range(self, grid, table: PermutationTable) -> None:
        result = plateaus(*grid, table=table)
        assert result.min() >= 0.0
        assert result.max() <= 1.0

    def test_plateaus_cluster_on_levels(self, grid, table: PermutationTable) -> None:
        """Most samples sit near one of the quantized levels."""
        result = plateaus(*grid, table=table, steps=5)
        levels = np.linspace(0.0, 1.0, 5)
        offset = np.abs(result[..., None] - levels).min(axis=-1)
        assert np.median(offset) < 0.05


class TestErosionFilter:
    """Tests for slope-based erosion."""

    def test_flat_slope_unchanged(self) -> None:
        height = np.array([1.0, 5.0, 10.0])
        np.testing.assert_array_equal(erosion_filter(height, np.zeros(3)), height)

    def test_steep_slope_full_strength(self) -> None:
        result = erosion_filter(np.array([10.0]), np.array([3.0]), strength=0.2)
        assert result[0] == pytest.approx(8.0)

    def test_underwater_untouched(self) -> None:
        height = np.array([-5.0, 0.0])
        np.testing.assert_array_equal(erosion_filter(height, np.full(2, 5.0)), height)

    def test_zero_strength_is_identity(self) -> None:
        height = np.array([3.0, 7.0])
        np.testing.assert_array_equal(
            erosion_filter(height, np.full(2, 5.0), strength=0.0), height
        )

    def test_never_raises_terrain(self) -> None:
        rng = np.random.default_rng(1)
        height = rng.uniform(-10, 20, 100)
        slope = rng.uniform(0, 3, 100)
        assert np.all(erosion_filter(height, slope) <= height)


class TestComputeSlope:
    """Tests for slope magnitude."""

    def test_flat_is_zero(self) -> None:
        np.testing.assert_array_equal(compute_slope(np.zeros((4, 4))), 0.0)

    def test_constant_gradient(self) -> None:
        """A plane rising 2 units per sample along X has slope 2."""
        elevation = np.tile(np.arange(5) * 2.0, (5, 1))
        np.testing.assert_allclose(compute_slope(elevation), 2.0)

    def test_spacing(self) -> None:
        elevation = np.tile(np.arange(5) * 2.0, (5, 1))
        np.testing.assert_allclose(compute_slope(elevation, spacing=4.0), 0.5)
