"""Tests for mesh persistence."""

from pathlib import Path

import numpy as np
import pytest

from seascape.config import Config
from seascape.persistence import FORMAT_VERSION, load_mesh, save_mesh, save_scene
from seascape.scene import IslandScene
from seascape.terrain.heightfield import Terrain
from seascape.terrain.noise import PermutationTable


class TestSaveLoadMesh:
    """Tests for single-mesh files."""

    def test_round_trip(self, tmp_path: Path, table: PermutationTable) -> None:
        terrain = Terrain(8, 50.0, 10.0, table=table)
        path = tmp_path / "terrain.npz"
        save_mesh(path, terrain.mesh, terrain_type=terrain.terrain_type.value)

        mesh, metadata = load_mesh(path)
        for name in ("positions", "normals", "uvs", "indices"):
            np.testing.assert_array_equal(getattr(mesh, name), getattr(terrain.mesh, name))

        assert metadata["version"] == FORMAT_VERSION
        assert metadata["vertex_count"] == 81
        assert metadata["triangle_count"] == 128
        assert metadata["terrain_type"] == "island"
        assert "saved_at" in metadata

    def test_loaded_mesh_read_only(self, tmp_path: Path, table: PermutationTable) -> None:
        path = tmp_path / "mesh.npz"
        save_mesh(path, Terrain(2, 10.0, 5.0, table=table).mesh)
        mesh, _ = load_mesh(path)
        with pytest.raises(ValueError):
            mesh.positions[0, 0] = 1.0

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_mesh(tmp_path / "missing.npz")

    def test_missing_arrays(self, tmp_path: Path) -> None:
        path = tmp_path / "partial.npz"
        np.savez_compressed(path, positions=np.zeros((3, 3), dtype=np.float32))
        with pytest.raises(ValueError, match="normals"):
            load_mesh(path)

    def test_no_metadata(self, tmp_path: Path) -> None:
        path = tmp_path / "bare.npz"
        np.savez_compressed(
            path,
            positions=np.zeros((3, 3)),
            normals=np.tile([0.0, 1.0, 0.0], (3, 1)),
            uvs=np.zeros((3, 2)),
            indices=np.array([0, 1, 2]),
        )
        mesh, metadata = load_mesh(path)
        assert mesh.triangle_count == 1
        assert metadata == {}


class TestSaveScene:
    """Tests for whole-scene files."""

    def test_both_surfaces_stored(self, tmp_path: Path, small_config: Config) -> None:
        path = tmp_path / "scene.npz"
        with IslandScene(small_config) as scene:
            scene.step(0.5)
            save_scene(path, scene)

            terrain, metadata = load_mesh(path, prefix="terrain_")
            ocean, _ = load_mesh(path, prefix="ocean_")

            np.testing.assert_array_equal(terrain.positions, scene.terrain.mesh.positions)
            np.testing.assert_array_equal(ocean.positions, scene.ocean.mesh.positions)

        assert metadata["ocean_time"] == pytest.approx(0.5)
        assert metadata["frame"] == 1
        assert metadata["config"]["noise_seed"] == small_config.noise_seed
        assert metadata["config"]["terrain"]["terrain_type"] == "island"

    def test_config_reloads(self, tmp_path: Path, small_config: Config) -> None:
        path = tmp_path / "scene.npz"
        with IslandScene(small_config) as scene:
            save_scene(path, scene)
        _, metadata = load_mesh(path, prefix="terrain_")
        assert Config.model_validate(metadata["config"]) == small_config
