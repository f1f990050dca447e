"""Tests for grid statistics and the heat-map slice."""

import numpy as np
import pytest
import torch

from torch_volrender.src.query_struct import SparseGrid
from torch_volrender.src.utils.grid_stats import (
    grid_statistics,
    save_slice,
    slice_pixels,
    value_to_color,
)
from torch_volrender.src.utils.image import read_ppm


@pytest.fixture
def density_grid():
    return SparseGrid(
        torch.tensor([[0, 0, 0], [2, 1, 0], [1, 0, 2], [0, 1, 1]]),
        torch.tensor([0.0, 4.0, 2.0, 1.0]),
        voxel_size=0.5,
        name="density",
        grid_class="fog volume",
    )


class TestValueToColor:
    def test_ramp(self):
        values = torch.tensor([0.0, 0.25, 0.5, 1.0])
        colors = value_to_color(values, 0.0, 1.0)
        assert colors.dtype == np.uint8
        assert colors.tolist() == [[0, 0, 0], [0, 0, 255], [0, 255, 0], [255, 255, 255]]

    def test_out_of_range_is_clamped(self):
        colors = value_to_color(torch.tensor([-5.0, 5.0]), 0.0, 1.0)
        assert colors.tolist() == [[0, 0, 0], [255, 255, 255]]

    def test_constant_grid(self):
        colors = value_to_color(torch.tensor([3.0, 3.0]), 3.0, 3.0)
        assert colors.tolist() == [[0, 0, 0], [0, 0, 0]]


class TestGridStatistics:
    def test_scalar_grid(self, density_grid):
        stats = grid_statistics(density_grid)
        assert stats["name"] == "density"
        assert stats["grid_class"] == "fog volume"
        assert stats["value_type"] == "float"
        assert stats["active_voxel_count"] == 4
        assert stats["index_min"] == [0, 0, 0]
        assert stats["index_max"] == [2, 1, 2]
        assert stats["world_max"] == pytest.approx([1.0, 0.5, 1.0])
        assert stats["origin_index"] == [0, 0, 0]
        assert stats["origin_value"] == 0.0
        assert stats["min_value"] == 0.0
        assert stats["max_value"] == 4.0

    def test_vector_grid(self):
        grid = SparseGrid(
            torch.tensor([[0, 0, 0], [1, 0, 0]]),
            torch.tensor([[1.0, -2.0, 0.0], [3.0, 0.0, -1.0]]),
            name="velocity",
        )
        stats = grid_statistics(grid)
        assert stats["value_type"] == "vec3f"
        assert stats["min_value"] == [1.0, -2.0, -1.0]
        assert stats["max_value"] == [3.0, 0.0, 0.0]
        assert stats["origin_value"] == [1.0, -2.0, 0.0]


class TestSlice:
    def test_middle_slice(self, density_grid):
        pixels = slice_pixels(density_grid, 0.0, 4.0)
        # x in [0, 2], y in [0, 1], z = 1
        assert pixels.shape == (2, 3, 3)
        assert pixels[1, 0].tolist() == [0, 0, 255]  # voxel (0, 1, 1) holds 1.0
        assert pixels[0, 0].tolist() == [0, 0, 0]

    def test_save_slice(self, density_grid, tmp_path):
        filename = str(tmp_path / "density_slice.ppm")
        assert save_slice(density_grid, filename, 0.0, 4.0)
        width, height, _, pixels = read_ppm(filename)
        assert (width, height) == (3, 2)
        assert np.array_equal(pixels, slice_pixels(density_grid, 0.0, 4.0))

    def test_save_slice_failure(self, density_grid, tmp_path):
        assert not save_slice(density_grid, str(tmp_path / "no" / "slice.ppm"), 0.0, 4.0)

    def test_vector_grid_has_no_slice(self):
        grid = SparseGrid(torch.tensor([[0, 0, 0]]), torch.tensor([[1.0, 1.0, 1.0]]))
        with pytest.raises(ValueError):
            slice_pixels(grid, 0.0, 1.0)
