"""Tests for the voxel grids."""

import pytest
import torch

from torch_volrender.src.query_struct import DenseGrid, SparseGrid


class TestSparseGrid:
    def test_lookup(self):
        grid = SparseGrid(
            torch.tensor([[0, 0, 0], [2, 1, 0], [-1, 0, 3]]),
            torch.tensor([1.0, 2.0, 3.0]),
            background=-1.0,
        )
        index = torch.tensor([[2, 1, 0], [-1, 0, 3], [0, 0, 0], [1, 1, 1], [50, 0, 0]])
        assert grid.value_at_index(index).tolist() == [2.0, 3.0, 1.0, -1.0, -1.0]

    def test_lookup_keeps_batch_shape(self, single_voxel_grid):
        pos = torch.zeros(4, 5, 3)
        assert single_voxel_grid.sample_at(pos).shape == (4, 5)

    def test_world_to_index_rounds_to_cell_center(self):
        grid = SparseGrid(torch.tensor([[0, 0, 0]]), torch.tensor([1.0]), voxel_size=0.5)
        pos = torch.tensor([[0.24, 0.0, 0.0], [0.26, 0.0, 0.0], [-0.26, 0.0, 0.0]])
        assert grid.world_to_index(pos).tolist() == [[0, 0, 0], [1, 0, 0], [-1, 0, 0]]

    def test_sample_at(self, single_voxel_grid):
        pos = torch.tensor([[0.4, -0.4, 0.0], [0.6, 0.0, 0.0]])
        assert single_voxel_grid.sample_at(pos).tolist() == [1.0, 0.0]

    def test_non_finite_positions_read_background(self, single_voxel_grid):
        pos = torch.tensor([[float("nan"), 0.0, 0.0], [float("inf"), 0.0, 0.0]])
        assert single_voxel_grid.sample_at(pos).tolist() == [0.0, 0.0]

    def test_bounding_box_covers_voxel_cells(self):
        grid = SparseGrid(
            torch.tensor([[0, 0, 0], [2, 1, 0]]),
            torch.tensor([1.0, 1.0]),
            voxel_size=0.5,
            origin=torch.tensor([1.0, 0.0, 0.0]),
        )
        bbox = grid.bounding_box()
        assert bbox.min_corner.tolist() == pytest.approx([0.75, -0.25, -0.25])
        assert bbox.max_corner.tolist() == pytest.approx([2.25, 0.75, 0.25])

    def test_from_dense(self):
        dense = torch.zeros(4, 3, 2)
        dense[1, 2, 0] = 5.0
        dense[3, 0, 1] = 0.5
        grid = SparseGrid.from_dense(dense, threshold=0.1)
        assert grid.active_voxel_count == 2
        index_min, index_max = grid.index_bounding_box()
        assert index_min.tolist() == [1, 0, 0]
        assert index_max.tolist() == [3, 2, 1]
        assert grid.value_at_index(torch.tensor([[1, 2, 0]])).tolist() == [5.0]

    def test_vector_values(self):
        grid = SparseGrid(torch.tensor([[0, 0, 0]]), torch.tensor([[1.0, 2.0, 3.0]]))
        assert not grid.is_scalar
        assert grid.value_shape == (3,)
        assert grid.value_at_index(torch.tensor([[0, 0, 0], [1, 0, 0]])).tolist() == [
            [1.0, 2.0, 3.0],
            [0.0, 0.0, 0.0],
        ]

    def test_memory_usage(self, single_voxel_grid):
        assert single_voxel_grid.memory_usage > 0

    def test_empty_grid(self):
        with pytest.raises(ValueError):
            SparseGrid(torch.zeros(0, 3, dtype=torch.long), torch.zeros(0))

    def test_duplicate_coordinates(self):
        with pytest.raises(ValueError):
            SparseGrid(torch.tensor([[0, 0, 0], [0, 0, 0]]), torch.tensor([1.0, 2.0]))

    def test_mismatched_values(self):
        with pytest.raises(ValueError):
            SparseGrid(torch.tensor([[0, 0, 0]]), torch.tensor([1.0, 2.0]))

    def test_float_coordinates(self):
        with pytest.raises(ValueError):
            SparseGrid(torch.tensor([[0.0, 0.0, 0.0]]), torch.tensor([1.0]))

    def test_invalid_voxel_size(self):
        with pytest.raises(ValueError):
            SparseGrid(torch.tensor([[0, 0, 0]]), torch.tensor([1.0]), voxel_size=0.0)


class TestDenseGrid:
    def test_lookup(self):
        data = torch.arange(24, dtype=torch.float32).reshape(2, 3, 4)
        grid = DenseGrid(data, background=-1.0)
        index = torch.tensor([[1, 2, 3], [0, 0, 0], [2, 0, 0], [0, -1, 0]])
        assert grid.value_at_index(index).tolist() == [23.0, 0.0, -1.0, -1.0]

    def test_bounding_box(self, slab_grid):
        bbox = slab_grid.bounding_box()
        assert bbox.min_corner.tolist() == [-0.5, -0.5, -0.5]
        assert bbox.max_corner.tolist() == [9.5, 0.5, 0.5]

    def test_matches_sparse_grid(self):
        dense = torch.rand(3, 4, 5) + 0.1
        dense_grid = DenseGrid(dense, voxel_size=0.25)
        sparse_grid = SparseGrid.from_dense(dense, voxel_size=0.25)
        pos = torch.rand(100, 3) * 1.5 - 0.2
        assert torch.equal(dense_grid.sample_at(pos), sparse_grid.sample_at(pos))

    def test_invalid_shape(self):
        with pytest.raises(ValueError):
            DenseGrid(torch.zeros(3, 3))
