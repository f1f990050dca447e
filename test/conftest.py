"""Shared fixtures of the test suite."""

import pytest
import torch

from torch_volrender.src.query_struct import DenseGrid, SparseGrid
from torch_volrender.src.renderer.rays import RayBundle


@pytest.fixture
def single_voxel_grid():
    """A grid holding one voxel of density 1 at index (0, 0, 0), covering [-0.5, 0.5]^3."""
    return SparseGrid(
        torch.tensor([[0, 0, 0]]),
        torch.tensor([1.0]),
        voxel_size=1.0,
    )


@pytest.fixture
def slab_grid():
    """A 10 x 1 x 1 block of density 0.2 covering x in [-0.5, 9.5]."""
    return DenseGrid(torch.full((10, 1, 1), 0.2, dtype=torch.float64))


@pytest.fixture
def x_ray():
    """A ray travelling along +x through the center of the slab grid."""
    return RayBundle(
        torch.tensor([[-5.0, 0.0, 0.0]], dtype=torch.float64),
        torch.tensor([[1.0, 0.0, 0.0]], dtype=torch.float64),
    )
