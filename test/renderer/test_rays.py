"""Tests for 'RayBundle'."""

import pytest
import torch

from torch_volrender.src.renderer.rays import RayBundle


def test_directions_are_normalized():
    rays = RayBundle(torch.zeros(2, 3), torch.tensor([[2.0, 0.0, 0.0], [0.0, 0.0, 0.0]]))
    assert rays.ray_dir.tolist() == [[1.0, 0.0, 0.0], [0.0, 0.0, 0.0]]


def test_single_origin_is_broadcast():
    rays = RayBundle(torch.tensor([1.0, 2.0, 3.0]), torch.eye(3))
    assert len(rays) == 3
    assert rays.ray_origin.shape == (3, 3)


def test_indexing_and_point_at():
    rays = RayBundle(torch.zeros(3, 3), torch.eye(3))
    subset = rays[torch.tensor([False, True, True])]
    assert len(subset) == 2
    assert subset.point_at(torch.tensor([2.0, 3.0])).tolist() == [
        [0.0, 2.0, 0.0],
        [0.0, 0.0, 3.0],
    ]


def test_invalid_shape():
    with pytest.raises(ValueError):
        RayBundle(torch.zeros(4, 2), torch.zeros(4, 2))
