"""Tests for 'VolumeRenderer'."""

import pytest
import torch

from torch_volrender.src.query_struct import SparseGrid
from torch_volrender.src.renderer.cameras import PinholeCamera
from torch_volrender.src.renderer.integrators import SingleScatteringIntegrator
from torch_volrender.src.renderer.render_config import RenderConfig
from torch_volrender.src.renderer.volume_renderer import VolumeRenderer


@pytest.fixture
def sphere_grid():
    """A ball of radius 3 voxels with density decreasing toward its surface."""
    axis = torch.arange(-3, 4)
    coords = torch.cartesian_prod(axis, axis, axis)
    radius = torch.linalg.vector_norm(coords.float(), dim=-1)
    inside = radius <= 3.0
    return SparseGrid(coords[inside], (3.5 - radius[inside]) * 0.5, voxel_size=0.5)


def _renderer(width=16, height=12, rows_per_batch=3):
    camera = PinholeCamera(
        [5.0, 3.0, 5.0],
        look_at=[0.0, 0.0, 0.0],
        fov=30.0,
        aspect=width / height,
    )
    integrator = SingleScatteringIntegrator(RenderConfig(step_size=0.1, shadow_max_distance=5.0))
    return VolumeRenderer(integrator, camera, width, height, rows_per_batch=rows_per_batch)


LIGHT_DIR = torch.tensor([-1.0, 1.0, -1.0])


class TestVolumeRenderer:
    def test_output(self, sphere_grid):
        image = _renderer().render_scene(sphere_grid, LIGHT_DIR)
        assert image.data.shape == (12, 16, 3)
        assert torch.all(image.data >= 0) and torch.all(image.data <= 1)

        # the volume sits in the middle of the view, the corners see nothing
        assert image.data[6, 8].sum().item() > 0
        assert image.data[0, 0].sum().item() == 0.0

    def test_deterministic_across_workers(self, sphere_grid):
        renderer = _renderer()
        sequential = renderer.render_scene(sphere_grid, LIGHT_DIR, num_workers=1)
        parallel = renderer.render_scene(sphere_grid, LIGHT_DIR, num_workers=4)
        assert torch.equal(sequential.data, parallel.data)

    def test_partition_covers_all_rows(self):
        renderer = _renderer(height=10, rows_per_batch=4)
        assert renderer._partition_rows() == [(0, 4), (4, 8), (8, 10)]

    def test_pixel_centers(self):
        renderer = _renderer(width=2, height=2)
        u, v = renderer._pixel_coords(0, 2)
        assert u.tolist() == [0.25, 0.75, 0.25, 0.75]
        assert v.tolist() == [0.75, 0.75, 0.25, 0.25]

    def test_worker_errors_propagate(self):
        renderer = _renderer()
        vector_grid = SparseGrid(torch.tensor([[0, 0, 0]]), torch.tensor([[1.0, 1.0, 1.0]]))
        with pytest.raises(ValueError):
            renderer.render_scene(vector_grid, LIGHT_DIR, num_workers=2)

    def test_invalid_arguments(self, sphere_grid):
        with pytest.raises(ValueError):
            _renderer(rows_per_batch=0)
        with pytest.raises(ValueError):
            _renderer().render_scene(sphere_grid, LIGHT_DIR, num_workers=0)
        with pytest.raises(ValueError):
            VolumeRenderer(None, _renderer().camera, 4, 4)
