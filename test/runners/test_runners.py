"""Tests for the command line entry points."""

import os

import pytest
import torch

import torch_volrender.runners.analyze as analyze
import torch_volrender.runners.render as render
import torch_volrender.runners.render_ground as render_ground
import torch_volrender.runners.runner_utils as runner_utils
from torch_volrender.src.query_struct import SparseGrid
from torch_volrender.src.utils.data import save_volume
from torch_volrender.src.utils.image import read_ppm

SMALL_RENDER = [
    "image.width=16",
    "image.height=12",
    "integrator.shadow_max_distance=5.0",
    "renderer.num_workers=2",
    "renderer.show_progress=false",
]


@pytest.fixture
def volume_file(tmp_path):
    axis = torch.arange(-2, 3)
    coords = torch.cartesian_prod(axis, axis, axis)
    density = SparseGrid(coords, torch.full((coords.shape[0],), 0.8), voxel_size=0.4)
    velocity = SparseGrid(
        torch.tensor([[0, 0, 0]]), torch.tensor([[0.0, 1.0, 0.0]]), name="velocity"
    )
    path = str(tmp_path / "cloud.npz")
    save_volume(path, [density, velocity])
    return path


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    out_dir = tmp_path / "out"
    out_dir.mkdir()
    monkeypatch.chdir(out_dir)
    return out_dir


class TestRunnerUtils:
    def test_defaults(self):
        cfg = runner_utils.load_config()
        assert list(cfg.camera.position) == [5.0, 3.0, 5.0]
        assert list(cfg.camera.look_at) == [0.0, 0.0, 0.0]
        assert cfg.camera.fov == 60.0
        assert (cfg.image.width, cfg.image.height) == (800, 600)
        assert list(cfg.light.direction) == [-1.0, 1.0, -1.0]
        assert cfg.integrator.step_size == 0.1
        assert cfg.image.output == "volume_render.ppm"
        assert cfg.grid_name == "density"
        assert cfg.ground.image.output == "lighted_scene.ppm"

    def test_overrides(self):
        cfg = runner_utils.load_config(["image.width=32"])
        assert cfg.image.width == 32

    def test_init_renderer(self):
        renderer = runner_utils.init_renderer(runner_utils.load_config(SMALL_RENDER))
        assert (renderer.img_width, renderer.img_height) == (16, 12)
        assert renderer.camera.aspect == pytest.approx(16 / 12)
        assert renderer.integrator.config.shadow_max_distance == 5.0

    def test_light_grid(self):
        lighting = runner_utils.init_lighting(runner_utils.load_config().ground.lights)
        assert len(lighting.lights) == 25
        first = lighting.lights[0]
        assert tuple(first.position) == (-2.0, 5.0, -2.0)
        assert tuple(first.color) == (-0.2, -0.2, 0.0)
        assert first.intensity == 2.0
        assert first.radius == 0.001


class TestRender:
    def test_usage(self, workdir, capsys):
        assert render.main(["volrender-render"]) == 1
        assert capsys.readouterr().out == "Usage: volrender-render <volume_file>\n"
        assert os.listdir(workdir) == []

    def test_missing_file(self, workdir, capsys):
        assert render.main(["volrender-render", str(workdir / "missing.npz")]) == 1
        assert capsys.readouterr().err.startswith("Error: ")
        assert os.listdir(workdir) == []

    def test_render(self, workdir, volume_file, capsys, monkeypatch):
        cfg = runner_utils.load_config(SMALL_RENDER)
        monkeypatch.setattr(runner_utils, "load_config", lambda: cfg)

        assert render.main(["volrender-render", volume_file]) == 0
        assert "Rendered image saved to volume_render.ppm" in capsys.readouterr().out

        with open("volume_render.ppm", "rb") as file:
            assert file.read().startswith(b"P6\n16 12\n255\n")
        width, height, _, pixels = read_ppm("volume_render.ppm")
        assert (width, height) == (16, 12)
        assert pixels.max() > 0

    def test_write_failure(self, workdir, volume_file, monkeypatch):
        cfg = runner_utils.load_config(SMALL_RENDER + ["image.output=missing_dir/out.ppm"])
        monkeypatch.setattr(runner_utils, "load_config", lambda: cfg)
        assert render.main(["volrender-render", volume_file]) == 1

    def test_wrong_grid_name(self, workdir, volume_file, capsys, monkeypatch):
        cfg = runner_utils.load_config(SMALL_RENDER + ["grid_name=temperature"])
        monkeypatch.setattr(runner_utils, "load_config", lambda: cfg)
        assert render.main(["volrender-render", volume_file]) == 1
        assert "temperature" in capsys.readouterr().err


class TestRenderGround:
    def test_render(self, workdir, capsys, monkeypatch):
        cfg = runner_utils.load_config(["ground.image.width=8", "ground.image.height=6"])
        monkeypatch.setattr(runner_utils, "load_config", lambda: cfg)

        assert render_ground.main(["volrender-ground"]) == 0
        assert "lighted_scene.ppm" in capsys.readouterr().out

        with open("lighted_scene.ppm", "rb") as file:
            assert file.read().startswith(b"P3\n8 6\n255\n")
        _, _, _, pixels = read_ppm("lighted_scene.ppm")
        assert pixels[0].max() == 0  # sky
        assert pixels[-1].max() > 0  # ground

    def test_usage(self, workdir, capsys):
        assert render_ground.main(["volrender-ground", "extra"]) == 1
        assert capsys.readouterr().out.startswith("Usage: ")


class TestAnalyze:
    def test_usage(self, workdir, capsys):
        assert analyze.main(["volrender-analyze"]) == 1
        assert capsys.readouterr().out == "Usage: volrender-analyze <volume_file>\n"

    def test_analyze(self, workdir, volume_file, capsys):
        assert analyze.main(["volrender-analyze", volume_file]) == 0
        out = capsys.readouterr().out

        assert "Number of grids: 2" in out
        assert "Grid: density" in out
        assert "Active voxel count: 125" in out
        assert "Vector Grid detected" in out
        assert "Saved visualization to density_slice.ppm" in out

        width, height, _, _ = read_ppm("density_slice.ppm")
        assert (width, height) == (5, 5)
        assert not os.path.exists("velocity_slice.ppm")

    def test_unreadable_file(self, workdir, tmp_path, capsys):
        path = tmp_path / "broken.npz"
        path.write_bytes(b"broken")
        assert analyze.main(["volrender-analyze", str(path)]) == 1
        assert "Error analyzing volume file" in capsys.readouterr().err
