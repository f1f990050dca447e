"""A set of utility functions commonly used in rendering and analysis scripts."""

from typing import List, Optional

from hydra import compose, initialize_config_module
from omegaconf import DictConfig
import torch

import torch_volrender.src.renderer.cameras as cameras
from torch_volrender.src.renderer.ground_renderer import GroundRenderer
from torch_volrender.src.renderer.integrators import SingleScatteringIntegrator
from torch_volrender.src.renderer.render_config import RenderConfig
from torch_volrender.src.renderer.volume_renderer import VolumeRenderer
from torch_volrender.src.scene.lighting import PhongLighting, PointLight


def load_config(overrides: Optional[List[str]] = None) -> DictConfig:
    """
    Composes the packaged configuration.

    Args:
        overrides (List[str]): Hydra overrides of the form 'key=value'.
            Set to None by default.

    Returns:
        cfg (DictConfig): The composed config object.
    """
    with initialize_config_module(version_base=None, config_module="torch_volrender.configs"):
        cfg = compose(config_name="default", overrides=overrides if not overrides is None else [])
    return cfg


def init_camera(
    camera_cfg: DictConfig,
    image_cfg: DictConfig,
    dtype: torch.dtype = torch.float32,
) -> cameras.PinholeCamera:
    """
    Initializes a pinhole camera whose aspect ratio matches the image.

    Args:
        camera_cfg (DictConfig): A config object holding 'position', 'look_at', 'up' and 'fov'.
        image_cfg (DictConfig): A config object holding 'width' and 'height'.
        dtype (torch.dtype): Floating point type of the generated rays.

    Returns:
        camera (PinholeCamera): The camera.
    """
    return cameras.PinholeCamera(
        list(camera_cfg.position),
        look_at=list(camera_cfg.look_at),
        up=list(camera_cfg.up),
        fov=camera_cfg.fov,
        aspect=float(image_cfg.width) / float(image_cfg.height),
        dtype=dtype,
    )


def init_renderer(cfg: DictConfig) -> VolumeRenderer:
    """
    Initializes the volume renderer.

    Args:
        cfg (DictConfig): A config object holding parameters required
            to setup the camera, the integrator and the renderer.

    Returns:
        renderer (VolumeRenderer): The volume renderer.
    """
    integrator = SingleScatteringIntegrator(RenderConfig.from_cfg(cfg.integrator))
    camera = init_camera(cfg.camera, cfg.image)

    return VolumeRenderer(
        integrator,
        camera,
        cfg.image.width,
        cfg.image.height,
        rows_per_batch=cfg.renderer.rows_per_batch,
    )


def init_lighting(lights_cfg: DictConfig) -> PhongLighting:
    """
    Initializes a square grid of point lights centered above the origin.

    The light at grid cell (i, j), with i and j running from -grid_size // 2 to
    grid_size // 2, sits at (i * spacing, height, j * spacing) and has color (i / 10, j / 10, 0).

    Args:
        lights_cfg (DictConfig): A config object holding 'grid_size', 'spacing', 'height',
            'intensity' and 'radius'.

    Returns:
        lighting (PhongLighting): The lights of the scene.
    """
    lighting = PhongLighting()
    half = lights_cfg.grid_size // 2
    for i in range(-half, half + 1):
        for j in range(-half, half + 1):
            lighting.add_light(
                PointLight(
                    position=(i * lights_cfg.spacing, lights_cfg.height, j * lights_cfg.spacing),
                    color=(i / 10.0, j / 10.0, 0.0),
                    intensity=lights_cfg.intensity,
                    radius=lights_cfg.radius,
                )
            )
    return lighting


def init_ground_renderer(ground_cfg: DictConfig) -> GroundRenderer:
    """
    Initializes the ground plane renderer together with its light grid.
    """
    lighting = init_lighting(ground_cfg.lights)
    print(f"Created {len(lighting.lights)} point light(s).")
    return GroundRenderer(lighting, tile_size=ground_cfg.tile_size)
