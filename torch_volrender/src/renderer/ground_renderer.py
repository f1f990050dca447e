"""
Analytic ray tracer for a checkerboard ground plane lit by point lights.
"""

import torch

import torch_volrender.src.renderer.cameras as cameras
from torch_volrender.src.scene.ground_plane import checkerboard_color, intersect_ground
from torch_volrender.src.scene.lighting import PhongLighting
from torch_volrender.src.utils.image import Image


class GroundRenderer(object):
    """
    Renders the ground plane y = 0 with Phong shading. Rays missing the plane see a black sky.
    """

    def __init__(self, lighting: PhongLighting, tile_size: float = 2.0):
        if not isinstance(lighting, PhongLighting):
            raise ValueError(f"Expected a parameter of type PhongLighting. Got {type(lighting)}.")
        self._lighting = lighting
        self._tile_size = float(tile_size)

    def render_scene(
        self,
        camera: cameras.PinholeCamera,
        img_width: int,
        img_height: int,
    ) -> Image:
        """
        Renders the ground plane as seen from the camera.

        Pixel (x, y) is mapped to u = x / width and v = 1 - y / height.

        Args:
            camera (PinholeCamera): The camera generating primary rays.
            img_width (int): Width of the image.
            img_height (int): Height of the image.

        Returns:
            image (Image): The rendered image.
        """
        dtype = camera.dtype
        ys = torch.arange(0, img_height, dtype=dtype)
        xs = torch.arange(0, img_width, dtype=dtype)
        grid_y, grid_x = torch.meshgrid(ys, xs, indexing="ij")

        u = (grid_x / img_width).reshape(-1)
        v = (1.0 - grid_y / img_height).reshape(-1)
        ray_bundle = camera.generate_rays(u, v)

        t, hit = intersect_ground(ray_bundle)
        rgb = torch.zeros((len(ray_bundle), 3), dtype=dtype)

        if torch.any(hit):
            rays = ray_bundle[hit]
            points = rays.point_at(t[hit])
            normals = torch.zeros_like(points)
            normals[:, 1] = 1.0

            rgb[hit] = self._lighting.shade(
                points,
                normals,
                -rays.ray_dir,
                checkerboard_color(points, self._tile_size),
            )

        image = Image(img_width, img_height)
        image.write_rows(0, img_height, rgb)
        return image

    @property
    def lighting(self) -> PhongLighting:
        """Returns the lights of the scene."""
        return self._lighting
