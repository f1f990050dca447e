"""
Volume renderer implemented using Pytorch.
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
import logging
import typing

import torch
from tqdm import tqdm

import torch_volrender.src.query_struct as query_struct
import torch_volrender.src.renderer.cameras as cameras
import torch_volrender.src.renderer.integrators as integrators
from torch_volrender.src.utils.image import Image

log = logging.getLogger(__name__)


class VolumeRenderer(object):
    """
    Volume renderer.

    The image is split into blocks of consecutive rows. Every block is an independent
    task that generates its camera rays, integrates them and writes its own rows of the
    output image, so blocks can run on a thread pool without any locking. The block
    layout depends only on 'rows_per_batch', hence the result does not depend on the
    number of workers.

    Attributes:
        camera (PinholeCamera): Defines the view rays.
        integrator (IntegratorBase): Computes pixel colors along rays.
        img_width (int): Width of the image.
        img_height (int): Height of the image.
        rows_per_batch (int): Number of image rows rendered by a single task.
    """

    def __init__(
        self,
        integrator: integrators.IntegratorBase,
        camera: cameras.PinholeCamera,
        img_width: int,
        img_height: int,
        rows_per_batch: int = 8,
    ):
        """
        Constructor of class 'VolumeRenderer'.

        Args:
            integrator (IntegratorBase): An instance of class derived from 'IntegratorBase'.
            camera (PinholeCamera): The camera generating primary rays.
            img_width (int): Width of the image.
            img_height (int): Height of the image.
            rows_per_batch (int): Number of image rows rendered by a single task.
        """
        if not isinstance(integrator, integrators.IntegratorBase):
            raise ValueError(
                f"Expected a parameter of type IntegratorBase. Got {type(integrator)}."
            )
        if rows_per_batch <= 0:
            raise ValueError(f"Expected a positive number of rows per batch. Got {rows_per_batch}.")

        self._integrator = integrator
        self._camera = camera
        self._img_width = int(img_width)
        self._img_height = int(img_height)
        self._rows_per_batch = int(rows_per_batch)

    def render_scene(
        self,
        field: query_struct.ScalarFieldBase,
        light_dir: torch.Tensor,
        num_workers: int = 1,
        show_progress: bool = False,
    ) -> Image:
        """
        Renders the field from the current camera.

        Args:
            field (ScalarFieldBase): The density field. Must support concurrent queries.
            light_dir (torch.Tensor): Tensor of shape (3,). Direction toward the light.
            num_workers (int): Number of threads rendering row blocks.
            show_progress (bool): Whether to display a progress bar.

        Returns:
            image (Image): The rendered image, clamped to [0, 1].
        """
        if num_workers <= 0:
            raise ValueError(f"Expected a positive number of workers. Got {num_workers}.")

        image = Image(self._img_width, self._img_height)
        blocks = self._partition_rows()
        log.info(
            "Rendering %dx%d image in %d block(s) on %d worker(s).",
            self._img_width,
            self._img_height,
            len(blocks),
            num_workers,
        )

        progress = tqdm(total=len(blocks), desc="Rendering", disable=not show_progress)
        if num_workers == 1:
            for start, end in blocks:
                self._render_rows(field, light_dir, image, start, end)
                progress.update(1)
        else:
            with ThreadPoolExecutor(max_workers=num_workers) as executor:
                futures = [
                    executor.submit(self._render_rows, field, light_dir, image, start, end)
                    for start, end in blocks
                ]
                for future in as_completed(futures):
                    future.result()  # re-raises errors of the worker
                    progress.update(1)
        progress.close()

        return image

    def _partition_rows(self) -> typing.List[typing.Tuple[int, int]]:
        """
        Splits the image rows into contiguous blocks of at most 'rows_per_batch' rows.
        """
        return [
            (start, min(start + self._rows_per_batch, self._img_height))
            for start in range(0, self._img_height, self._rows_per_batch)
        ]

    def _render_rows(
        self,
        field: query_struct.ScalarFieldBase,
        light_dir: torch.Tensor,
        image: Image,
        start: int,
        end: int,
    ) -> None:
        """
        Renders image rows [start, end) and writes them into the image.
        """
        u, v = self._pixel_coords(start, end)
        ray_bundle = self._camera.generate_rays(u, v)

        result = self._integrator.integrate_along_rays(ray_bundle, field, light_dir)
        image.write_rows(start, end, result.rgb)

    def _pixel_coords(self, start: int, end: int) -> typing.Tuple[torch.Tensor, torch.Tensor]:
        """
        Computes normalized coordinates of the pixel centers in rows [start, end).

        Row 0 is the top of the image.

        Returns:
            u (torch.Tensor): Tensor of shape ((end - start) * width,).
            v (torch.Tensor): Tensor of shape ((end - start) * width,).
        """
        dtype = self._camera.dtype
        ys = torch.arange(start, end, dtype=dtype)
        xs = torch.arange(0, self._img_width, dtype=dtype)
        grid_y, grid_x = torch.meshgrid(ys, xs, indexing="ij")

        u = (grid_x + 0.5) / self._img_width
        v = 1.0 - (grid_y + 0.5) / self._img_height

        return u.reshape(-1), v.reshape(-1)

    @property
    def camera(self) -> cameras.PinholeCamera:
        """Returns the current camera configuration."""
        return self._camera

    @property
    def integrator(self) -> integrators.IntegratorBase:
        """Returns the current integrator in-use."""
        return self._integrator

    @property
    def img_width(self) -> int:
        """Returns the width of the image."""
        return self._img_width

    @property
    def img_height(self) -> int:
        """Returns the height of the image."""
        return self._img_height

    @camera.setter
    def camera(self, new_camera: cameras.PinholeCamera) -> None:
        self._camera = new_camera
