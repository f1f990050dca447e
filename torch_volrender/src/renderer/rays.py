"""
Ray data structure shared by the volume and ground-plane renderers.
"""

import torch

from torch_volrender.src.geometry.vector import normalize


class RayBundle(object):
    """
    A data structure for holding a batch of rays.

    Attributes:
        ray_origin (torch.Tensor): Tensor of shape (N, 3) representing ray origins.
        ray_dir (torch.Tensor): Tensor of shape (N, 3) representing unit ray directions.
    """

    def __init__(
        self,
        ray_origin: torch.Tensor,
        ray_dir: torch.Tensor,
    ):
        """
        Constructor of class 'RayBundle'.

        Directions are normalized here so that every bundle carries unit-length
        directions. A zero direction stays zero.

        Args:
            ray_origin (torch.Tensor): Tensor of shape (N, 3) or (3,).
            ray_dir (torch.Tensor): Tensor of shape (N, 3) or (3,).
        """
        if ray_origin.shape[-1] != 3 or ray_dir.shape[-1] != 3:
            raise ValueError(
                "Expected tensors whose last dimension is 3. "
                f"Got {ray_origin.shape} and {ray_dir.shape}, respectively."
            )
        ray_origin, ray_dir = torch.broadcast_tensors(
            ray_origin.reshape(-1, 3), ray_dir.reshape(-1, 3)
        )

        self._ray_origin = ray_origin
        self._ray_dir = normalize(ray_dir)

    def __len__(self) -> int:
        return self._ray_origin.shape[0]

    def __getitem__(self, index) -> "RayBundle":
        return RayBundle(self._ray_origin[index], self._ray_dir[index])

    def point_at(self, t: torch.Tensor) -> torch.Tensor:
        """
        Evaluates o + t * d for each ray.

        Args:
            t (torch.Tensor): Tensor of shape (N,).

        Returns:
            An instance of torch.Tensor of shape (N, 3).
        """
        return self._ray_origin + t.unsqueeze(-1) * self._ray_dir

    @property
    def ray_origin(self) -> torch.Tensor:
        """Returns an instance of torch.Tensor representing ray origins."""
        return self._ray_origin

    @property
    def ray_dir(self) -> torch.Tensor:
        """Returns an instance of torch.Tensor representing ray directions."""
        return self._ray_dir

    @property
    def dtype(self) -> torch.dtype:
        """Returns the floating point type of the rays."""
        return self._ray_origin.dtype

    @property
    def device(self) -> torch.device:
        """Returns the device holding the rays."""
        return self._ray_origin.device
