"""
A dense voxel grid suitable for small, bounded volumes.
"""

import typing

import torch

from torch_volrender.src.query_struct.voxel_grid_base import VoxelGridBase


class DenseGrid(VoxelGridBase):
    """
    A dense voxel grid.

    Voxel (i, j, k) of the array lies at index (i, j, k) in index space.
    The whole array is considered active.

    Attributes:
        data (torch.Tensor): Tensor of shape (X, Y, Z) holding scalar values.
    """

    def __init__(
        self,
        data: torch.Tensor,
        voxel_size: float = 1.0,
        origin: typing.Optional[torch.Tensor] = None,
        background: float = 0.0,
        name: str = "density",
        grid_class: str = "unknown",
    ):
        super().__init__(
            voxel_size=voxel_size,
            origin=origin,
            background=background,
            name=name,
            grid_class=grid_class,
        )

        data = torch.as_tensor(data)
        if data.ndim != 3 or data.numel() == 0:
            raise ValueError(f"Expected a non-empty 3-dimensional tensor. Got shape {data.shape}.")
        if not data.is_floating_point():
            data = data.float()
        self._data = data
        self._shape = torch.tensor(data.shape, dtype=torch.long)

    def value_at_index(self, index: torch.Tensor) -> torch.Tensor:
        batch_shape = index.shape[:-1]
        flat = index.reshape(-1, 3).to(self._data.device)

        inside = torch.all((flat >= 0) & (flat < self._shape.to(flat.device)), dim=-1)
        safe = torch.where(inside.unsqueeze(-1), flat, torch.zeros_like(flat))

        out = self._data[safe[:, 0], safe[:, 1], safe[:, 2]]
        out = torch.where(inside, out, torch.full_like(out, self._background))

        return out.reshape(batch_shape)

    def index_bounding_box(self) -> typing.Tuple[torch.Tensor, torch.Tensor]:
        return torch.zeros(3, dtype=torch.long), self._shape - 1

    @property
    def data(self) -> torch.Tensor:
        """Returns the dense array of voxel values."""
        return self._data
