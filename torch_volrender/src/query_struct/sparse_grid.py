"""
A sparse voxel grid storing only its active voxels.
"""

import typing

import torch

from torch_volrender.src.query_struct.voxel_grid_base import VoxelGridBase


class SparseGrid(VoxelGridBase):
    """
    A sparse voxel grid.

    Active voxels are kept as a sorted array of linearized integer coordinates
    alongside their values. A lookup linearizes the query index and binary-searches
    the key array, so the structure stays read-only after construction.

    Attributes:
        coords (torch.Tensor): Tensor of shape (N, 3) and type torch.int64.
            Indices of the active voxels.
        values (torch.Tensor): Tensor of shape (N,) or (N, C). Values of the active voxels.
    """

    def __init__(
        self,
        coords: torch.Tensor,
        values: torch.Tensor,
        voxel_size: float = 1.0,
        origin: typing.Optional[torch.Tensor] = None,
        background: float = 0.0,
        name: str = "density",
        grid_class: str = "unknown",
    ):
        """
        Constructor of class 'SparseGrid'.

        Args:
            coords (torch.Tensor): Tensor of shape (N, 3). Integer indices of the active voxels.
            values (torch.Tensor): Tensor of shape (N,) or (N, C). Values of the active voxels.
            voxel_size (float): Edge length of a voxel in world units.
            origin (torch.Tensor): Tensor of shape (3,). World position of index (0, 0, 0).
            background (float): Value returned for inactive voxels.
            name (str): Name of the grid.
            grid_class (str): Semantic class of the grid.
        """
        super().__init__(
            voxel_size=voxel_size,
            origin=origin,
            background=background,
            name=name,
            grid_class=grid_class,
        )

        coords = torch.as_tensor(coords)
        values = torch.as_tensor(values)
        if coords.ndim != 2 or coords.shape[-1] != 3:
            raise ValueError(f"Expected coordinates of shape (N, 3). Got {coords.shape}.")
        if coords.is_floating_point():
            raise ValueError(f"Expected integer coordinates. Got a tensor of type {coords.dtype}.")
        if values.ndim not in (1, 2) or values.shape[0] != coords.shape[0]:
            raise ValueError(
                "Expected values of shape (N,) or (N, C) matching the coordinates. "
                f"Got {values.shape} for {coords.shape[0]} voxels."
            )
        if coords.shape[0] == 0:
            raise ValueError("Expected at least one active voxel. Got an empty grid.")

        coords = coords.long()
        if not values.is_floating_point():
            values = values.float()

        self._index_min = torch.min(coords, dim=0).values
        self._index_max = torch.max(coords, dim=0).values
        self._dims = self._index_max - self._index_min + 1

        keys = self._linearize(coords - self._index_min)
        keys, order = torch.sort(keys)
        if keys.shape[0] > 1 and torch.any(keys[1:] == keys[:-1]):
            raise ValueError("Expected unique voxel coordinates. Got duplicated entries.")

        self._keys = keys
        self._coords = coords[order]
        self._values = values[order]

    @classmethod
    def from_dense(
        cls,
        dense: torch.Tensor,
        voxel_size: float = 1.0,
        origin: typing.Optional[torch.Tensor] = None,
        threshold: float = 0.0,
        **kwargs,
    ) -> "SparseGrid":
        """
        Builds a sparse grid from a dense array indexed as [i, j, k].

        Voxels whose absolute value does not exceed 'threshold' become inactive.
        """
        dense = torch.as_tensor(dense)
        if dense.ndim != 3:
            raise ValueError(f"Expected a 3-dimensional tensor. Got {dense.ndim} dimensions.")
        coords = torch.nonzero(torch.abs(dense) > threshold)
        values = dense[coords[:, 0], coords[:, 1], coords[:, 2]]
        return cls(coords, values, voxel_size=voxel_size, origin=origin, **kwargs)

    def _linearize(self, local: torch.Tensor) -> torch.Tensor:
        dims = self._dims.to(local.device)
        return (local[..., 0] * dims[1] + local[..., 1]) * dims[2] + local[..., 2]

    def value_at_index(self, index: torch.Tensor) -> torch.Tensor:
        batch_shape = index.shape[:-1]
        flat = index.reshape(-1, 3).to(self._keys.device)

        local = flat - self._index_min
        inside = torch.all((local >= 0) & (local < self._dims), dim=-1)
        query = self._linearize(torch.where(inside.unsqueeze(-1), local, torch.zeros_like(local)))

        slot = torch.searchsorted(self._keys, query).clamp(max=self._keys.shape[0] - 1)
        found = inside & (self._keys[slot] == query)

        out = torch.full(
            (flat.shape[0],) + self.value_shape,
            self._background,
            dtype=self._values.dtype,
            device=self._values.device,
        )
        out[found] = self._values[slot[found]]

        return out.reshape(batch_shape + self.value_shape)

    def index_bounding_box(self) -> typing.Tuple[torch.Tensor, torch.Tensor]:
        return self._index_min.clone(), self._index_max.clone()

    @property
    def coords(self) -> torch.Tensor:
        """Returns the indices of the active voxels."""
        return self._coords

    @property
    def values(self) -> torch.Tensor:
        """Returns the values of the active voxels."""
        return self._values

    @property
    def value_shape(self) -> typing.Tuple[int, ...]:
        """Returns the shape of a single voxel value, () for scalar grids."""
        return tuple(self._values.shape[1:])

    @property
    def is_scalar(self) -> bool:
        """Returns whether the grid stores scalar values."""
        return self._values.ndim == 1

    @property
    def active_voxel_count(self) -> int:
        """Returns the number of active voxels."""
        return int(self._keys.shape[0])

    @property
    def memory_usage(self) -> int:
        """Returns the number of bytes held by the backing tensors."""
        return sum(
            tensor.element_size() * tensor.numel()
            for tensor in (self._keys, self._coords, self._values)
        )
