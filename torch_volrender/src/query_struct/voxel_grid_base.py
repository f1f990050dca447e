"""
Base class for voxel-backed scalar fields.
"""

import typing

import torch

from torch_volrender.src.query_struct.query_struct_base import ScalarFieldBase
from torch_volrender.src.scene.bounding_box import BoundingBox


class VoxelGridBase(ScalarFieldBase):
    """
    Voxel grid base class.

    Index space and world space are related by a uniform scale and a translation:
    world = origin + index * voxel_size. Voxel (i, j, k) is centered at the world
    position of its index and covers half a voxel in every direction.

    Attributes:
        voxel_size (float): Edge length of a voxel in world units.
        origin (torch.Tensor): Tensor of shape (3,). World position of index (0, 0, 0).
        background (float): Value returned for inactive voxels.
        name (str): Name of the grid.
        grid_class (str): Semantic class of the grid, e.g. "fog volume".
    """

    def __init__(
        self,
        voxel_size: float = 1.0,
        origin: typing.Optional[torch.Tensor] = None,
        background: float = 0.0,
        name: str = "density",
        grid_class: str = "unknown",
    ):
        super().__init__()

        if not isinstance(voxel_size, (int, float)):
            raise ValueError(f"Expected variable of numeric type. Got {type(voxel_size)}.")
        if voxel_size <= 0:
            raise ValueError(f"Expected a positive voxel size. Got {voxel_size}.")
        if origin is None:
            origin = torch.zeros(3, dtype=torch.float64)
        origin = torch.as_tensor(origin, dtype=torch.float64)
        if origin.shape != torch.Size((3,)):
            raise ValueError(f"Expected an origin of shape (3,). Got {origin.shape}.")

        self._voxel_size = float(voxel_size)
        self._origin = origin
        self._background = float(background)
        self._name = str(name)
        self._grid_class = str(grid_class)

    def world_to_index(self, pos: torch.Tensor) -> torch.Tensor:
        """
        Maps world coordinates to the index of the voxel whose cell contains them.

        Args:
            pos (torch.Tensor): Tensor of shape (..., 3).

        Returns:
            An instance of torch.Tensor of shape (..., 3) and type torch.int64.
        """
        origin = self._origin.to(device=pos.device, dtype=torch.float64)
        index = torch.floor((pos.double() - origin) / self._voxel_size + 0.5)
        # keep non-finite queries far away from any valid index
        index = torch.nan_to_num(index, nan=-(2**40), posinf=2**40, neginf=-(2**40))
        return index.clamp(-(2**40), 2**40).long()

    def index_to_world(self, index: torch.Tensor) -> torch.Tensor:
        """
        Maps (possibly fractional) voxel indices to world coordinates.

        Args:
            index (torch.Tensor): Tensor of shape (..., 3).

        Returns:
            An instance of torch.Tensor of shape (..., 3) and type torch.float64.
        """
        origin = self._origin.to(index.device)
        return origin + index.double() * self._voxel_size

    def sample_at(self, pos: torch.Tensor) -> torch.Tensor:
        return self.value_at_index(self.world_to_index(pos))

    def value_at_index(self, index: torch.Tensor) -> torch.Tensor:
        """
        Looks up the values stored at the given integer voxel indices.

        Args:
            index (torch.Tensor): Tensor of shape (..., 3) and type torch.int64.

        Returns:
            values (torch.Tensor): Tensor of shape (...) for scalar grids, or (..., C)
                for grids holding C-dimensional vectors.
        """
        raise NotImplementedError()

    def index_bounding_box(self) -> typing.Tuple[torch.Tensor, torch.Tensor]:
        """
        Returns the minimum and maximum index (inclusive) of the active voxels.
        """
        raise NotImplementedError()

    def bounding_box(self) -> BoundingBox:
        """
        Returns the world-space box covering the cells of all active voxels.
        """
        index_min, index_max = self.index_bounding_box()
        return BoundingBox(
            self.index_to_world(index_min - 0.5),
            self.index_to_world(index_max + 0.5),
        )

    @property
    def voxel_size(self) -> float:
        """Returns the edge length of a voxel in world units."""
        return self._voxel_size

    @property
    def origin(self) -> torch.Tensor:
        """Returns the world position of index (0, 0, 0)."""
        return self._origin

    @property
    def background(self) -> float:
        """Returns the value of inactive voxels."""
        return self._background

    @property
    def name(self) -> str:
        """Returns the name of the grid."""
        return self._name

    @property
    def grid_class(self) -> str:
        """Returns the semantic class of the grid."""
        return self._grid_class
