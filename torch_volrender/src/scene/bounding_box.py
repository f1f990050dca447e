"""
Axis-aligned bounding box and the slab ray intersection test.
"""

import typing

import torch

from torch_volrender.src.renderer.rays import RayBundle

INF = float("inf")


def _replace_nan(values: torch.Tensor, fill: float) -> torch.Tensor:
    return torch.where(torch.isnan(values), torch.full_like(values, fill), values)


class BoundingBox(object):
    """
    An axis-aligned box in world space.

    Attributes:
        min_corner (torch.Tensor): Tensor of shape (3,). The minimum corner.
        max_corner (torch.Tensor): Tensor of shape (3,). The maximum corner.
    """

    def __init__(
        self,
        min_corner: torch.Tensor,
        max_corner: torch.Tensor,
    ):
        """
        Constructor of class 'BoundingBox'.

        Args:
            min_corner (torch.Tensor): Tensor of shape (3,).
            max_corner (torch.Tensor): Tensor of shape (3,).
        """
        min_corner = torch.as_tensor(min_corner)
        max_corner = torch.as_tensor(max_corner)
        if min_corner.shape != torch.Size((3,)) or max_corner.shape != torch.Size((3,)):
            raise ValueError(
                "Expected corners of shape (3,). "
                f"Got {min_corner.shape} and {max_corner.shape}, respectively."
            )
        if not torch.all(min_corner <= max_corner):
            raise ValueError(
                "Expected the minimum corner to be componentwise less than or equal to "
                f"the maximum corner. Got {min_corner.tolist()} and {max_corner.tolist()}."
            )
        self._min_corner = min_corner
        self._max_corner = max_corner

    def __repr__(self) -> str:
        return f"BoundingBox(min={self._min_corner.tolist()}, max={self._max_corner.tolist()})"

    def intersect(
        self,
        ray_bundle: RayBundle,
    ) -> typing.Tuple[torch.Tensor, torch.Tensor, torch.Tensor]:
        """
        Computes the parametric entry and exit distances of rays using the slab method.

        A direction component of exactly zero yields +-inf through the division,
        so the corresponding axis never constrains the interval. When the origin also
        lies exactly on that slab plane, the product 0 * inf evaluates to NaN; such
        candidates are discarded in the same way.

        Args:
            ray_bundle (RayBundle): Rays to be tested.

        Returns:
            t_min (torch.Tensor): Tensor of shape (N,). The entry distances.
            t_max (torch.Tensor): Tensor of shape (N,). The exit distances.
            hit (torch.Tensor): Boolean tensor of shape (N,). True where
                t_max >= t_min and t_max > 0.
        """
        origin = ray_bundle.ray_origin
        box_min = self._min_corner.to(origin)
        box_max = self._max_corner.to(origin)

        inv_dir = 1.0 / ray_bundle.ray_dir
        t_lo = (box_min - origin) * inv_dir
        t_hi = (box_max - origin) * inv_dir

        t_near = torch.minimum(_replace_nan(t_lo, -INF), _replace_nan(t_hi, -INF))
        t_far = torch.maximum(_replace_nan(t_lo, INF), _replace_nan(t_hi, INF))

        t_min = torch.max(t_near, dim=-1).values
        t_max = torch.min(t_far, dim=-1).values

        # a zero-length direction is unconstrained on every axis and never hits
        hit = (t_max >= t_min) & (t_max > 0) & torch.isfinite(t_min) & torch.isfinite(t_max)

        return t_min, t_max, hit

    def contains(self, points: torch.Tensor) -> torch.Tensor:
        """Returns a boolean tensor indicating the points lying inside the box."""
        box_min = self._min_corner.to(points)
        box_max = self._max_corner.to(points)
        return torch.all((points >= box_min) & (points <= box_max), dim=-1)

    @property
    def min_corner(self) -> torch.Tensor:
        """Returns the minimum corner of the box."""
        return self._min_corner

    @property
    def max_corner(self) -> torch.Tensor:
        """Returns the maximum corner of the box."""
        return self._max_corner

    @property
    def extent(self) -> torch.Tensor:
        """Returns the edge lengths of the box."""
        return self._max_corner - self._min_corner
