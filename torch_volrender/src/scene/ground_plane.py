"""
An infinite checkerboard ground plane at y = 0.
"""

import typing

import torch

from torch_volrender.src.renderer.rays import RayBundle

LIGHT_TILE = 0.8
DARK_TILE = 0.2


def intersect_ground(
    ray_bundle: RayBundle,
    eps: float = 1e-6,
) -> typing.Tuple[torch.Tensor, torch.Tensor]:
    """
    Intersects rays with the plane y = 0.

    Args:
        ray_bundle (RayBundle): Rays to be tested.
        eps (float): Rays whose |dir.y| is below this value are treated as parallel.

    Returns:
        t (torch.Tensor): Tensor of shape (N,). Distance to the plane, inf on a miss.
        hit (torch.Tensor): Boolean tensor of shape (N,). True where the plane lies
            in front of the origin.
    """
    dir_y = ray_bundle.ray_dir[:, 1]
    parallel = torch.abs(dir_y) < eps
    safe_dir_y = torch.where(parallel, torch.ones_like(dir_y), dir_y)

    t = -ray_bundle.ray_origin[:, 1] / safe_dir_y
    hit = ~parallel & (t > 0)
    t = torch.where(hit, t, torch.full_like(t, float("inf")))

    return t, hit


def checkerboard_color(
    points: torch.Tensor,
    tile_size: float = 2.0,
) -> torch.Tensor:
    """
    Computes the checkerboard albedo at points lying on the ground.

    Args:
        points (torch.Tensor): Tensor of shape (N, 3).
        tile_size (float): Edge length of a tile.

    Returns:
        An instance of torch.Tensor of shape (N, 3). Light grey on even tiles,
        dark grey on odd tiles.
    """
    cell_x = torch.floor(points[:, 0] / tile_size).long()
    cell_z = torch.floor(points[:, 2] / tile_size).long()
    even = (cell_x + cell_z) % 2 == 0

    shade = torch.where(
        even,
        torch.full_like(points[:, 0], LIGHT_TILE),
        torch.full_like(points[:, 0], DARK_TILE),
    )
    return shade.unsqueeze(-1).expand(-1, 3).clone()
