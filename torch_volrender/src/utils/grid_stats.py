"""
Statistics and slice visualization of voxel grids.
"""

import math
import typing

import numpy as np
import torch

from torch_volrender.src.query_struct.sparse_grid import SparseGrid
from torch_volrender.src.utils.image import encode_ppm_binary, write_bytes


def grid_statistics(grid: SparseGrid) -> typing.Dict[str, typing.Any]:
    """
    Summarizes a sparse grid.

    Args:
        grid (SparseGrid): The grid to inspect.

    Returns:
        stats (Dict): A dictionary whose keys are:
            ['name', 'grid_type', 'value_type', 'grid_class', 'voxel_size',
             'active_voxel_count', 'memory_usage', 'index_min', 'index_max',
             'world_min', 'world_max', 'origin_index', 'origin_value',
             'min_value', 'max_value']
            Value statistics are scalars for scalar grids and per-component lists
            for vector grids.
    """
    index_min, index_max = grid.index_bounding_box()

    # value at the world origin
    origin_index = grid.world_to_index(torch.zeros(3, dtype=torch.float64))
    origin_value = grid.value_at_index(origin_index)

    if grid.is_scalar:
        grid_type = f"Tree_{_dtype_name(grid.values.dtype)}"
        value_type = _dtype_name(grid.values.dtype)
        min_value = float(torch.min(grid.values))
        max_value = float(torch.max(grid.values))
        origin_value = float(origin_value)
    else:
        value_type = f"vec{grid.value_shape[0]}{_dtype_name(grid.values.dtype)[0]}"
        grid_type = f"Tree_{value_type}"
        min_value = torch.min(grid.values, dim=0).values.tolist()
        max_value = torch.max(grid.values, dim=0).values.tolist()
        origin_value = origin_value.tolist()

    return {
        "name": grid.name,
        "grid_type": grid_type,
        "value_type": value_type,
        "grid_class": grid.grid_class,
        "voxel_size": grid.voxel_size,
        "active_voxel_count": grid.active_voxel_count,
        "memory_usage": grid.memory_usage,
        "index_min": index_min.tolist(),
        "index_max": index_max.tolist(),
        "world_min": grid.index_to_world(index_min).tolist(),
        "world_max": grid.index_to_world(index_max).tolist(),
        "origin_index": origin_index.tolist(),
        "origin_value": origin_value,
        "min_value": min_value,
        "max_value": max_value,
    }


def _dtype_name(dtype: torch.dtype) -> str:
    return {
        torch.float16: "half",
        torch.float32: "float",
        torch.float64: "double",
    }.get(dtype, str(dtype).replace("torch.", ""))


def value_to_color(
    values: torch.Tensor,
    min_value: float,
    max_value: float,
) -> np.ndarray:
    """
    Maps scalar values to a heat map running black -> blue -> green -> red -> white.

    Args:
        values (torch.Tensor): Tensor of shape (N,).
        min_value (float): Value mapped to black.
        max_value (float): Value mapped to white.

    Returns:
        An array of shape (N, 3) and type np.uint8.
    """
    values = values.double()
    value_range = max_value - min_value
    if value_range > 0:
        normalized = (values - min_value) / value_range
    else:
        normalized = torch.zeros_like(values)
    n = torch.clamp(normalized, 0.0, 1.0)

    # channels are truncated to integers like an unsigned char cast
    def ramp(x: torch.Tensor) -> torch.Tensor:
        return torch.clamp(torch.floor(x * 4 * 255), 0, 255)

    zeros = torch.zeros_like(n)
    full = torch.full_like(n, 255.0)

    band_0 = n < 0.25
    band_1 = (n >= 0.25) & (n < 0.5)
    band_2 = (n >= 0.5) & (n < 0.75)
    band_3 = n >= 0.75

    red = torch.where(band_2, ramp(n - 0.5), zeros)
    red = torch.where(band_3, full, red)

    green = torch.where(band_1, ramp(n - 0.25), zeros)
    green = torch.where(band_2, ramp(0.75 - n), green)
    green = torch.where(band_3, ramp(n - 0.75), green)

    blue = torch.where(band_0, ramp(n), zeros)
    blue = torch.where(band_1, ramp(0.5 - n), blue)
    blue = torch.where(band_3, ramp(n - 0.75), blue)

    return torch.stack([red, green, blue], dim=-1).to(torch.uint8).numpy()


def slice_pixels(
    grid: SparseGrid,
    min_value: float,
    max_value: float,
) -> np.ndarray:
    """
    Renders the XY slice through the middle Z index of the active region as a heat map.

    Pixel (x, y) shows voxel (x + i_min, y + j_min, k_mid); the first row of the image
    holds the smallest y index.

    Returns:
        An array of shape (height, width, 3) and type np.uint8.
    """
    if not grid.is_scalar:
        raise ValueError(f"Expected a scalar grid. Got values of shape {grid.value_shape}.")

    index_min, index_max = grid.index_bounding_box()
    width = int(index_max[0] - index_min[0]) + 1
    height = int(index_max[1] - index_min[1]) + 1
    mid_z = math.trunc((int(index_min[2]) + int(index_max[2])) / 2)

    ys = torch.arange(int(index_min[1]), int(index_max[1]) + 1)
    xs = torch.arange(int(index_min[0]), int(index_max[0]) + 1)
    grid_y, grid_x = torch.meshgrid(ys, xs, indexing="ij")
    index = torch.stack([grid_x, grid_y, torch.full_like(grid_x, mid_z)], dim=-1)

    values = grid.value_at_index(index.reshape(-1, 3))
    colors = value_to_color(values, min_value, max_value)
    return colors.reshape(height, width, 3)


def save_slice(
    grid: SparseGrid,
    filename: str,
    min_value: float,
    max_value: float,
) -> bool:
    """
    Writes the middle XY slice of a scalar grid as a binary PPM image.

    Returns:
        True on success, False if the file could not be written.
    """
    return write_bytes(encode_ppm_binary(slice_pixels(grid, min_value, max_value)), filename)
