"""
Loading and saving sparse volumes stored as NumPy archives.

A volume file is an '.npz' archive holding one or more named grids. Grid <name> is
stored under the keys:
    <name>.coords      integer array of shape (N, 3), indices of the active voxels
    <name>.values      array of shape (N,) or (N, C), values of the active voxels
    <name>.voxel_size  scalar, edge length of a voxel in world units
    <name>.origin      array of shape (3,), world position of index (0, 0, 0)
    <name>.class       optional string, e.g. "fog volume"
"""

import logging
import os
import typing
import zipfile

import numpy as np
import torch

from torch_volrender.src.query_struct.sparse_grid import SparseGrid

log = logging.getLogger(__name__)

REQUIRED_KEYS = ("coords", "values", "voxel_size", "origin")


def load_volume(volume_file: str) -> typing.Dict[str, SparseGrid]:
    """
    Loads every grid stored in a volume file.

    Args:
        volume_file (str): Path to the '.npz' archive.

    Returns:
        grids (Dict[str, SparseGrid]): Grids keyed by name, in the order they are stored.
    """
    if not os.path.exists(volume_file):
        raise FileNotFoundError(f"Volume file {volume_file} does not exist.")

    try:
        archive = np.load(volume_file, allow_pickle=False)
    except (OSError, EOFError, ValueError, zipfile.BadZipFile) as error:
        raise ValueError(f"Could not read volume file {volume_file}: {error}") from error
    if not isinstance(archive, np.lib.npyio.NpzFile):
        raise ValueError(f"Expected an '.npz' archive. Got a single array in {volume_file}.")

    with archive:
        names = []
        for key in archive.files:
            name = key.rsplit(".", 1)[0]
            if "." in key and not name in names:
                names.append(name)

        grids = {}
        for name in names:
            missing = [k for k in REQUIRED_KEYS if not f"{name}.{k}" in archive.files]
            if missing:
                raise ValueError(f"Grid '{name}' in {volume_file} is missing entries {missing}.")

            grid_class = "unknown"
            if f"{name}.class" in archive.files:
                grid_class = str(archive[f"{name}.class"])

            grids[name] = SparseGrid(
                torch.from_numpy(archive[f"{name}.coords"].astype(np.int64)),
                torch.from_numpy(np.ascontiguousarray(archive[f"{name}.values"])),
                voxel_size=float(archive[f"{name}.voxel_size"]),
                origin=torch.from_numpy(archive[f"{name}.origin"].astype(np.float64)),
                name=name,
                grid_class=grid_class,
            )

    log.info("Loaded %d grid(s) from %s: %s", len(grids), volume_file, list(grids))
    return grids


def load_grid(volume_file: str, grid_name: str = "density") -> SparseGrid:
    """
    Loads a single scalar grid from a volume file.

    Args:
        volume_file (str): Path to the '.npz' archive.
        grid_name (str): Name of the grid to load.

    Returns:
        grid (SparseGrid): The requested grid.
    """
    grids = load_volume(volume_file)
    if not grid_name in grids:
        raise ValueError(
            f"Volume file {volume_file} has no grid named '{grid_name}'. "
            f"Available grids: {list(grids)}."
        )

    grid = grids[grid_name]
    if not grid.is_scalar:
        raise ValueError(
            f"Expected a scalar grid. Grid '{grid_name}' holds values of shape {grid.value_shape}."
        )
    return grid


def save_volume(volume_file: str, grids: typing.Sequence[SparseGrid]) -> None:
    """
    Saves sparse grids to a volume file.

    Args:
        volume_file (str): Path to the '.npz' archive.
        grids (Sequence[SparseGrid]): Grids to store. Their names must be unique.
    """
    arrays = {}
    for grid in grids:
        if f"{grid.name}.coords" in arrays:
            raise ValueError(f"Expected unique grid names. Got '{grid.name}' twice.")
        arrays[f"{grid.name}.coords"] = grid.coords.numpy()
        arrays[f"{grid.name}.values"] = grid.values.numpy()
        arrays[f"{grid.name}.voxel_size"] = np.array(grid.voxel_size)
        arrays[f"{grid.name}.origin"] = grid.origin.numpy()
        arrays[f"{grid.name}.class"] = np.array(grid.grid_class)

    with open(volume_file, "wb") as file:
        np.savez(file, **arrays)
