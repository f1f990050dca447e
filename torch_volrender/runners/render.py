"""A script for rendering a density grid with single scattering."""

import sys
from typing import List, Optional

from omegaconf import DictConfig
import torch

import torch_volrender.runners.runner_utils as runner_utils
from torch_volrender.src.query_struct import SparseGrid
from torch_volrender.src.utils.data.load_volume import load_grid
from torch_volrender.src.utils.image import get_sink


def render_volume(cfg: DictConfig, volume_file: str) -> bool:
    """
    Renders the density grid stored in a volume file and writes the image.

    Args:
        cfg (DictConfig): The composed config object.
        volume_file (str): Path to the volume file.

    Returns:
        True if the image was written, False otherwise.
    """
    grid = _load_density_grid(cfg, volume_file)

    renderer = runner_utils.init_renderer(cfg)
    light_dir = torch.tensor(list(cfg.light.direction), dtype=renderer.camera.dtype)
    image = renderer.render_scene(
        grid,
        light_dir,
        num_workers=cfg.renderer.num_workers,
        show_progress=cfg.renderer.show_progress,
    )

    return get_sink(cfg.image.format).write(image, cfg.image.output)


def _load_density_grid(cfg: DictConfig, volume_file: str) -> SparseGrid:
    """Loads the grid named in the config and reports its extent."""
    grid = load_grid(volume_file, cfg.grid_name)
    print("===========================================")
    print(f"Loaded grid '{grid.name}' from {volume_file}.")
    print(f"Active voxels: {grid.active_voxel_count}")
    print(f"World bounding box: {grid.bounding_box()}")
    print("===========================================")
    return grid


def main(argv: Optional[List[str]] = None) -> int:
    """The entry point of rendering code."""
    if argv is None:
        argv = sys.argv
    if len(argv) != 2:
        print(f"Usage: {argv[0]} <volume_file>")
        return 1

    try:
        cfg = runner_utils.load_config()
        written = render_volume(cfg, argv[1])
    except Exception as error:
        print(f"Error: {error}", file=sys.stderr)
        return 1

    if not written:
        print("Failed to save image", file=sys.stderr)
        return 1

    print(f"Rendered image saved to {cfg.image.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
