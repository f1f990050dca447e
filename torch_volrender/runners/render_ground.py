"""A script for rendering a checkerboard ground plane lit by a grid of point lights."""

import sys
from typing import List, Optional

import torch_volrender.runners.runner_utils as runner_utils
from torch_volrender.src.utils.image import get_sink


def main(argv: Optional[List[str]] = None) -> int:
    """The entry point of ground plane rendering code."""
    if argv is None:
        argv = sys.argv
    if len(argv) != 1:
        print(f"Usage: {argv[0]}")
        return 1

    try:
        cfg = runner_utils.load_config().ground
        renderer = runner_utils.init_ground_renderer(cfg)
        camera = runner_utils.init_camera(cfg.camera, cfg.image)
        image = renderer.render_scene(camera, cfg.image.width, cfg.image.height)
    except Exception as error:
        print(f"Error: {error}", file=sys.stderr)
        return 1

    if not get_sink(cfg.image.format).write(image, cfg.image.output):
        print("Failed to save image", file=sys.stderr)
        return 1

    print(f"Image saved successfully as {cfg.image.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
