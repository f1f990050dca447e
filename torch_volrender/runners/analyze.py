"""A script printing the contents of a volume file."""

import sys
from typing import List, Optional

from torch_volrender.src.query_struct import SparseGrid
from torch_volrender.src.utils.data.load_volume import load_volume
from torch_volrender.src.utils.grid_stats import grid_statistics, save_slice


def _format_vector(values) -> str:
    return "[" + ", ".join(str(v) for v in values) + "]"


def analyze_grid(grid: SparseGrid) -> None:
    """
    Prints the statistics of a grid. Scalar grids also get a heat map of their middle slice.
    """
    stats = grid_statistics(grid)

    print(f"\nGrid: {stats['name']}")
    print("-" * 30)
    print(f"Grid type: {stats['grid_type']}")
    print(f"Value type: {stats['value_type']}")
    print(f"Class: {stats['grid_class']}")
    print(f"Voxel size: {stats['voxel_size']}")

    print("\nGrid Statistics:")
    print(f"Active voxel count: {stats['active_voxel_count']}")
    print(f"Memory usage (bytes): {stats['memory_usage']}")

    print("\nBounding Box:")
    print(f"Min voxel index: {_format_vector(stats['index_min'])}")
    print(f"Max voxel index: {_format_vector(stats['index_max'])}")
    print(f"Min world position: {_format_vector(stats['world_min'])}")
    print(f"Max world position: {_format_vector(stats['world_max'])}")

    print("\nValue at origin (0,0,0):")
    print(f"Voxel index: {_format_vector(stats['origin_index'])}")

    if grid.is_scalar:
        print(f"Value at origin: {stats['origin_value']}")
        print("\nValue Statistics:")
        print(f"Min value: {stats['min_value']}")
        print(f"Max value: {stats['max_value']}")

        filename = f"{grid.name}_slice.ppm"
        if save_slice(grid, filename, stats["min_value"], stats["max_value"]):
            print(f"Saved visualization to {filename}")
    else:
        print("\nVector Grid detected")
        print(f"Value at origin: {_format_vector(stats['origin_value'])}")
        print("\nValue Statistics:")
        print(f"Min values (x,y,z): {_format_vector(stats['min_value'])}")
        print(f"Max values (x,y,z): {_format_vector(stats['max_value'])}")

    print("\n" + "=" * 50)


def main(argv: Optional[List[str]] = None) -> int:
    """The entry point of volume inspection code."""
    if argv is None:
        argv = sys.argv
    if len(argv) != 2:
        print(f"Usage: {argv[0]} <volume_file>")
        return 1

    volume_file = argv[1]
    try:
        print(f"\nAnalyzing volume file: {volume_file}")
        print("=" * 50)

        grids = load_volume(volume_file)
        print("\nFile Information:")
        print(f"Number of grids: {len(grids)}")

        for grid in grids.values():
            analyze_grid(grid)
    except Exception as error:
        print(f"Error analyzing volume file: {error}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
