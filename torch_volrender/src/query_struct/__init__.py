from torch_volrender.src.query_struct.query_struct_base import ScalarFieldBase
from torch_volrender.src.query_struct.voxel_grid_base import VoxelGridBase
from torch_volrender.src.query_struct.sparse_grid import SparseGrid
from torch_volrender.src.query_struct.dense_grid import DenseGrid
