from torch_volrender.src.utils.data.load_volume import load_grid, load_volume, save_volume
