from torch_volrender.src.geometry.vector import cross, dot, length, normalize, vec3, vmax, vmin
