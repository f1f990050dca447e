from torch_volrender.src.scene.bounding_box import BoundingBox
from torch_volrender.src.scene.ground_plane import checkerboard_color, intersect_ground
from torch_volrender.src.scene.lighting import PhongLighting, PointLight
