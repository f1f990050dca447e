"""
Offline volumetric ray marching of sparse voxel grids implemented using Pytorch.
"""

__version__ = "0.1.0"
