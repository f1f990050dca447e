"""
Base class for query structures.
"""

import torch

from torch_volrender.src.scene.bounding_box import BoundingBox


class ScalarFieldBase(object):
    """
    Scalar field base class.

    A scalar field maps world-space coordinates to a scalar value and knows the
    region outside of which it only returns its background value. Implementations
    must not mutate any state in 'sample_at' since many rays query them concurrently.
    """

    def __init__(self, *args, **kwargs):
        pass

    def bounding_box(self) -> BoundingBox:
        """
        Returns the world-space region enclosing every active value of the field.
        """
        raise NotImplementedError()

    def sample_at(
        self,
        pos: torch.Tensor,
    ) -> torch.Tensor:
        """
        Query the field at the given points.

        Args:
            pos (torch.Tensor): Tensor of shape (..., 3). World coordinates of sample points.

        Returns:
            values (torch.Tensor): Tensor of shape (...). The field value at each point.
        """
        raise NotImplementedError()
