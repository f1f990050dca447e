"""
Base class for integrators.
"""

from typing import NamedTuple

import torch

from torch_volrender.src.query_struct.query_struct_base import ScalarFieldBase
from torch_volrender.src.renderer.rays import RayBundle


class IntegrationResult(NamedTuple):
    """
    Per-ray outputs of an integrator.

    Attributes:
        rgb (torch.Tensor): Tensor of shape (N, 3). Radiance reaching the ray origin.
        transmittance (torch.Tensor): Tensor of shape (N,). Transmittance at the end of the march.
        num_steps (torch.Tensor): Tensor of shape (N,). Number of samples taken along each ray.
    """

    rgb: torch.Tensor
    transmittance: torch.Tensor
    num_steps: torch.Tensor


class IntegratorBase(object):
    """
    Base class for integrators.
    """

    def __init__(self, *arg, **kwargs):
        pass

    def integrate_along_rays(
        self,
        ray_bundle: RayBundle,
        field: ScalarFieldBase,
        light_dir: torch.Tensor,
    ) -> IntegrationResult:
        """
        Determines pixel colors by integrating light transport through the field along rays.
        """
        raise NotImplementedError()
