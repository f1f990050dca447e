"""
Ray-marching integrator for participating media with single scattering.
"""

from typing import Optional

import torch

from torch_volrender.src.geometry.vector import normalize
from torch_volrender.src.query_struct.query_struct_base import ScalarFieldBase
from torch_volrender.src.renderer.integrators.integrator_base import (
    IntegrationResult,
    IntegratorBase,
)
from torch_volrender.src.renderer.rays import RayBundle
from torch_volrender.src.renderer.render_config import RenderConfig


class SingleScatteringIntegrator(IntegratorBase):
    """
    Numerical integrator which marches rays through a density field with a fixed step.

    Densities are interpreted as extinction coefficients. At every occupied sample a
    shadow ray estimates how much light from a directional source survives on its way
    to the sample, and the light scattered toward the camera is accumulated with an
    isotropic phase function.

    Attributes:
        config (RenderConfig): Step size, shadow ray length, transmittance cutoff, phase value.
    """

    def __init__(self, config: Optional[RenderConfig] = None):
        """
        Constructor of class 'SingleScatteringIntegrator'.

        Args:
            config (RenderConfig): Parameters of the ray marcher. Defaults are used if None.
        """
        super().__init__()

        if config is None:
            config = RenderConfig()
        if not isinstance(config, RenderConfig):
            raise ValueError(f"Expected a parameter of type RenderConfig. Got {type(config)}.")
        self._config = config

    def integrate_along_rays(
        self,
        ray_bundle: RayBundle,
        field: ScalarFieldBase,
        light_dir: torch.Tensor,
    ) -> IntegrationResult:
        """
        Determines pixel colors by marching rays through the density field.

        Each ray is sampled at t_k = t_start + k * step_size for as long as t_k < t_exit,
        where t_start is the entry distance into the field's bounding box (or zero when the
        origin lies inside it). At a sample of density rho > 0 with shadow transmittance T_s:
            extinction = rho * step_size
            rgb += phase * T_s * T * extinction * light_color
            T *= exp(-extinction)
        i.e. the contribution is weighted by the transmittance arriving at the sample.
        A ray stops as soon as T drops to the cutoff; its color is left untouched afterwards.

        Args:
            ray_bundle (RayBundle): Primary rays.
            field (ScalarFieldBase): The density field.
            light_dir (torch.Tensor): Tensor of shape (3,). Direction toward the light.

        Returns:
            result (IntegrationResult): Unclamped radiance, final transmittance and number
                of samples taken for each ray. Rays missing the field get zero radiance.
        """
        cfg = self._config
        dtype, device = ray_bundle.dtype, ray_bundle.device
        num_ray = len(ray_bundle)
        step = cfg.step_size

        light_dir = normalize(torch.as_tensor(light_dir, dtype=dtype, device=device))
        light_color = torch.tensor(cfg.light_color, dtype=dtype, device=device)

        t_min, t_max, hit = field.bounding_box().intersect(ray_bundle)
        t_start = torch.clamp(t_min, min=0.0)

        rgb = torch.zeros((num_ray, 3), dtype=dtype, device=device)
        transmittance = torch.ones(num_ray, dtype=dtype, device=device)
        num_steps = torch.zeros(num_ray, dtype=torch.long, device=device)

        active = hit & (t_start < t_max)
        while torch.any(active):
            ray_ids = torch.nonzero(active).squeeze(-1)

            t = t_start[ray_ids] + num_steps[ray_ids].to(dtype) * step
            pos = ray_bundle.ray_origin[ray_ids] + t.unsqueeze(-1) * ray_bundle.ray_dir[ray_ids]

            density = self._sample_density(field, pos)
            extinction = density * step
            transmittance_in = transmittance[ray_ids]

            shadow_transmittance = torch.ones_like(density)
            occupied = density > 0
            if torch.any(occupied):
                shadow_transmittance[occupied] = self.trace_shadow_rays(
                    pos[occupied], field, light_dir
                )

            scattered = cfg.phase * shadow_transmittance * transmittance_in * extinction
            rgb[ray_ids] += scattered.unsqueeze(-1) * light_color
            transmittance[ray_ids] = transmittance_in * torch.exp(-extinction)
            num_steps[ray_ids] += 1

            t_next = t_start[ray_ids] + num_steps[ray_ids].to(dtype) * step
            active[ray_ids] = (t_next < t_max[ray_ids]) & (
                transmittance[ray_ids] > cfg.transmittance_cutoff
            )

        return IntegrationResult(rgb, transmittance, num_steps)

    def trace_shadow_rays(
        self,
        points: torch.Tensor,
        field: ScalarFieldBase,
        light_dir: torch.Tensor,
    ) -> torch.Tensor:
        """
        Estimates the fraction of light reaching the given points.

        Marches from each point toward the light for at most 'shadow_max_distance',
        applying the same Beer-Lambert update, step size and early exit as primary rays.
        Shadow rays spawn no further rays.

        Args:
            points (torch.Tensor): Tensor of shape (N, 3). Sample points in world space.
            field (ScalarFieldBase): The density field.
            light_dir (torch.Tensor): Tensor of shape (3,). Direction toward the light.

        Returns:
            transmittance (torch.Tensor): Tensor of shape (N,) with values in (0, 1].
        """
        cfg = self._config
        step = cfg.step_size
        dtype = points.dtype
        light_dir = normalize(light_dir.to(points))

        transmittance = torch.ones(points.shape[0], dtype=dtype, device=points.device)
        num_steps = torch.zeros(points.shape[0], dtype=torch.long, device=points.device)

        active = torch.ones_like(transmittance, dtype=torch.bool)
        while torch.any(active):
            ray_ids = torch.nonzero(active).squeeze(-1)

            t = num_steps[ray_ids].to(dtype) * step
            pos = points[ray_ids] + t.unsqueeze(-1) * light_dir

            density = self._sample_density(field, pos)
            transmittance[ray_ids] = transmittance[ray_ids] * torch.exp(-density * step)
            num_steps[ray_ids] += 1

            t_next = num_steps[ray_ids].to(dtype) * step
            active[ray_ids] = (t_next < cfg.shadow_max_distance) & (
                transmittance[ray_ids] > cfg.transmittance_cutoff
            )

        # exp() of a huge optical depth underflows to zero
        return torch.clamp(transmittance, min=torch.finfo(dtype).tiny)

    def _sample_density(self, field: ScalarFieldBase, pos: torch.Tensor) -> torch.Tensor:
        """Queries the field, treating undefined and negative values as empty space."""
        density = field.sample_at(pos)
        if density.shape != pos.shape[:-1]:
            raise ValueError(
                "Expected a scalar field returning one value per point. "
                f"Got values of shape {density.shape} for points of shape {pos.shape}."
            )
        density = density.to(pos.dtype)
        density = torch.where(torch.isnan(density), torch.zeros_like(density), density)
        return torch.clamp(density, min=0.0)

    @property
    def config(self) -> RenderConfig:
        """Returns the parameters of the ray marcher."""
        return self._config
