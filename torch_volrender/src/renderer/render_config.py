"""
Configuration of the volumetric integrator.
"""

from dataclasses import dataclass, field
import math
from typing import List

from omegaconf import DictConfig, OmegaConf


@dataclass
class RenderConfig:
    """
    Parameters of the ray marcher.

    Attributes:
        step_size (float): World-space distance between consecutive samples, shared by
            primary and shadow rays.
        shadow_max_distance (float): How far shadow rays march toward the light.
        transmittance_cutoff (float): Marching stops once the transmittance drops to this value.
        phase (float): Value of the phase function. Isotropic scattering by default.
        light_color (List[float]): RGB color of the directional light.
    """

    step_size: float = 0.1
    shadow_max_distance: float = 20.0
    transmittance_cutoff: float = 0.01
    phase: float = 1.0 / (4.0 * math.pi)
    light_color: List[float] = field(default_factory=lambda: [1.0, 1.0, 1.0])

    def __post_init__(self):
        if self.step_size <= 0:
            raise ValueError(f"Expected a positive step size. Got {self.step_size}.")
        if self.shadow_max_distance <= 0:
            raise ValueError(
                f"Expected a positive shadow ray distance. Got {self.shadow_max_distance}."
            )
        if not 0.0 <= self.transmittance_cutoff < 1.0:
            raise ValueError(
                f"Expected a transmittance cutoff in [0, 1). Got {self.transmittance_cutoff}."
            )
        if self.phase < 0:
            raise ValueError(f"Expected a non-negative phase value. Got {self.phase}.")
        if len(self.light_color) != 3:
            raise ValueError(f"Expected an RGB light color. Got {list(self.light_color)}.")

    @classmethod
    def from_cfg(cls, cfg: DictConfig) -> "RenderConfig":
        """
        Builds the configuration from a config node, filling unspecified keys with defaults.

        Keys are checked against the dataclass schema, so a typo raises instead of being ignored.
        """
        schema = OmegaConf.structured(cls)
        merged = OmegaConf.merge(schema, cfg)
        return OmegaConf.to_object(merged)
