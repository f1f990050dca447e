"""
Point lights and the Phong reflection model.
"""

from dataclasses import dataclass, field
import typing

import torch

from torch_volrender.src.geometry.vector import dot, length, normalize


@dataclass
class PointLight:
    """
    An omnidirectional light source.

    Attributes:
        position (Sequence[float]): Position in world space.
        color (Sequence[float]): RGB color of the specular highlight.
        intensity (float): Scale applied to the whole contribution of the light.
        radius (float): Size of the light point. Not used for shading.
    """

    position: typing.Sequence[float] = (0.0, 2.0, 0.0)
    color: typing.Sequence[float] = (1.0, 1.0, 1.0)
    intensity: float = 1.0
    radius: float = 0.1


@dataclass
class PhongLighting:
    """
    A collection of point lights shading surfaces with the Phong reflection model.

    Attributes:
        ambient (float): Ambient coefficient.
        diffuse (float): Diffuse coefficient.
        specular (float): Specular coefficient.
        shininess (float): Specular exponent.
        lights (List[PointLight]): Lights in the scene.
    """

    ambient: float = 0.2
    diffuse: float = 0.8
    specular: float = 0.5
    shininess: float = 16.0
    lights: typing.List[PointLight] = field(default_factory=list)

    def add_light(self, light: PointLight) -> None:
        """Adds a light to the scene."""
        if not isinstance(light, PointLight):
            raise ValueError(f"Expected a parameter of type PointLight. Got {type(light)}.")
        self.lights.append(light)

    def clear_lights(self) -> None:
        """Removes all lights."""
        self.lights.clear()

    def shade(
        self,
        points: torch.Tensor,
        normals: torch.Tensor,
        view_dirs: torch.Tensor,
        base_colors: torch.Tensor,
    ) -> torch.Tensor:
        """
        Evaluates the Phong model summed over all lights.

        Every light contributes ambient, diffuse and specular terms scaled by its
        intensity and by the distance attenuation 1 / (1 + 0.05 d + 0.001 d^2).

        Args:
            points (torch.Tensor): Tensor of shape (N, 3). Shaded points.
            normals (torch.Tensor): Tensor of shape (N, 3). Unit surface normals.
            view_dirs (torch.Tensor): Tensor of shape (N, 3). Unit vectors toward the viewer.
            base_colors (torch.Tensor): Tensor of shape (N, 3). Surface albedo.

        Returns:
            An instance of torch.Tensor of shape (N, 3) clamped to [0, 1].
        """
        total = torch.zeros_like(base_colors)

        for light in self.lights:
            light_pos = torch.as_tensor(light.position, dtype=points.dtype)
            light_color = torch.as_tensor(light.color, dtype=points.dtype)

            to_light = light_pos - points
            distance = length(to_light)
            light_dir = normalize(to_light)
            attenuation = 1.0 / (1.0 + 0.05 * distance + 0.001 * distance * distance)

            contribution = self.ambient * base_colors

            diffuse_factor = torch.clamp(dot(normals, light_dir), min=0.0)
            contribution = contribution + self.diffuse * diffuse_factor.unsqueeze(-1) * base_colors

            # reflect the incident direction (-light_dir) about the normal
            incident = -light_dir
            reflect_dir = incident - 2.0 * dot(incident, normals).unsqueeze(-1) * normals
            specular_factor = torch.clamp(dot(reflect_dir, view_dirs), min=0.0) ** self.shininess
            specular = self.specular * specular_factor.unsqueeze(-1) * light_color
            contribution = contribution + specular

            total = total + contribution * (attenuation * light.intensity).unsqueeze(-1)

        return torch.clamp(total, 0.0, 1.0)
