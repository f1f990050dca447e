"""
Camera classes used inside renderer(s).
"""

import math
import typing

import torch

from torch_volrender.src.geometry.vector import cross, length, normalize
from torch_volrender.src.renderer.rays import RayBundle


class PinholeCamera(object):
    """
    Pinhole camera defined by a position, a point to look at and an up vector.

    Attributes:
        position (torch.Tensor): Tensor of shape (3,). Camera position in world space.
        look_at (torch.Tensor): Tensor of shape (3,). Point the camera is looking at.
        up (torch.Tensor): Tensor of shape (3,). Approximate up direction.
        fov (float): Vertical field of view in degrees.
        aspect (float): Ratio of image width to image height.
        near (float): Distance to the near clipping plane.
        far (float): Distance to the far clipping plane.
        forward, right, up_vector (torch.Tensor): Orthonormal camera basis derived from
            position, look_at and up. Recomputed whenever one of them changes.
    """

    def __init__(
        self,
        position: typing.Union[torch.Tensor, typing.Sequence[float]],
        look_at: typing.Union[torch.Tensor, typing.Sequence[float]] = (0.0, 0.0, -1.0),
        up: typing.Union[torch.Tensor, typing.Sequence[float]] = (0.0, 1.0, 0.0),
        fov: float = 60.0,
        aspect: float = 16.0 / 9.0,
        near: float = 0.1,
        far: float = 1000.0,
        dtype: torch.dtype = torch.float32,
    ):
        """
        Constructor of class 'PinholeCamera'.

        Args:
            position (torch.Tensor): Tensor of shape (3,). Camera position in world space.
            look_at (torch.Tensor): Tensor of shape (3,). Point the camera is looking at.
            up (torch.Tensor): Tensor of shape (3,). Approximate up direction.
            fov (float): Vertical field of view in degrees.
            aspect (float): Ratio of image width to image height.
            near (float): Distance to the near clipping plane.
            far (float): Distance to the far clipping plane.
            dtype (torch.dtype): Floating point type of the generated rays.
        """
        if not 0.0 < fov < 180.0:
            raise ValueError(f"Expected a field of view in (0, 180) degrees. Got {fov}.")
        if aspect <= 0:
            raise ValueError(f"Expected a positive aspect ratio. Got {aspect}.")
        if not 0.0 < near < far:
            raise ValueError(f"Expected 0 < near < far. Got near={near}, far={far}.")

        self._dtype = dtype
        self._position = self._as_vector(position)
        self._look_at = self._as_vector(look_at)
        self._up = self._as_vector(up)
        self._fov = float(fov)
        self._aspect = float(aspect)
        self._near = float(near)
        self._far = float(far)

        self._update_basis()

    def _as_vector(self, value) -> torch.Tensor:
        value = torch.as_tensor(value, dtype=self._dtype)
        if value.shape != torch.Size((3,)):
            raise ValueError(f"Expected a tensor of shape (3,). Got {value.shape}.")
        return value

    def _update_basis(self) -> None:
        """
        Computes the orthonormal basis (forward, right, up_vector) of the camera.
        """
        to_target = self._look_at - self._position
        if float(length(to_target)) <= 1e-8:
            raise ValueError("Camera position and look-at point coincide.")
        forward = normalize(to_target)

        right = cross(forward, self._up)
        if float(length(right)) <= 1e-8:
            raise ValueError(
                "Expected an up vector not parallel to the view direction. "
                f"Got up={self._up.tolist()} for forward={forward.tolist()}."
            )
        right = normalize(right)

        self._forward = forward
        self._right = right
        self._up_vector = normalize(cross(right, forward))

    def generate_rays(
        self,
        u: torch.Tensor,
        v: torch.Tensor,
    ) -> RayBundle:
        """
        Maps normalized image coordinates to view rays.

        (u, v) = (0.5, 0.5) is the image center, u grows to the right and v grows upward,
        so v = 1 is the top edge of the image.

        Args:
            u (torch.Tensor): Tensor of shape (N,). Horizontal coordinates in [0, 1].
            v (torch.Tensor): Tensor of shape (N,). Vertical coordinates in [0, 1].

        Returns:
            ray_bundle (RayBundle): Rays starting at the camera position with unit directions.
        """
        u = torch.as_tensor(u, dtype=self._dtype).reshape(-1, 1)
        v = torch.as_tensor(v, dtype=self._dtype).reshape(-1, 1)

        viewport_height = 2.0 * math.tan(math.radians(self._fov) / 2.0)
        viewport_width = viewport_height * self._aspect

        ray_dir = (
            self._forward
            + self._right * (u - 0.5) * viewport_width
            + self._up_vector * (v - 0.5) * viewport_height
        )
        ray_origin = self._position.expand_as(ray_dir)

        return RayBundle(ray_origin, ray_dir)

    def view_matrix(self) -> torch.Tensor:
        """
        Returns the 4x4 matrix transforming world coordinates into the camera frame.

        The camera looks down its negative z-axis.
        """
        rotation = torch.stack([self._right, self._up_vector, -self._forward], dim=0)
        view = torch.eye(4, dtype=self._dtype)
        view[:3, :3] = rotation
        view[:3, 3] = -(rotation @ self._position)
        return view

    def projection_matrix(self) -> torch.Tensor:
        """
        Returns the 4x4 perspective projection matrix mapping the view frustum to clip space.
        """
        tan_half_fov = math.tan(math.radians(self._fov) / 2.0)
        near, far = self._near, self._far

        projection = torch.zeros((4, 4), dtype=self._dtype)
        projection[0, 0] = 1.0 / (self._aspect * tan_half_fov)
        projection[1, 1] = 1.0 / tan_half_fov
        projection[2, 2] = -(far + near) / (far - near)
        projection[2, 3] = -2.0 * far * near / (far - near)
        projection[3, 2] = -1.0
        return projection

    @property
    def position(self) -> torch.Tensor:
        """Returns the camera position."""
        return self._position

    @property
    def look_at(self) -> torch.Tensor:
        """Returns the point the camera is looking at."""
        return self._look_at

    @property
    def up(self) -> torch.Tensor:
        """Returns the up vector the camera was configured with."""
        return self._up

    @property
    def forward(self) -> torch.Tensor:
        """Returns the unit view direction."""
        return self._forward

    @property
    def right(self) -> torch.Tensor:
        """Returns the unit vector pointing to the right of the image."""
        return self._right

    @property
    def up_vector(self) -> torch.Tensor:
        """Returns the unit vector pointing to the top of the image."""
        return self._up_vector

    @property
    def fov(self) -> float:
        """Returns the vertical field of view in degrees."""
        return self._fov

    @property
    def aspect(self) -> float:
        """Returns the aspect ratio of the image."""
        return self._aspect

    @property
    def near(self) -> float:
        """Returns the distance to the near clipping plane."""
        return self._near

    @property
    def far(self) -> float:
        """Returns the distance to the far clipping plane."""
        return self._far

    @property
    def dtype(self) -> torch.dtype:
        """Returns the floating point type of the generated rays."""
        return self._dtype

    @position.setter
    def position(self, new_position: torch.Tensor) -> None:
        self._position = self._as_vector(new_position)
        self._update_basis()

    @look_at.setter
    def look_at(self, new_look_at: torch.Tensor) -> None:
        self._look_at = self._as_vector(new_look_at)
        self._update_basis()

    @up.setter
    def up(self, new_up: torch.Tensor) -> None:
        self._up = self._as_vector(new_up)
        self._update_basis()

    @fov.setter
    def fov(self, new_fov: float) -> None:
        if not isinstance(new_fov, (int, float)):
            raise ValueError(f"Expected variable of numeric type. Got {type(new_fov)}.")
        if not 0.0 < new_fov < 180.0:
            raise ValueError(f"Expected a field of view in (0, 180) degrees. Got {new_fov}.")
        self._fov = float(new_fov)

    @aspect.setter
    def aspect(self, new_aspect: float) -> None:
        if not isinstance(new_aspect, (int, float)):
            raise ValueError(f"Expected variable of numeric type. Got {type(new_aspect)}.")
        if new_aspect <= 0:
            raise ValueError(f"Expected a positive aspect ratio. Got {new_aspect}.")
        self._aspect = float(new_aspect)
