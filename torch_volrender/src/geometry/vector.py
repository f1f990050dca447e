"""
Minimal 3-vector algebra on tensors whose trailing dimension is 3.

Addition, subtraction and scaling are plain tensor arithmetic; the helpers below
cover the remaining operations used by the renderers.
"""

import typing

import torch


def vec3(
    x: typing.Union[float, typing.Sequence[float], torch.Tensor],
    y: typing.Optional[float] = None,
    z: typing.Optional[float] = None,
    dtype: torch.dtype = torch.float32,
) -> torch.Tensor:
    """
    Builds a tensor of shape (3,).

    Accepts either three scalars or a single sequence / tensor holding three numbers.
    """
    if y is None and z is None:
        value = torch.as_tensor(x, dtype=dtype)
        if value.ndim == 0:  # broadcast a scalar, e.g. vec3(1.0)
            value = value.repeat(3)
    else:
        value = torch.tensor([float(x), float(y), float(z)], dtype=dtype)

    if value.shape != torch.Size((3,)):
        raise ValueError(f"Expected three components. Got a tensor of shape {value.shape}.")
    return value


def dot(a: torch.Tensor, b: torch.Tensor) -> torch.Tensor:
    """Computes the dot product along the last dimension."""
    return torch.sum(a * b, dim=-1)


def cross(a: torch.Tensor, b: torch.Tensor) -> torch.Tensor:
    """Computes the cross product along the last dimension."""
    a, b = torch.broadcast_tensors(a, b)
    return torch.linalg.cross(a, b, dim=-1)


def length(a: torch.Tensor) -> torch.Tensor:
    """Computes the Euclidean length along the last dimension."""
    return torch.linalg.vector_norm(a, ord=2, dim=-1)


def normalize(a: torch.Tensor, eps: float = 1e-12) -> torch.Tensor:
    """
    Scales vectors to unit length.

    Vectors whose length does not exceed 'eps' are returned as zero vectors
    instead of being divided by zero.
    """
    norm = length(a).unsqueeze(-1)
    safe_norm = torch.where(norm > eps, norm, torch.ones_like(norm))
    return torch.where(norm > eps, a / safe_norm, torch.zeros_like(a))


def vmin(a: torch.Tensor, b: torch.Tensor) -> torch.Tensor:
    """Componentwise minimum."""
    return torch.minimum(a, b)


def vmax(a: torch.Tensor, b: torch.Tensor) -> torch.Tensor:
    """Componentwise maximum."""
    return torch.maximum(a, b)
