"""Vector helpers shared by the proximity search and both trainers."""
import math
from typing import Sequence

import torch

from .exceptions import ShapeMismatchError


def _check_same_shape(a: torch.Tensor, b: torch.Tensor):
    if a.shape != b.shape:
        raise ShapeMismatchError(f"Vectors must have the same shape. Got {tuple(a.shape)} and {tuple(b.shape)}")


def distance(a: torch.Tensor, b: torch.Tensor) -> float:
    """Euclidean distance between two equal-length vectors."""
    _check_same_shape(a, b)
    return torch.linalg.norm(a - b).item()


def difference(a: torch.Tensor, b: torch.Tensor) -> torch.Tensor:
    """Element-wise a - b."""
    _check_same_shape(a, b)
    return a - b


def mean_vector(vectors: torch.Tensor | Sequence[torch.Tensor],
                features_count: int,
                dtype: torch.dtype = torch.float64,
                device: str | torch.device = 'cpu') -> torch.Tensor:
    """
    Element-wise mean of a collection of vectors.

    Args:
        vectors: Either a (n, features_count) tensor or a sequence of
                 1D tensors of length features_count.
        features_count (int): Expected vector length.
        dtype, device: Used for the zero vector returned for an empty collection.

    Returns:
        torch.Tensor: The mean vector, or a zero vector when there is nothing to average.
    """
    if not isinstance(vectors, torch.Tensor):
        if len(vectors) == 0:
            return torch.zeros(features_count, dtype=dtype, device=device)
        vectors = torch.stack(list(vectors))

    if vectors.dim() != 2 or vectors.shape[1] != features_count:
        raise ShapeMismatchError(f"Vectors must have {features_count} features. Got shape {tuple(vectors.shape)}")
    if vectors.shape[0] == 0:
        return torch.zeros(features_count, dtype=vectors.dtype, device=vectors.device)
    return vectors.mean(dim=0)


def lattice_distance(a: tuple[int, int], b: tuple[int, int]) -> float:
    """Distance between two lattice coordinates treated as points in the plane."""
    return math.hypot(a[0] - b[0], a[1] - b[1])


def lattice_distance_matrix(size: int, device: str | torch.device = 'cpu',
                            dtype: torch.dtype = torch.float64) -> torch.Tensor:
    """
    All pairwise lattice distances of a size x size grid, indexed by the
    row-major linear index of each neuron. Shape: (size * size, size * size).
    """
    rows, cols = torch.meshgrid(
        torch.arange(size, device=device, dtype=dtype),
        torch.arange(size, device=device, dtype=dtype),
        indexing='ij'
    )
    locations = torch.stack([rows.flatten(), cols.flatten()], dim=1)
    # Broadcasting: (n, 1, 2) - (1, n, 2). Integer coordinates keep the result exact.
    deltas = locations.unsqueeze(1) - locations.unsqueeze(0)
    return torch.sqrt(torch.sum(deltas ** 2, dim=2))
