"""
Similarity between observations and neuron weights.

Proximity is exp(-euclidean distance), so it lies in (0, 1] and the best
matching neuron is always the one with the largest value.
"""
import math
from typing import Collection

import torch

from .exceptions import ShapeMismatchError
from .lattice import Coord, Lattice
from .vector_math import distance


def proximity(observation: torch.Tensor, weights: torch.Tensor) -> float:
    return math.exp(-distance(observation, weights))


def proximity_matrix(observation: torch.Tensor, lattice: Lattice | torch.Tensor) -> torch.Tensor:
    """
    Proximity of one observation to every neuron.

    Args:
        observation (torch.Tensor): 1D tensor of length features_count.
        lattice (Lattice | torch.Tensor): The lattice, or a (size, size, features_count)
                                          weight grid such as a frozen copy of one.

    Returns:
        torch.Tensor: (size, size) matrix of proximities.
    """
    grid = lattice.grid() if isinstance(lattice, Lattice) else lattice
    if grid.dim() != 3 or observation.shape != grid.shape[2:]:
        raise ShapeMismatchError(
            f"Observation of shape {tuple(observation.shape)} does not match weights of shape {tuple(grid.shape)}"
        )
    return torch.exp(-torch.linalg.norm(grid - observation, dim=2))


def best_match(matrix: torch.Tensor) -> Coord:
    """
    Coordinate of the largest value in a proximity matrix.

    Ties go to the first coordinate in row-major order. A cell has to be
    strictly positive to be picked; if none is, (0, 0) is returned.
    """
    flat = matrix.flatten()
    # argmax returns the first maximal index, which is the row-major tie-break.
    index = int(torch.argmax(flat))
    if not flat[index] > 0.0:
        return Coord(0, 0)
    return Coord.from_index(index, matrix.shape[1])


def best_surviving_match(matrix: torch.Tensor, alive: Collection[tuple[int, int]]) -> Coord:
    """
    Like `best_match`, restricted to the coordinates in `alive`.

    Raises:
        ValueError: if `alive` is empty.
    """
    if len(alive) == 0:
        raise ValueError("best_surviving_match needs at least one alive neuron")

    size = matrix.shape[1]
    candidates = sorted(Coord(*coord).linear_index(size) for coord in alive)
    flat = matrix.flatten()
    masked = torch.full_like(flat, -math.inf)
    masked[candidates] = flat[candidates]
    return Coord.from_index(int(torch.argmax(masked)), size)
