import math

import torch

from .vector_math import lattice_distance


class DecaySchedule:
    """
    Time dependent coefficients that decide how far a neuron moves towards an
    observation. Both trainers use `update_coefficient` (or its vectorised
    form) as the single update law.

        radius(t)             = W * exp(-t / tau1),   tau1 = epochs_number / W
        neighborhood_coef     = exp(-d^2 / (2 * radius(t)^2))
        learning_rate_coef(t) = eta0 * exp(-t / tau2)
    """
    def __init__(self, width: int, epochs_number: int, learning_rate: float, tau2: float):
        if width <= 0:
            raise ValueError(f"Neighborhood width must be positive. Got {width}")
        self.width = width
        self.tau1 = epochs_number / width
        self.learning_rate = learning_rate
        self.tau2 = tau2

    def radius(self, t: int) -> float:
        return self.width * math.exp(-t / self.tau1)

    def neighborhood_coef(self, winner: tuple[int, int], target: tuple[int, int], t: int) -> float:
        d = lattice_distance(winner, target)
        r = self.radius(t)
        two_r_sq = 2 * r * r
        if two_r_sq == 0.0:
            # radius squared underflowed: only the winner itself remains in the neighborhood
            return 1.0 if d == 0.0 else 0.0
        return math.exp(-d * d / two_r_sq)

    def learning_rate_coef(self, t: int) -> float:
        return self.learning_rate * math.exp(-t / self.tau2)

    def update_coefficient(self, winner: tuple[int, int], target: tuple[int, int], t: int) -> float:
        return self.learning_rate_coef(t) * self.neighborhood_coef(winner, target, t)

    def update_coefficients(self, distances: torch.Tensor, t: int) -> torch.Tensor:
        """
        Vectorised `update_coefficient` for a tensor of lattice distances,
        typically one row of the lattice distance matrix.
        """
        r = self.radius(t)
        two_r_sq = 2 * r * r
        if two_r_sq == 0.0:
            neighborhood = (distances == 0).to(distances.dtype)
        else:
            neighborhood = torch.exp(-distances ** 2 / two_r_sq)
        return self.learning_rate_coef(t) * neighborhood
