import torch

from .lattice import Coord
from .proximity import best_match, proximity_matrix
from .som import SOM


class IterativeSOM(SOM):
    """
    Online training: every observation moves every neuron as soon as its
    winner is known, so later observations of the same sweep already see the
    updated weights.
    """
    default_learning_rate = 0.1

    def _train_epoch(self,
                     data: torch.Tensor,
                     assignments: dict[Coord, list[int]],
                     winner_weights: torch.Tensor,
                     time: int):
        weights = self.lattice.weights

        for index, observation in enumerate(data):
            # 1. Find the winner against the current weights
            winner = best_match(proximity_matrix(observation, self.lattice))

            # 2. Pull every neuron towards the observation, weighted by its lattice distance to the winner
            coefs = self.schedule.update_coefficients(self.lattice_distances[self.lattice.index(winner)], time)
            weights.add_(coefs.unsqueeze(1) * (observation - weights))

            # 3. Winner weights after this observation's update, used for the representation error
            winner_weights[index] = self.lattice.get(winner).weights
            assignments[winner].append(index)
