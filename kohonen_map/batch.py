import logging
from dataclasses import dataclass, field
from typing import Sequence

import torch

from .exceptions import InsufficientAliveNeuronsError
from .lattice import Coord
from .proximity import best_match, best_surviving_match, proximity_matrix
from .report import NeuronReport, top_neurons
from .som import SOM, TrainingResult, training_error
from .vector_math import mean_vector

log = logging.getLogger(__name__)


@dataclass
class BatchTrainingResult(TrainingResult):
    """
    Attributes:
        alive_neurons (dict[Coord, list[int]]): Neurons with more than
            `BatchSOM.min_alive_observations - 1` observations after training,
            including the observations redistributed from dead neurons. Row-major.
        pruned_error (float | None): Representation error after redistribution.
        report (list[NeuronReport] | None): Popularity report, built when label
            vectors were passed to `run`.
    """
    alive_neurons: dict[Coord, list[int]] = field(default_factory=dict)
    pruned_error: float | None = None
    report: list[NeuronReport] | None = None


class BatchSOM(SOM):
    """
    Batch training: all winners of an epoch are found against the weights as
    they were at the start of the epoch, then every neuron is set to a
    neighborhood weighted average of the observations won around it.

    After convergence neurons that won fewer than three observations are
    treated as dead and their observations are moved to the closest alive neuron.
    """
    default_learning_rate = 0.1
    min_alive_observations = 3
    report_size = 3

    def run(self, input_data, output_vectors: Sequence[Sequence[int]] | None = None) -> BatchTrainingResult:
        """
        Trains the lattice, prunes dead neurons and redistributes their observations.

        Args:
            input_data: (num_samples, features_count) tensor or nested sequence.
            output_vectors: Optional label vector per observation. When given, the
                            result carries the report of the most popular neurons.

        Returns:
            BatchTrainingResult

        Raises:
            InsufficientAliveNeuronsError: if no neuron survives pruning while
                observations need a new owner, or if a report was requested and
                fewer than `report_size` neurons survived.
        """
        data = self._prepare_data(input_data)
        self._check_output_vectors(output_vectors, data.shape[0])

        trained = self._train(data)
        log.info("Training error before excluding dead neurons: %.6f", trained.error)

        alive_neurons = self.prune(trained.assignments)
        self.redistribute(data, trained.assignments, alive_neurons, trained.winner_weights)
        pruned_error = training_error(trained.winner_weights, data)
        log.info("Training error after excluding dead neurons: %.6f (%d alive neurons)",
                 pruned_error, len(alive_neurons))

        report = None
        if output_vectors is not None:
            report = self.report(alive_neurons, output_vectors)

        return BatchTrainingResult(
            epochs=trained.epochs,
            error=trained.error,
            converged=trained.converged,
            assignments=trained.assignments,
            winner_weights=trained.winner_weights,
            alive_neurons=alive_neurons,
            pruned_error=pruned_error,
            report=report,
        )

    def _train_epoch(self,
                     data: torch.Tensor,
                     assignments: dict[Coord, list[int]],
                     winner_weights: torch.Tensor,
                     time: int):
        # Winners are searched on a frozen copy; updates become visible next epoch.
        frozen = self.lattice.grid().clone()
        for index, observation in enumerate(data):
            winner = best_match(proximity_matrix(observation, frozen))
            winner_weights[index] = frozen[winner.row, winner.col]
            assignments[winner].append(index)

        self._update_weights(data, assignments, time)

    def _update_weights(self, data: torch.Tensor, assignments: dict[Coord, list[int]], time: int):
        coords = list(self.lattice.coords())
        counts = torch.tensor([len(assignments[coord]) for coord in coords], dtype=self.dtype, device=self.device)
        means = torch.stack([
            mean_vector(self._observations(data, assignments[coord]), self.features_count,
                        dtype=self.dtype, device=self.device)
            for coord in coords
        ])

        # Row = neuron being updated, column = neighbor contributing its mean observation.
        in_neighborhood = (self.lattice_distances <= self.schedule.radius(time)).to(self.dtype)
        coefs = self.schedule.update_coefficients(self.lattice_distances, time) * in_neighborhood
        coefs = coefs * counts.unsqueeze(0)

        numerator = coefs @ means
        denominator = coefs.sum(dim=1)

        # Neurons without evidence in their neighborhood keep their weights.
        has_evidence = denominator != 0
        self.lattice.weights[has_evidence] = numerator[has_evidence] / denominator[has_evidence].unsqueeze(1)

    def _observations(self, data: torch.Tensor, indices: list[int]) -> torch.Tensor:
        return data[torch.tensor(indices, dtype=torch.long, device=self.device)]

    def prune(self, assignments: dict[Coord, list[int]]) -> dict[Coord, list[int]]:
        """Neurons with at least `min_alive_observations` observations, row-major."""
        return {
            coord: list(indices)
            for coord, indices in assignments.items()
            if len(indices) >= self.min_alive_observations
        }

    def redistribute(self,
                     data: torch.Tensor,
                     assignments: dict[Coord, list[int]],
                     alive_neurons: dict[Coord, list[int]],
                     winner_weights: torch.Tensor):
        """
        Moves the observations of dead neurons that won one or two of them to the
        closest alive neuron, updating `alive_neurons` and `winner_weights` in place.
        Neurons that won nothing are skipped.
        """
        for coord in sorted(assignments, key=self.lattice.index):
            indices = assignments[coord]
            if coord in alive_neurons or not indices:
                continue
            if not alive_neurons:
                raise InsufficientAliveNeuronsError(1, 0)

            for index in indices:
                matrix = proximity_matrix(data[index], self.lattice)
                closest = best_surviving_match(matrix, alive_neurons)
                alive_neurons[closest].append(index)
                winner_weights[index] = self.lattice.get(closest).weights
            log.debug("Moved %d observation(s) of dead neuron %s", len(indices), tuple(coord))

    def report(self, alive_neurons: dict[Coord, list[int]],
               output_vectors: Sequence[Sequence[int]]) -> list[NeuronReport]:
        return top_neurons(alive_neurons, self.lattice, output_vectors, count=self.report_size)
