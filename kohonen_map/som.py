import logging
from dataclasses import dataclass
from typing import Sequence

import torch

from .config import TrainingConfig
from .dataset import write_weights
from .decay import DecaySchedule
from .exceptions import ShapeMismatchError
from .lattice import Coord, Lattice
from .proximity import best_match, proximity_matrix
from .vector_math import lattice_distance_matrix

log = logging.getLogger(__name__)

# Errors the convergence loop starts from; they guarantee at least one sweep.
INITIAL_PREVIOUS_ERROR = 0.0
INITIAL_CURRENT_ERROR = 1e3


@dataclass
class TrainingResult:
    """
    Outcome of a training run.

    Attributes:
        epochs (int): Number of sweeps over the data that were executed.
        error (float): Representation error after the last sweep.
        converged (bool): False when `max_epochs` ran out before the error settled.
        assignments (dict[Coord, list[int]]): Observation indices won by each
                                              neuron in the last sweep, row-major.
        winner_weights (torch.Tensor): (num_samples, features_count) weights of
                                       the neuron that won each observation.
    """
    epochs: int
    error: float
    converged: bool
    assignments: dict[Coord, list[int]]
    winner_weights: torch.Tensor


def training_error(winner_weights: torch.Tensor, data: torch.Tensor) -> float:
    """Sum over all observations of the squared distance to their winner's weights."""
    if winner_weights.shape != data.shape:
        raise ShapeMismatchError(
            f"Winner weights of shape {tuple(winner_weights.shape)} do not match data of shape {tuple(data.shape)}"
        )
    return torch.sum((winner_weights - data) ** 2).item()


class SOM:
    """
    Common state and convergence loop of the Kohonen map trainers.

    Subclasses implement `_train_epoch`, a single sweep over the data that
    fills the assignment table and the winner weights and moves the lattice.
    """
    default_learning_rate = 0.01

    def __init__(self,
                 lattice_size: int,
                 features_count: int,
                 epochs_number: int = 1000,
                 learning_rate: float | None = None,
                 tau2: int = 1000,
                 training_error: float = 1e-3,
                 max_epochs: int | None = None,
                 device: str | torch.device = 'cpu',
                 dtype: torch.dtype = torch.float64,
                 random_seed: int | None = None
                ):
        """
        Initializes the lattice and the decay schedule.

        Args:
            lattice_size (int): Side length of the square lattice.
            features_count (int): Dimensionality of the observations.
            epochs_number (int): Derives the radius time constant, not an iteration cap.
            learning_rate (float | None): Initial learning rate. None picks the class default.
            tau2 (int): Time constant of the learning rate decay.
            training_error (float): Convergence threshold on the error change between sweeps.
            max_epochs (int | None): Optional safety bound on the number of sweeps.
            device (str | torch.device): Device for computation.
            dtype (torch.dtype): Floating point type of weights and data.
            random_seed (int | None): Seed for random weight initialization.
        """
        if learning_rate is None:
            learning_rate = self.default_learning_rate
        self.config = TrainingConfig(
            lattice_size=lattice_size,
            features_count=features_count,
            epochs_number=epochs_number,
            learning_rate=learning_rate,
            tau2=tau2,
            training_error=training_error,
            max_epochs=max_epochs,
        )
        self.device = torch.device(device)
        self.dtype = dtype

        self.lattice = Lattice(lattice_size, features_count, device=self.device, dtype=dtype,
                               random_seed=random_seed)
        self.schedule = DecaySchedule(self.lattice.neighborhood_width, epochs_number, learning_rate, tau2)

        # Geometry only, so it is computed once and shared by every epoch.
        self.lattice_distances = lattice_distance_matrix(lattice_size, device=self.device, dtype=dtype)

    @classmethod
    def from_config(cls, config: TrainingConfig, **kwargs) -> 'SOM':
        return cls(
            config.lattice_size,
            config.features_count,
            epochs_number=config.epochs_number,
            learning_rate=config.learning_rate,
            tau2=config.tau2,
            training_error=config.training_error,
            max_epochs=config.max_epochs,
            **kwargs,
        )

    @property
    def lattice_size(self) -> int:
        return self.config.lattice_size

    @property
    def features_count(self) -> int:
        return self.config.features_count

    def _prepare_data(self, data) -> torch.Tensor:
        data = torch.as_tensor(data, dtype=self.dtype, device=self.device)
        if data.dim() != 2 or data.shape[1] != self.features_count:
            raise ShapeMismatchError(
                f"Input data must be 2D with {self.features_count} features. Got shape {tuple(data.shape)}"
            )
        if data.shape[0] == 0:
            raise ValueError("Input data must contain at least one observation")
        return data

    def _check_output_vectors(self, output_vectors: Sequence[Sequence[int]] | None, num_samples: int):
        if output_vectors is not None and len(output_vectors) != num_samples:
            raise ShapeMismatchError(
                f"Expected one label vector per observation ({num_samples}). Got {len(output_vectors)}"
            )

    def new_assignment_table(self) -> dict[Coord, list[int]]:
        return {coord: [] for coord in self.lattice.coords()}

    def run(self, input_data, output_vectors: Sequence[Sequence[int]] | None = None) -> TrainingResult:
        """
        Trains the lattice until the representation error settles.

        Args:
            input_data: (num_samples, features_count) tensor or nested sequence.
            output_vectors: Optional label vector per observation, used for reporting only.

        Returns:
            TrainingResult
        """
        data = self._prepare_data(input_data)
        self._check_output_vectors(output_vectors, data.shape[0])
        return self._train(data)

    def _train(self, data: torch.Tensor) -> TrainingResult:
        winner_weights = torch.zeros_like(data)
        assignments = self.new_assignment_table()

        max_epochs = self.config.max_epochs
        prev_error = INITIAL_PREVIOUS_ERROR
        curr_error = INITIAL_CURRENT_ERROR
        converged = True
        time = 0

        while abs(curr_error - prev_error) > self.config.training_error:
            if max_epochs is not None and time >= max_epochs:
                converged = False
                log.warning("%s did not converge within %d epochs (last error change %.6g)",
                            type(self).__name__, max_epochs, abs(curr_error - prev_error))
                break

            for indices in assignments.values():
                indices.clear()
            self._train_epoch(data, assignments, winner_weights, time)

            prev_error = curr_error
            curr_error = training_error(winner_weights, data)
            log.debug("Epoch %d: error %.6f, delta error %.6g", time, curr_error, abs(curr_error - prev_error))
            time += 1

        log.info("%s finished after %d epochs with training error %.6f", type(self).__name__, time, curr_error)
        return TrainingResult(
            epochs=time,
            error=curr_error,
            converged=converged,
            assignments=assignments,
            winner_weights=winner_weights,
        )

    def _train_epoch(self,
                     data: torch.Tensor,
                     assignments: dict[Coord, list[int]],
                     winner_weights: torch.Tensor,
                     time: int):
        raise NotImplementedError

    def get_weights(self) -> torch.Tensor:
        """Returns a copy of the current lattice weights, (size * size, features_count)."""
        return self.lattice.weights.clone().detach()

    def get_neuron_locations(self) -> torch.Tensor:
        """Returns the (row, col) location of every neuron, row-major."""
        return self.lattice.locations()

    def map_to_bmu_locations(self, data) -> list[Coord]:
        """Best matching neuron of every observation against the current weights."""
        data = self._prepare_data(data)
        return [best_match(proximity_matrix(observation, self.lattice)) for observation in data]

    def representation_error(self, data) -> float:
        """Representation error of `data` against the current weights."""
        data = self._prepare_data(data)
        bmu_indices = [self.lattice.index(coord) for coord in self.map_to_bmu_locations(data)]
        return training_error(self.lattice.weights[bmu_indices], data)

    def store_weights(self, path):
        """Writes the lattice weights to `path`, one neuron per line."""
        write_weights(self.lattice, path)

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(lattice_size={self.lattice_size}, "
                f"features_count={self.features_count}, device='{self.device.type}')")
