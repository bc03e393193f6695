"""
kohonen_map - Kohonen self-organizing map training on PyTorch, with online
(iterative) and batch procedures and dead-neuron pruning.
"""
from .batch import BatchSOM, BatchTrainingResult
from .config import TrainingConfig
from .dataset import Dataset, read_dataset, write_weights
from .decay import DecaySchedule
from .exceptions import DatasetFormatError, InsufficientAliveNeuronsError, KohonenError, ShapeMismatchError
from .iterative import IterativeSOM
from .lattice import Coord, Lattice, Neuron
from .report import NeuronReport, format_report, top_neurons
from .som import SOM, TrainingResult

__version__ = "0.1.0"

__all__ = [
    "SOM",
    "IterativeSOM",
    "BatchSOM",
    "TrainingResult",
    "BatchTrainingResult",
    "TrainingConfig",
    "DecaySchedule",
    "Lattice",
    "Neuron",
    "Coord",
    "Dataset",
    "read_dataset",
    "write_weights",
    "NeuronReport",
    "top_neurons",
    "format_report",
    "KohonenError",
    "ShapeMismatchError",
    "InsufficientAliveNeuronsError",
    "DatasetFormatError",
]
