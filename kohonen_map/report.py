"""Popularity report over the neurons that survived pruning."""
from dataclasses import dataclass
from typing import Mapping, Sequence

from .exceptions import InsufficientAliveNeuronsError
from .lattice import Coord, Lattice


@dataclass
class NeuronReport:
    coord: Coord
    weights: list[float]
    observations: list[int]
    class_representation: list[float]


def rank_by_popularity(alive_neurons: Mapping[Coord, list[int]],
                       lattice: Lattice) -> list[tuple[Coord, list[int]]]:
    """Neurons ordered by number of observations, descending. Ties keep row-major order."""
    ordered = sorted(alive_neurons.items(), key=lambda item: lattice.index(item[0]))
    return sorted(ordered, key=lambda item: len(item[1]), reverse=True)


def top_neurons(alive_neurons: Mapping[Coord, list[int]],
                lattice: Lattice,
                output_vectors: Sequence[Sequence[int]],
                count: int = 3) -> list[NeuronReport]:
    """
    Weights and label composition of the `count` most popular alive neurons.

    The class representation of a neuron is, per label dimension, the sum of
    that label over the neuron's observations as a percentage of its number
    of observations.

    Note: the number of label dimensions is read from `output_vectors[rank]`,
    the label vector at the neuron's rank position, not from the neuron's own
    observations. Label vectors of equal length make this irrelevant.

    Raises:
        InsufficientAliveNeuronsError: if fewer than `count` neurons are alive.
    """
    if len(alive_neurons) < count:
        raise InsufficientAliveNeuronsError(count, len(alive_neurons))

    reports = []
    for rank, (coord, observations) in enumerate(rank_by_popularity(alive_neurons, lattice)[:count]):
        classes = [0.0] * len(output_vectors[rank])
        for index in observations:
            classes = [total + value for total, value in zip(classes, output_vectors[index])]
        classes = [100.0 * total / len(observations) for total in classes]

        reports.append(NeuronReport(
            coord=coord,
            weights=lattice.get(coord).weights.tolist(),
            observations=list(observations),
            class_representation=classes,
        ))
    return reports


def format_report(reports: Sequence[NeuronReport]) -> str:
    lines = [f"Top {len(reports)} neuron weights by popularity:"]
    for report in reports:
        lines.append(" ".join(f"{weight:.6g}" for weight in report.weights))
        lines.append("Class representation: " + " ".join(f"{share:g}%" for share in report.class_representation))
        lines.append("")
    return "\n".join(lines)
