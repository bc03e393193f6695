"""
Reading training data and writing trained weights.

Dataset format: whitespace separated text. The first line holds two integers,
`features_count output_length`. Every following line holds `features_count`
real values and `output_length` label values for one observation.
"""
import logging
import os
from dataclasses import dataclass
from typing import Iterable

import torch

from .exceptions import DatasetFormatError
from .lattice import Lattice

log = logging.getLogger(__name__)


@dataclass
class Dataset:
    inputs: list[list[float]]
    outputs: list[list[int]]
    features_count: int
    output_length: int

    def __len__(self) -> int:
        return len(self.inputs)

    def input_tensor(self, dtype: torch.dtype = torch.float64, device: str | torch.device = 'cpu') -> torch.Tensor:
        return torch.tensor(self.inputs, dtype=dtype, device=device).reshape(len(self.inputs), self.features_count)


def parse_dataset(lines: Iterable[str]) -> Dataset:
    lines = iter(lines)
    header = next(lines, None)
    if header is None or not header.strip():
        raise DatasetFormatError("missing header line", 1)
    try:
        features_count, output_length = (int(value) for value in header.split())
    except ValueError:
        raise DatasetFormatError(f"header must be two integers, got {header.strip()!r}", 1) from None
    if features_count < 1 or output_length < 0:
        raise DatasetFormatError(f"invalid header {features_count} {output_length}", 1)

    inputs, outputs = [], []
    expected = features_count + output_length
    for line_number, line in enumerate(lines, start=2):
        values = line.split()
        if not values:
            continue
        if len(values) != expected:
            raise DatasetFormatError(f"expected {expected} values, got {len(values)}", line_number)
        try:
            row = [float(value) for value in values]
            # labels are truncated towards zero
            labels = [int(value) for value in row[features_count:]]
        except (ValueError, OverflowError) as exc:
            raise DatasetFormatError(str(exc), line_number) from None
        inputs.append(row[:features_count])
        outputs.append(labels)

    return Dataset(inputs, outputs, features_count, output_length)


def read_dataset(path: str | os.PathLike) -> Dataset:
    with open(path, encoding='utf-8') as f:
        dataset = parse_dataset(f)
    log.info("Loaded %d observations with %d features and %d labels from %s",
             len(dataset), dataset.features_count, dataset.output_length, path)
    return dataset


def write_weights(lattice: Lattice, path: str | os.PathLike):
    """One neuron per line, row-major, weights separated by spaces."""
    with open(path, 'w', encoding='utf-8') as f:
        for row in lattice.weight_rows():
            f.write(row + "\n")
    log.info("Stored %dx%d lattice weights in %s", lattice.size, lattice.size, path)
