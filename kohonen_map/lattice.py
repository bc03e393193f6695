from typing import Iterator, NamedTuple

import torch


class Coord(NamedTuple):
    """Lattice coordinate of a neuron."""
    row: int
    col: int

    def linear_index(self, size: int) -> int:
        """Row-major position of the coordinate in a size x size lattice."""
        return self.row * size + self.col

    @classmethod
    def from_index(cls, index: int, size: int) -> 'Coord':
        return cls(index // size, index % size)


class Neuron:
    """
    A single lattice cell. The weight vector is a view into the owning
    lattice's weight buffer, so trainers update it in place.
    """
    def __init__(self, lattice: 'Lattice', coord: Coord):
        self.lattice = lattice
        self.coord = coord

    @property
    def weights(self) -> torch.Tensor:
        return self.lattice.weights[self.coord.linear_index(self.lattice.size)]

    @weights.setter
    def weights(self, values: torch.Tensor):
        self.weights.copy_(values)

    def __repr__(self) -> str:
        return f"Neuron(row={self.coord.row}, col={self.coord.col})"


class Lattice:
    """
    Square grid of neurons that owns the weight storage for all of them.

    Weights are kept in a single (size * size, features_count) tensor laid out
    in row-major order; `grid()` exposes the same storage as (size, size, features_count).
    """
    def __init__(self,
                 size: int,
                 features_count: int,
                 device: str | torch.device = 'cpu',
                 dtype: torch.dtype = torch.float64,
                 random_seed: int | None = None
                ):
        """
        Args:
            size (int): Side length of the lattice.
            features_count (int): Length of every weight vector.
            device (str | torch.device): Device holding the weights.
            dtype (torch.dtype): Floating point type of the weights.
            random_seed (int | None): Seed for the uniform [0, 1) initialisation.
        """
        if size < 1:
            raise ValueError(f"Lattice size must be positive. Got {size}")
        if features_count < 1:
            raise ValueError(f"features_count must be positive. Got {features_count}")

        self.size = size
        self.features_count = features_count
        self.device = torch.device(device)
        self.dtype = dtype

        if random_seed is not None:
            torch.manual_seed(random_seed)

        self.weights = torch.rand(size * size, features_count, device=self.device, dtype=dtype)
        self._neurons = [Neuron(self, Coord.from_index(i, size)) for i in range(size * size)]

    @property
    def neighborhood_width(self) -> int:
        """Initial neighborhood radius."""
        return self.size // 2

    def __len__(self) -> int:
        return len(self._neurons)

    def __iter__(self) -> Iterator[Neuron]:
        return iter(self._neurons)

    def coords(self) -> Iterator[Coord]:
        """All coordinates in row-major order."""
        for neuron in self._neurons:
            yield neuron.coord

    def index(self, coord: tuple[int, int]) -> int:
        row, col = coord
        if not (0 <= row < self.size and 0 <= col < self.size):
            raise IndexError(f"Coordinate {coord} is outside a {self.size}x{self.size} lattice")
        return row * self.size + col

    def get(self, row: int | tuple[int, int], col: int | None = None) -> Neuron:
        """Neuron at (row, col); accepts either two ints or one coordinate pair."""
        coord = row if col is None else (row, col)
        return self._neurons[self.index(coord)]

    def at_index(self, index: int) -> Neuron:
        return self._neurons[index]

    def grid(self) -> torch.Tensor:
        """Weights viewed as (size, size, features_count). Shares storage with `weights`."""
        return self.weights.view(self.size, self.size, self.features_count)

    def weight_rows(self) -> list[str]:
        """One space separated line of weights per neuron, row-major."""
        return [" ".join(repr(value) for value in row) for row in self.weights.tolist()]

    def locations(self) -> torch.Tensor:
        """(size * size, 2) tensor of (row, col) coordinates, row-major."""
        return torch.tensor([list(coord) for coord in self.coords()], device=self.device, dtype=self.dtype)
