class KohonenError(Exception):
    """Base class for errors raised by the kohonen_map package."""


class ShapeMismatchError(KohonenError, ValueError):
    """Vectors or data with an unexpected number of features."""


class InsufficientAliveNeuronsError(KohonenError):
    """
    Raised when too few neurons survive dead-neuron pruning, either to take
    over the observations of dead neurons or to fill the popularity report.
    Usually the lattice is too large for the dataset.
    """

    def __init__(self, required: int, alive: int):
        self.required = required
        self.alive = alive
        super().__init__(
            f"At least {required} alive neuron(s) required, only {alive} survived pruning. "
            "Use a smaller lattice or a larger dataset."
        )


class DatasetFormatError(KohonenError, ValueError):
    """Malformed dataset file."""

    def __init__(self, message: str, line_number: int | None = None):
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
