from dataclasses import dataclass


@dataclass
class TrainingConfig:
    """
    Options shared by both training procedures.

    Attributes:
        lattice_size (int): Side length S of the square lattice.
        features_count (int): Length F of every observation and weight vector.
        epochs_number (int): Only used to derive the radius time constant
                             tau1 = epochs_number / neighborhood_width. It is
                             not an iteration cap.
        learning_rate (float): Initial learning rate eta0.
        tau2 (int): Time constant of the learning rate decay.
        training_error (float): Convergence threshold on the change of the
                                representation error between two sweeps.
        max_epochs (int | None): Optional safety bound on the number of sweeps.
                                 None keeps the loop unbounded.
    """
    lattice_size: int
    features_count: int
    epochs_number: int = 1000
    learning_rate: float = 0.01
    tau2: int = 1000
    training_error: float = 1e-3
    max_epochs: int | None = None

    def __post_init__(self):
        # The initial radius is lattice_size // 2 and must not be zero.
        if self.lattice_size < 2:
            raise ValueError(f"lattice_size must be at least 2. Got {self.lattice_size}")
        if self.features_count < 1:
            raise ValueError(f"features_count must be positive. Got {self.features_count}")
        if self.epochs_number <= 0:
            raise ValueError(f"epochs_number must be positive. Got {self.epochs_number}")
        if self.tau2 <= 0:
            raise ValueError(f"tau2 must be positive. Got {self.tau2}")
        if self.learning_rate <= 0:
            raise ValueError(f"learning_rate must be positive. Got {self.learning_rate}")
        if self.training_error < 0:
            raise ValueError(f"training_error must not be negative. Got {self.training_error}")
        if self.max_epochs is not None and self.max_epochs < 1:
            raise ValueError(f"max_epochs must be at least 1 or None. Got {self.max_epochs}")
