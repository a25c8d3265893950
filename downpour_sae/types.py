"""
Core type definitions for downpour_sae package.
"""

import numpy as np
from typing import Protocol
from typing_extensions import TypeAlias

# Core data types
SampleMatrix: TypeAlias = np.ndarray   # [input_dim, N_samples], one column per sample
FlatSequence: TypeAlias = np.ndarray   # [rows * cols], column-major
IndexBatch: TypeAlias = np.ndarray     # [n] column indices into a SampleMatrix


class Combiner(Protocol):
    """Protocol for the associative operation applied by an atomic update."""

    def __call__(self, stored: np.ndarray, delta: np.ndarray) -> np.ndarray:
        """Combine the stored value with an incoming delta."""
        ...
