"""
Abstract base class for parameter store clients.
"""

from abc import ABC, abstractmethod
import numpy as np
from typing import Sequence


class ParameterStore(ABC):
    """Client of a key-value parameter store, bound to one worker."""

    @property
    @abstractmethod
    def rank(self) -> int:
        """Rank of the worker this client acts for."""
        pass

    @property
    @abstractmethod
    def n_workers(self) -> int:
        """Number of workers sharing the store."""
        pass

    @abstractmethod
    def write(self, key: str, values: Sequence[float]) -> None:
        """
        Publish the initial value of a key.

        Args:
            key: Parameter name
            values: Flat sequence of floats
        """
        pass

    @abstractmethod
    def read(self, key: str) -> np.ndarray:
        """
        Fetch the current value of a key.

        Args:
            key: Parameter name

        Returns:
            Flat sequence of floats
        """
        pass

    @abstractmethod
    def atomic_update(self, key: str, delta: Sequence[float]) -> None:
        """
        Combine delta into the stored value as one indivisible operation.

        Args:
            key: Parameter name
            delta: Flat sequence, same length as the stored value
        """
        pass

    @abstractmethod
    def sync(self) -> None:
        """Full-cluster barrier."""
        pass

    @abstractmethod
    def commit_iteration(self) -> None:
        """Advance this worker's iteration clock by one."""
        pass

    @abstractmethod
    def set_total_iterations(self, n: int) -> None:
        """Declare the number of iterations this worker will commit."""
        pass

    @abstractmethod
    def namespaced(self, namespace: str) -> "ParameterStore":
        """Client of the same worker whose keys live under namespace."""
        pass
