"""
Named-parameter access on top of a flat-sequence parameter store.
"""

from contextlib import contextmanager
import numpy as np
from typing import Optional

from .base import ParameterStore
from ..errors import DownpourSAEError, StoreUnavailable
from ..network.params import LayerParameters
from ..utils.matrix import mat_to_vec, vec_to_mat, vec_to_vector


@contextmanager
def _store_call(op: str, key: str):
    try:
        yield
    except DownpourSAEError:
        raise
    except Exception as e:
        raise StoreUnavailable(f"{op} '{key}' failed: {e}") from e


class ParameterStoreAdapter:
    """
    Translates matrix/vector reads, writes and atomic updates into the
    store's flat-sequence protocol, and exposes the store's barrier and
    iteration clock.
    """

    def __init__(self, client: ParameterStore):
        self.client = client

    @property
    def rank(self) -> int:
        return self.client.rank

    def write(self, key: str, m: np.ndarray) -> None:
        """Publish the initial value of key (first caller wins)."""
        with _store_call("write", key):
            self.client.write(key, mat_to_vec(m))

    def read(self, key: str, rows: Optional[int] = None, cols: Optional[int] = None) -> np.ndarray:
        """
        Fetch key and reshape it.

        Args:
            key: Parameter name
            rows: Expected rows; None reads a vector
            cols: Expected columns

        Returns:
            Matrix [rows, cols] or vector

        Raises:
            ShapeMismatchError: If the stored length is not rows * cols
            StoreUnavailable: If the store call fails
        """
        with _store_call("read", key):
            v = self.client.read(key)
        if rows is None:
            return vec_to_vector(v)
        return vec_to_mat(v, rows, cols)

    def atomic_update(self, key: str, delta: np.ndarray) -> None:
        """Combine delta into the stored value (elementwise add by default)."""
        with _store_call("update", key):
            self.client.atomic_update(key, mat_to_vec(delta))

    def sync(self) -> None:
        with _store_call("sync", "barrier"):
            self.client.sync()

    def iter_commit(self) -> None:
        with _store_call("commit", "iteration"):
            self.client.commit_iteration()

    def set_total_iterations(self, n: int) -> None:
        with _store_call("set_total_iterations", "iteration"):
            self.client.set_total_iterations(int(n))

    def publish(self, params: LayerParameters) -> None:
        """Write all four blocks of a layer."""
        for name, arr in params.items():
            self.write(name, arr)

    def pull(self, like: LayerParameters) -> LayerParameters:
        """
        Read all four blocks, shaped like `like`.

        Raises:
            ShapeMismatchError: If a stored block has the wrong length
        """
        h, v = like.W1.shape
        return LayerParameters(
            W1=self.read("W1", h, v),
            W2=self.read("W2", v, h),
            b1=vec_to_vector(self.read("b1"), h),
            b2=vec_to_vector(self.read("b2"), v),
        )

    def push(self, delta: LayerParameters) -> None:
        """Atomically add a layer-shaped delta to the stored blocks."""
        for name, arr in delta.items():
            self.atomic_update(name, arr)
