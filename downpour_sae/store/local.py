"""
In-process parameter store shared by worker threads.

Stands in for a remote parameter server on a single machine: values are flat
float64 arrays guarded by one condition variable, updates apply a registered
associative combiner under that lock, and every worker has an iteration clock
used for bounded-staleness reads.
"""

import threading
import numpy as np
from typing import Dict, List, Optional, Sequence

from .base import ParameterStore
from ..errors import ShapeMismatchError, StoreUnavailable
from ..types import Combiner
from ..utils.logger import logger


class LocalParameterStore:
    """Shared state of a local cluster. Workers talk to it through clients."""

    def __init__(
        self,
        n_workers: int = 1,
        combiner: Optional[Combiner] = None,
        staleness_bound: int = 0,
        bounded_staleness: bool = False,
        timeout: Optional[float] = None
    ):
        """
        Args:
            n_workers: Number of workers that will rendezvous at barriers
            combiner: Operation used by atomic updates (default elementwise add)
            staleness_bound: Max clock lead over the slowest active worker
            bounded_staleness: Gate reads on the staleness bound when True
            timeout: Seconds before a blocked barrier or read fails
        """
        if n_workers < 1:
            raise ValueError(f"n_workers must be positive, got {n_workers}")
        self.n_workers = n_workers
        self.staleness_bound = staleness_bound
        self.bounded_staleness = bounded_staleness
        self.timeout = timeout
        self._combiner = combiner if combiner is not None else np.add
        self._values: Dict[str, np.ndarray] = {}
        self._cond = threading.Condition()
        self._barrier = threading.Barrier(n_workers, timeout=timeout)
        self._clock: List[int] = [0] * n_workers
        self._total: List[int] = [0] * n_workers
        self._parked = set()
        self._aborted = False

    def client(self, rank: int, namespace: str = "") -> "LocalStoreClient":
        """Client acting for worker `rank`."""
        if not 0 <= rank < self.n_workers:
            raise ValueError(f"rank {rank} outside [0, {self.n_workers})")
        return LocalStoreClient(self, rank, namespace)

    def register_update(self, combiner: Combiner) -> None:
        """Replace the combining operation applied by atomic updates."""
        with self._cond:
            self._combiner = combiner

    def write(self, key: str, values: Sequence[float]) -> bool:
        """Set key if absent. Returns False when another writer got there first."""
        arr = np.array(values, dtype=np.float64).ravel()
        with self._cond:
            if key in self._values:
                return False
            self._values[key] = arr
            return True

    def read(self, key: str, rank: int) -> np.ndarray:
        with self._cond:
            self._check_open(rank)
            self._wait_fresh(rank)
            try:
                return self._values[key].copy()
            except KeyError:
                raise StoreUnavailable(f"key '{key}' has not been written") from None

    def update(self, key: str, delta: Sequence[float]) -> None:
        delta = np.asarray(delta, dtype=np.float64).ravel()
        with self._cond:
            self._check_open()
            try:
                stored = self._values[key]
            except KeyError:
                raise StoreUnavailable(f"key '{key}' has not been written") from None
            if stored.shape != delta.shape:
                raise ShapeMismatchError(
                    f"update of '{key}' has length {delta.size}, stored length is {stored.size}"
                )
            self._values[key] = np.asarray(self._combiner(stored, delta), dtype=np.float64)

    def barrier(self, rank: int) -> None:
        with self._cond:
            self._parked.add(rank)
            self._cond.notify_all()
        try:
            self._barrier.wait()
        except threading.BrokenBarrierError:
            raise StoreUnavailable(f"barrier broken while worker{rank} was waiting") from None
        finally:
            with self._cond:
                self._parked.discard(rank)
                self._cond.notify_all()

    def abort(self) -> None:
        """Make blocked and later store calls raise StoreUnavailable."""
        with self._cond:
            self._aborted = True
            self._cond.notify_all()
        self._barrier.abort()

    def commit_iteration(self, rank: int) -> None:
        with self._cond:
            self._clock[rank] += 1
            self._cond.notify_all()

    def set_total_iterations(self, rank: int, n: int) -> None:
        with self._cond:
            self._total[rank] = n
            self._clock[rank] = 0
            self._cond.notify_all()

    def clock(self, rank: int) -> int:
        with self._cond:
            return self._clock[rank]

    def total_iterations(self, rank: int) -> int:
        with self._cond:
            return self._total[rank]

    def snapshot(self) -> Dict[str, np.ndarray]:
        """Copy of every stored value, keyed by full key."""
        with self._cond:
            return {k: v.copy() for k, v in self._values.items()}

    def _slowest(self, rank: int) -> int:
        active = [c for r, c in enumerate(self._clock) if r == rank or r not in self._parked]
        return min(active)

    def _check_open(self, rank: Optional[int] = None) -> None:
        # caller holds self._cond
        if self._aborted:
            who = "store" if rank is None else f"worker{rank}"
            raise StoreUnavailable(f"{who}: store aborted after a worker failure")

    def _wait_fresh(self, rank: int) -> None:
        # caller holds self._cond
        if not self.bounded_staleness:
            return
        while self._clock[rank] - self._slowest(rank) > self.staleness_bound:
            self._check_open(rank)
            logger.debug(
                "worker%d waits: clock %d, slowest %d, bound %d",
                rank, self._clock[rank], self._slowest(rank), self.staleness_bound
            )
            if not self._cond.wait(timeout=self.timeout):
                raise StoreUnavailable(f"worker{rank} timed out waiting for stale workers")


class LocalStoreClient(ParameterStore):
    """ParameterStore client for one worker of a LocalParameterStore."""

    def __init__(self, store: LocalParameterStore, rank: int, namespace: str = ""):
        self.store = store
        self._rank = rank
        self.namespace = namespace

    @property
    def rank(self) -> int:
        return self._rank

    @property
    def n_workers(self) -> int:
        return self.store.n_workers

    def _key(self, key: str) -> str:
        return f"{self.namespace}/{key}" if self.namespace else key

    def write(self, key: str, values: Sequence[float]) -> None:
        if not self.store.write(self._key(key), values):
            logger.debug("worker%d: '%s' already published, keeping first value", self._rank, self._key(key))

    def read(self, key: str) -> np.ndarray:
        return self.store.read(self._key(key), self._rank)

    def atomic_update(self, key: str, delta: Sequence[float]) -> None:
        self.store.update(self._key(key), delta)

    def sync(self) -> None:
        self.store.barrier(self._rank)

    def commit_iteration(self) -> None:
        self.store.commit_iteration(self._rank)

    def set_total_iterations(self, n: int) -> None:
        self.store.set_total_iterations(self._rank, n)

    def namespaced(self, namespace: str) -> "LocalStoreClient":
        return LocalStoreClient(self.store, self._rank, namespace)
