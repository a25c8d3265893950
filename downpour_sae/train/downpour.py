"""
Downpour-style asynchronous descent, per sample and per mini-batch.
"""

import logging
import math
import numpy as np
from typing import Any, List, Sequence

from .base import Orchestrator
from ..config import LearningMethod
from ..network.params import LayerParameters
from ..types import IndexBatch, SampleMatrix


def partition_mini_batches(indices: Sequence[int], size: int) -> List[IndexBatch]:
    """
    Split indices into contiguous mini-batches.

    A trailing partial batch is kept when it holds at least two indices and
    dropped otherwise.

    Args:
        indices: Shuffled sample indices
        size: Mini-batch size

    Returns:
        List of index arrays
    """
    if size <= 0:
        raise ValueError(f"mini-batch size must be positive, got {size}")
    indices = np.asarray(indices, dtype=np.intp)
    batches = []
    for start in range(0, indices.size, size):
        batch = indices[start:start + size]
        if batch.size < size and batch.size < 2:
            break
        batches.append(batch)
    return batches


class DownpourSGD(Orchestrator):
    """
    Per-sample asynchronous descent.

    Steps update a local working copy. The copy is refreshed from the store
    every `read_batch` steps and its drift from the last snapshot is pushed
    every `update_batch` steps; both happen on the last step of a round too.
    """

    method = LearningMethod.DSGD
    description = "downpour stochastic gradient descent"

    def total_iterations(self, n_samples: int) -> int:
        return self.cfg.rounds * math.ceil(n_samples / self.cfg.effective_update_batch)

    def _schedule(self, indices: np.ndarray) -> List[Any]:
        return [int(i) for i in indices]

    def _gradient(self, params: LayerParameters, X: SampleMatrix, step) -> LayerParameters:
        return self.model.stochastic_grad(params, X, step)

    def _run(self, params: LayerParameters, X: SampleMatrix) -> LayerParameters:
        lr = self.cfg.learning_rate
        read_batch = self.cfg.effective_read_batch
        update_batch = self.cfg.effective_update_batch
        idx = np.arange(X.shape[1])
        working = params

        for rd in self._rounds():
            self.rng.shuffle(idx)
            steps = self._schedule(idx)
            if not steps:
                self.log.warning("round %d has no steps for %d samples", rd, X.shape[1])

            working = self.adapter.pull(working)
            baseline = working.copy()
            last = len(steps) - 1

            for cnt, step in enumerate(steps):
                if cnt % read_batch == 0 or cnt == last:
                    working = self.adapter.pull(working)
                    baseline = working.copy()

                working = working - self._gradient(working, X, step).scaled(lr)
                self._record_loss(working, X)

                if cnt % update_batch == 0 or cnt == last:
                    self.adapter.push(working - baseline)
                    self.adapter.iter_commit()
                    baseline = working.copy()
                    if self.log.isEnabledFor(logging.DEBUG):
                        self.log.debug("cost: %f", self.model.cost(working, X))

            self.adapter.sync()
            self.log.info("at the end of round %d", rd)
        return working


class MiniBatchDownpourSGD(DownpourSGD):
    """Downpour descent whose steps are mini-batches of the shuffled samples."""

    method = LearningMethod.MBDSGD
    description = "mini-batch downpour stochastic gradient descent"

    def total_iterations(self, n_samples: int) -> int:
        n_mini_batches = math.ceil(n_samples / self.cfg.mini_batch_size)
        return self.cfg.rounds * math.ceil(n_mini_batches / self.cfg.effective_update_batch)

    def _schedule(self, indices: np.ndarray) -> List[Any]:
        return partition_mini_batches(indices, self.cfg.mini_batch_size)

    def _gradient(self, params: LayerParameters, X: SampleMatrix, step) -> LayerParameters:
        return self.model.mini_batch_grad(params, X, step)
