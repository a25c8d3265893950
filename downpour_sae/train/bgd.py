"""
Distributed batch gradient descent.
"""

from .base import Orchestrator
from ..config import LearningMethod
from ..network.params import LayerParameters
from ..types import SampleMatrix


class BatchGradientDescent(Orchestrator):
    """One full-batch gradient step per round, pushed and committed at once."""

    method = LearningMethod.DBGD
    description = "distributed batch gradient descent"

    def total_iterations(self, n_samples: int) -> int:
        return self.cfg.rounds

    def _run(self, params: LayerParameters, X: SampleMatrix) -> LayerParameters:
        lr = self.cfg.learning_rate
        if X.shape[1] == 0:
            self.log.warning("no local samples; pushing zero gradients")
        for rd in self._rounds():
            params = self.adapter.pull(params)
            delta = self.model.batch_grad(params, X).scaled(-lr)
            self._record_loss(params, X)
            self.adapter.push(delta)
            self.adapter.iter_commit()

            params = self.adapter.pull(params)
            self.log.info("round %d cost: %f", rd, self.model.cost(params, X))
        return params
