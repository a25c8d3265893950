"""
Shared shape of the distributed training strategies.
"""

from abc import ABC, abstractmethod
import numpy as np
from typing import Iterable, List, Optional
from tqdm.auto import tqdm

from ..config import LearningMethod, SAEConfig
from ..network.model import SparseAutoencoder
from ..network.params import LayerParameters
from ..store.adapter import ParameterStoreAdapter
from ..types import SampleMatrix
from ..utils.logger import worker_logger


class Orchestrator(ABC):
    """
    Trains one layer against the parameter store.

    Every strategy runs INIT -> PUBLISH_INITIAL -> (READ -> COMPUTE_GRADIENT
    -> [LOCAL_APPLY] -> MAYBE_PUSH -> MAYBE_COMMIT)* -> FINAL_READ; subclasses
    supply the loop in `_run`.
    """

    method: LearningMethod
    description: str = ""

    def __init__(
        self,
        model: SparseAutoencoder,
        adapter: ParameterStoreAdapter,
        cfg: SAEConfig,
        rng: Optional[np.random.Generator] = None
    ):
        """
        Args:
            model: Network core holding the regularisation hyperparameters
            adapter: Store adapter bound to this layer's namespace
            cfg: Training configuration
            rng: Generator used to shuffle sample order
        """
        self.model = model
        self.adapter = adapter
        self.cfg = cfg
        self.rng = rng if rng is not None else np.random.default_rng(cfg.seed)
        self.loss_history: List[float] = []
        self.log = worker_logger(adapter.rank)

    @abstractmethod
    def total_iterations(self, n_samples: int) -> int:
        """Iterations this worker declares to the store for one layer."""
        pass

    @abstractmethod
    def _run(self, params: LayerParameters, X: SampleMatrix) -> LayerParameters:
        pass

    def train(self, params: LayerParameters, X: SampleMatrix) -> LayerParameters:
        """
        Run the configured number of rounds on local samples.

        Args:
            params: Initial parameters of the layer (published if first)
            X: Local samples [visible, n]

        Returns:
            Parameters read from the store after the last round
        """
        self.log.info("cost: %f", self.model.cost(params, X))
        self.adapter.publish(params)
        params = self._run(params, X)
        return self.adapter.pull(params)

    def _rounds(self) -> Iterable[int]:
        return tqdm(
            range(self.cfg.rounds),
            desc=f"worker{self.adapter.rank} {self.method.value}",
            disable=not (self.cfg.show_progress and self.adapter.rank == 0),
        )

    def _record_loss(self, params: LayerParameters, X: SampleMatrix) -> None:
        if self.cfg.debug_logging:
            self.loss_history.append(self.model.cost(params, X))
