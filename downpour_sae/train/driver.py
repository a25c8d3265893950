"""
Greedy layer-wise training of the autoencoder stack.
"""

import os
import numpy as np
from typing import Dict, List, Optional, Tuple, Type

from .base import Orchestrator
from .bgd import BatchGradientDescent
from .downpour import DownpourSGD, MiniBatchDownpourSGD
from ..config import LearningMethod, Paths, SAEConfig
from ..data.checkpoint import save_stack
from ..data.dump import dump_layer_result, dump_matrix, loss_history_frame
from ..data.samples import load_lines, parse_lines, samples_to_matrix
from ..errors import ShapeMismatchError
from ..network.model import SparseAutoencoder, encode
from ..network.params import LayerStack
from ..store.adapter import ParameterStoreAdapter
from ..store.base import ParameterStore
from ..types import SampleMatrix
from ..utils.logger import worker_logger

ORCHESTRATORS: Dict[LearningMethod, Type[Orchestrator]] = {
    LearningMethod.DBGD: BatchGradientDescent,
    LearningMethod.DSGD: DownpourSGD,
    LearningMethod.MBDSGD: MiniBatchDownpourSGD,
}


def get_orchestrator(method) -> Type[Orchestrator]:
    """
    Orchestrator class for a learning method.

    Raises:
        ConfigurationError: If the method is unknown
    """
    return ORCHESTRATORS[LearningMethod.parse(method)]


class LayerwiseTrainer:
    """
    Trains each layer of the stack in turn for one worker.

    The encoded output of a trained layer, W1 x + b1 without activation,
    becomes the next layer's samples. Earlier layers are never revisited.
    """

    def __init__(
        self,
        cfg: SAEConfig,
        client: ParameterStore,
        paths: Optional[Paths] = None,
        stack: Optional[LayerStack] = None
    ):
        """
        Args:
            cfg: Training configuration
            client: This worker's parameter store client
            paths: Input/output locations; None keeps everything in memory
            stack: Initial stack; random weights from cfg.seed if None
        """
        self.cfg = cfg
        self.client = client
        self.paths = paths
        self.rank = client.rank
        self.adapter = ParameterStoreAdapter(client)
        self.log = worker_logger(self.rank)
        self.model = SparseAutoencoder.from_config(cfg)
        self.orchestrator_cls = get_orchestrator(cfg.learning_method)

        # Same seed on every worker: identical initial candidates
        if stack is None:
            stack = LayerStack.initialize(cfg.layer_sizes, np.random.default_rng(cfg.seed))
        if stack.layer_sizes != cfg.layer_sizes:
            raise ShapeMismatchError(
                f"stack has layer sizes {stack.layer_sizes}, config declares {cfg.layer_sizes}"
            )
        self.stack = stack
        self.loss_history: List[Tuple[int, int, float]] = []
        self._rng = np.random.default_rng([cfg.seed, self.rank])

    def load_samples(self) -> SampleMatrix:
        """Layer-0 samples of this worker from <input_dir>/data_0.txt."""
        if self.paths is None:
            raise ValueError("no samples given and no input paths configured")
        path = os.path.join(self.paths.input_dir, "data_0.txt")
        lines = load_lines(path, self.rank, self.client.n_workers)
        rows, _ = parse_lines(lines, self.paths.delimiter)
        return samples_to_matrix(rows)

    def train_layer(self, lyr: int, X: SampleMatrix) -> SampleMatrix:
        """
        Train layer lyr on X and return the encoded samples.

        Raises:
            ShapeMismatchError: If X does not have the layer's input size
        """
        self.adapter.sync()
        if X.shape[0] != self.cfg.layer_sizes[lyr]:
            raise ShapeMismatchError(
                f"layer {lyr} expects {self.cfg.layer_sizes[lyr]} features, samples have {X.shape[0]}"
            )

        adapter = ParameterStoreAdapter(self.client.namespaced(f"layer{lyr}"))
        orchestrator = self.orchestrator_cls(self.model, adapter, self.cfg, rng=self._rng)
        self.log.info("chose %s", orchestrator.description)
        adapter.set_total_iterations(orchestrator.total_iterations(X.shape[1]))

        self.stack[lyr] = orchestrator.train(self.stack[lyr], X)
        self.loss_history.extend((lyr, i, c) for i, c in enumerate(orchestrator.loss_history))
        self.adapter.sync()
        # every worker has pushed once all are past the barrier
        self.stack[lyr] = adapter.pull(self.stack[lyr])

        encoded = encode(self.stack[lyr], X)
        self._persist_layer(lyr, encoded)
        return encoded

    def train(self, samples: Optional[SampleMatrix] = None) -> LayerStack:
        """
        Train every layer.

        Args:
            samples: Layer-0 samples [visible, n]; loaded from paths if None

        Returns:
            The trained stack
        """
        X = samples if samples is not None else self.load_samples()
        X = np.asarray(X, dtype=np.float64)
        for lyr in range(self.cfg.n_layers):
            self.log.info("starts training layer %d", lyr + 1)
            X = self.train_layer(lyr, X)
        self.adapter.sync()
        self._persist_run()
        self.log.info("Mission complete")
        return self.stack

    def _output_path(self, name: str) -> str:
        return name if os.path.isabs(name) else os.path.join(self.paths.output_dir, name)

    def _persist_layer(self, lyr: int, encoded: SampleMatrix) -> None:
        if self.paths is None:
            return
        sep = self.paths.delimiter
        # one encoded sample per line, same layout as data_0.txt
        dump_matrix(encoded.T, self._output_path(f"data_{lyr + 1}_w{self.rank}.txt"), sep)
        if self.rank == 0:
            dump_layer_result(self.stack[lyr], lyr, self.paths.output_dir, sep)

    def _persist_run(self) -> None:
        if self.paths is None:
            return
        if self.cfg.debug_logging:
            path = self._output_path(f"w{self.rank}_{self.paths.loss_history_csv}")
            os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
            loss_history_frame(self.loss_history).to_csv(path, index=False)
        if self.rank == 0 and self.paths.checkpoint_path:
            save_stack(self.stack, self._output_path(self.paths.checkpoint_path))
