"""
Run a cluster of workers as threads on one machine.
"""

from concurrent.futures import ThreadPoolExecutor, wait
import threading
from typing import List, Optional, Sequence

from .config import Paths, SAEConfig
from .network.params import LayerStack
from .store.local import LocalParameterStore
from .train.driver import LayerwiseTrainer
from .types import SampleMatrix
from .utils.logger import logger


def run_local_cluster(
    cfg: SAEConfig,
    shards: Optional[Sequence[SampleMatrix]] = None,
    paths: Optional[Paths] = None,
    n_workers: Optional[int] = None,
    timeout: Optional[float] = None
) -> List[LayerStack]:
    """
    Train a stack with one thread per worker sharing a LocalParameterStore.

    Args:
        cfg: Training configuration
        shards: Layer-0 samples of each worker; read from paths if None
        paths: Input/output locations
        n_workers: Worker count when shards is None
        timeout: Seconds before a blocked store call fails

    Returns:
        Trained stack of every worker, indexed by rank

    Raises:
        Exception: The first worker failure, re-raised in the caller
    """
    if shards is not None:
        n_workers = len(shards)
    if not n_workers:
        raise ValueError("give either shards or a positive n_workers")

    store = LocalParameterStore(
        n_workers=n_workers,
        staleness_bound=cfg.staleness_bound,
        bounded_staleness=cfg.bounded_staleness_enabled,
        timeout=timeout,
    )
    logger.info("starting local cluster of %d workers (%s)", n_workers, cfg.learning_method.value)

    failures = []
    lock = threading.Lock()

    def work(rank: int) -> LayerStack:
        try:
            trainer = LayerwiseTrainer(cfg, store.client(rank), paths)
            return trainer.train(shards[rank] if shards is not None else None)
        except Exception as e:
            with lock:
                failures.append(e)
            # release workers blocked at a barrier
            store.abort()
            raise

    with ThreadPoolExecutor(max_workers=n_workers, thread_name_prefix="worker") as pool:
        futures = [pool.submit(work, rank) for rank in range(n_workers)]
        wait(futures)

    if failures:
        raise failures[0]
    return [f.result() for f in futures]
