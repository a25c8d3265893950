"""Distributed training strategies and the layer-wise driver."""

from .base import Orchestrator
from .bgd import BatchGradientDescent
from .downpour import DownpourSGD, MiniBatchDownpourSGD, partition_mini_batches
from .driver import LayerwiseTrainer, get_orchestrator, ORCHESTRATORS

__all__ = [
    "Orchestrator",
    "BatchGradientDescent",
    "DownpourSGD",
    "MiniBatchDownpourSGD",
    "partition_mini_batches",
    "LayerwiseTrainer",
    "get_orchestrator",
    "ORCHESTRATORS",
]
