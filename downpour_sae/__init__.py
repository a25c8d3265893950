"""
Downpour SAE: distributed layer-wise training of stacked sparse autoencoders
"""

__version__ = "0.1.0"

from . import data, network, store, train, utils
from .config import SAEConfig, Paths, LearningMethod
from .errors import (
    DownpourSAEError,
    ConfigurationError,
    ShapeMismatchError,
    StoreUnavailable,
    NumericDegeneracyWarning,
)
from .types import SampleMatrix, FlatSequence, IndexBatch
from .cluster import run_local_cluster

__all__ = [
    "data",
    "network",
    "store",
    "train",
    "utils",
    "SAEConfig",
    "Paths",
    "LearningMethod",
    "DownpourSAEError",
    "ConfigurationError",
    "ShapeMismatchError",
    "StoreUnavailable",
    "NumericDegeneracyWarning",
    "SampleMatrix",
    "FlatSequence",
    "IndexBatch",
    "run_local_cluster",
]
