"""Matrix conversions and logging helpers."""

from .logger import logger, configure_logging, worker_logger
from .matrix import mat_to_vec, vec_to_mat, vec_to_vector, rows_to_mat

__all__ = [
    "logger",
    "configure_logging",
    "worker_logger",
    "mat_to_vec",
    "vec_to_mat",
    "vec_to_vector",
    "rows_to_mat",
]
