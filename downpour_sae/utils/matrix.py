"""
Conversions between flat sequences and rectangular numeric containers.

The parameter store only exchanges flat sequences. Matrices are flattened in
column-major order so that a (rows, cols) block and its flat form agree with
any column-ordered peer.
"""

import numpy as np
from typing import Sequence

from ..errors import ShapeMismatchError


def mat_to_vec(m: np.ndarray) -> np.ndarray:
    """
    Flatten a matrix or vector into a column-major float64 sequence.

    Args:
        m: Matrix [rows, cols] or vector [n]

    Returns:
        Flat copy [rows * cols]
    """
    return np.asarray(m, dtype=np.float64).ravel(order="F").copy()


def vec_to_mat(v: Sequence[float], rows: int, cols: int) -> np.ndarray:
    """
    Reshape a flat column-major sequence into a matrix.

    Args:
        v: Flat sequence of length rows * cols
        rows: Expected row count
        cols: Expected column count

    Returns:
        Matrix [rows, cols]

    Raises:
        ShapeMismatchError: If len(v) != rows * cols
    """
    arr = np.asarray(v, dtype=np.float64)
    if arr.ndim != 1 or arr.size != rows * cols:
        raise ShapeMismatchError(
            f"cannot reshape sequence of length {arr.size} into ({rows}, {cols})"
        )
    return arr.reshape((rows, cols), order="F").copy()


def vec_to_vector(v: Sequence[float], size: int = None) -> np.ndarray:
    """
    Convert a flat sequence into a vector, optionally checking its length.

    Raises:
        ShapeMismatchError: If size is given and does not match
    """
    arr = np.array(v, dtype=np.float64).ravel()
    if size is not None and arr.size != size:
        raise ShapeMismatchError(f"expected vector of length {size}, got {arr.size}")
    return arr


def rows_to_mat(rows: Sequence[Sequence[float]]) -> np.ndarray:
    """
    Stack row-ordered records into a matrix [len(rows), len(rows[0])].

    Raises:
        ShapeMismatchError: If rows are ragged
    """
    if len(rows) == 0:
        return np.zeros((0, 0), dtype=np.float64)
    width = len(rows[0])
    for i, row in enumerate(rows):
        if len(row) != width:
            raise ShapeMismatchError(
                f"row {i} has {len(row)} fields, expected {width}"
            )
    return np.array(rows, dtype=np.float64).reshape(len(rows), width)
