"""
Plain-text result dumps and loss-history tables.
"""

import os
import numpy as np
import pandas as pd
from typing import List, Sequence, Tuple

from ..network.params import LayerParameters


def dump_matrix(m: np.ndarray, path: str, sep: str = " ") -> None:
    """
    Write a matrix one row per line; a vector is written as a column.

    Args:
        m: Matrix or vector
        path: Output file
        sep: Field delimiter
    """
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    arr = np.asarray(m, dtype=np.float64)
    if arr.ndim == 1:
        arr = arr[:, None]
    np.savetxt(path, arr, fmt="%.17g", delimiter=sep)


def dump_layer_result(
    params: LayerParameters,
    layer: int,
    out_dir: str,
    sep: str = " "
) -> List[str]:
    """
    Dump the four blocks of a trained layer to ae_layer_<layer>_<name>.txt.

    Returns:
        Paths written
    """
    paths = []
    for name, arr in params.items():
        path = os.path.join(out_dir, f"ae_layer_{layer}_{name}.txt")
        dump_matrix(arr, path, sep)
        paths.append(path)
    return paths


def loss_history_frame(history: Sequence[Tuple[int, int, float]]) -> pd.DataFrame:
    """
    Tabulate (layer, step, cost) records.

    Args:
        history: Records collected with debug logging enabled

    Returns:
        DataFrame with columns layer, step, cost
    """
    return pd.DataFrame(list(history), columns=["layer", "step", "cost"])
