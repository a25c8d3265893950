"""
Sample file loading and parsing.
"""

import numpy as np
import pandas as pd
from typing import List, Optional, Sequence, Tuple

from ..types import SampleMatrix
from ..utils.matrix import rows_to_mat


def load_lines(path: str, rank: int = 0, n_workers: int = 1) -> List[str]:
    """
    Read the block of non-blank lines owned by one worker.

    Lines are split into n_workers contiguous blocks of near-equal size.

    Args:
        path: Text file, one sample per line
        rank: Worker rank
        n_workers: Number of workers sharing the file

    Returns:
        Lines of this worker, without line terminators
    """
    with open(path, "r") as f:
        lines = [line.rstrip("\r\n") for line in f if line.strip()]
    bounds = np.linspace(0, len(lines), n_workers + 1).astype(int)
    return lines[bounds[rank]:bounds[rank + 1]]


def parse_lines(
    lines: Sequence[str],
    sep: str = " ",
    supervised: bool = False
) -> Tuple[List[List[float]], Optional[List[float]]]:
    """
    Split lines into numeric feature rows.

    Empty fields (repeated or trailing separators) are ignored.

    Args:
        lines: Raw lines
        sep: Field delimiter
        supervised: Treat the last field as a label

    Returns:
        Tuple of (feature rows, labels or None)
    """
    samples = []
    labels = [] if supervised else None
    for line in lines:
        fields = [float(tok) for tok in line.strip().split(sep) if tok.strip()]
        if supervised:
            samples.append(fields[:-1])
            labels.append(fields[-1])
        else:
            samples.append(fields)
    return samples, labels


def samples_to_matrix(rows: Sequence[Sequence[float]]) -> SampleMatrix:
    """Row-per-sample records -> SampleMatrix [features, n_samples]."""
    return rows_to_mat(rows).T.copy()


def load_samples_table(path: str, sep: str = " ") -> SampleMatrix:
    """
    Read a whole delimited file into a SampleMatrix.

    Args:
        path: File with one sample per line
        sep: Field delimiter

    Returns:
        SampleMatrix [features, n_samples]
    """
    df = pd.read_csv(path, sep=sep, header=None, skipinitialspace=True)
    df = df.dropna(axis=1, how="all")
    return df.to_numpy(dtype=np.float64).T.copy()


def partition_columns(X: SampleMatrix, n_workers: int) -> List[SampleMatrix]:
    """Split samples into n_workers contiguous shards."""
    return [np.ascontiguousarray(part) for part in np.array_split(X, n_workers, axis=1)]
