#!/usr/bin/env python3
"""
Example: Write a synthetic layer-0 sample file.
"""

import os
import sys
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import numpy as np
from downpour_sae import Paths, data


def main():
    """Generate sparse binary patterns with noise."""

    paths = Paths(input_dir="ae_data", output_dir="ae_output")
    rng = np.random.default_rng(0)

    n_samples, visible_size, n_prototypes = 600, 16, 6
    prototypes = (rng.uniform(size=(n_prototypes, visible_size)) < 0.25).astype(float)
    choice = rng.integers(0, n_prototypes, size=n_samples)
    samples = np.clip(prototypes[choice] * 0.8 + 0.1 + rng.normal(scale=0.05, size=(n_samples, visible_size)), 0.0, 1.0)

    path = os.path.join(paths.input_dir, "data_0.txt")
    data.dump_matrix(samples, path, sep=paths.delimiter)
    print(f"Wrote {n_samples} samples of {visible_size} features to {path}")


if __name__ == "__main__":
    main()
