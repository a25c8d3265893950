#!/usr/bin/env python3
"""
Example: Train a two-layer stack on a local cluster of worker threads.
"""

import os
import sys
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import argparse
from downpour_sae import SAEConfig, Paths, run_local_cluster
from downpour_sae.utils import configure_logging


def main():
    """Train stacked SAE example."""

    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--method", default="mbdsgd", choices=["dbgd", "dsgd", "mbdsgd"])
    parser.add_argument("--workers", type=int, default=4)
    parser.add_argument("--rounds", type=int, default=20)
    parser.add_argument("--debug", action="store_true")
    args = parser.parse_args()

    configure_logging(args.debug)

    # Configuration
    cfg = SAEConfig(
        visible_size=16,
        hidden_layer_sizes=[8, 4],
        learning_method=args.method,
        rounds=args.rounds,
        learning_rate=0.5,
        weight_decay=1e-4,
        sparsity_target=0.1,
        sparsity_weight=0.1,
        mini_batch_size=10,
        debug_logging=args.debug,
        show_progress=True,
    )

    paths = Paths(input_dir="ae_data", output_dir="ae_output")

    sample_file = os.path.join(paths.input_dir, "data_0.txt")
    if not os.path.exists(sample_file):
        print(f"No samples found at {sample_file}")
        print("Run 01_make_samples.py first")
        return

    print(f"Training {cfg.layer_sizes} with {args.method} on {args.workers} workers")
    stacks = run_local_cluster(cfg, paths=paths, n_workers=args.workers)

    print(f"Saved layer results and checkpoint to {paths.output_dir}")
    print(f"Layer sizes: {stacks[0].layer_sizes}")


if __name__ == "__main__":
    main()
