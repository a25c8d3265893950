#!/usr/bin/env python3
"""
Example: Inspect a trained stack layer by layer.
"""

import os
import sys
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from downpour_sae import Paths, data, network


def main():
    """Report reconstruction cost and hidden sparsity per layer."""

    paths = Paths(input_dir="ae_data", output_dir="ae_output")
    ckpt = os.path.join(paths.output_dir, paths.checkpoint_path)
    if not os.path.exists(ckpt):
        print(f"Checkpoint not found at {ckpt}")
        print("Run 02_train_stack.py first")
        return

    stack = data.load_stack(ckpt)
    X = data.load_samples_table(os.path.join(paths.input_dir, "data_0.txt"), sep=paths.delimiter)
    model = network.SparseAutoencoder(sparsity_target=0.1, sparsity_weight=0.1)

    for lyr, params in enumerate(stack):
        features = network.hidden(params, X, network.Activation.SIGMOID)
        active = (features > 0.5).mean()
        print(f"layer {lyr}: {params.visible_size} -> {params.hidden_size} | "
              f"cost {model.cost(params, X):.5f} | mean activation {features.mean():.3f} | "
              f"active fraction {active:.3f}")
        X = network.encode(params, X)

    print(f"Top-layer codes: {X.shape[0]} features x {X.shape[1]} samples")


if __name__ == "__main__":
    main()
