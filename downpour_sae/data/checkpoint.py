"""
Checkpoints of a trained layer stack.
"""

import os
import re
import torch
from typing import Dict

from ..network.params import LayerParameters, LayerStack, PARAM_NAMES

_KEY = re.compile(r"^layers\.(\d+)\.(W1|W2|b1|b2)$")


def stack_state_dict(stack: LayerStack) -> Dict[str, torch.Tensor]:
    """State dict keyed layers.<i>.<name>."""
    return {
        f"layers.{i}.{name}": torch.from_numpy(arr.copy())
        for i, layer in enumerate(stack)
        for name, arr in layer.items()
    }


def save_stack(stack: LayerStack, path: str) -> None:
    """
    Save a layer stack to disk.

    Args:
        stack: Trained stack
        path: Path to save weights
    """
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    torch.save(stack_state_dict(stack), path)


def load_stack(path: str, map_location: str = "cpu") -> LayerStack:
    """
    Load a layer stack saved by save_stack; sizes are inferred from the weights.

    Args:
        path: Path to saved weights
        map_location: Device to load tensors to

    Returns:
        LayerStack with float64 numpy parameters
    """
    state_dict = torch.load(path, map_location=map_location)

    blocks: Dict[int, Dict[str, torch.Tensor]] = {}
    for key, tensor in state_dict.items():
        match = _KEY.match(key)
        if match is None:
            raise KeyError(f"unexpected entry '{key}' in {path}")
        blocks.setdefault(int(match.group(1)), {})[match.group(2)] = tensor

    layers = []
    for i in range(len(blocks)):
        tensors = blocks[i]
        layers.append(LayerParameters(
            *(tensors[name].detach().cpu().double().numpy() for name in PARAM_NAMES)
        ))
    return LayerStack(layers)
