"""
Per-layer parameter blocks and the layer stack.
"""

from dataclasses import dataclass
import numpy as np
from typing import Dict, Iterator, List, Optional, Tuple

from ..errors import ShapeMismatchError

PARAM_NAMES = ("W1", "W2", "b1", "b2")


@dataclass
class LayerParameters:
    """
    Encoder/decoder weights and biases of one autoencoder layer.

    W1: encoder [hidden, visible], W2: decoder [visible, hidden],
    b1: encoder bias [hidden], b2: decoder bias [visible].
    The same record carries gradients and deltas.
    """
    W1: np.ndarray
    W2: np.ndarray
    b1: np.ndarray
    b2: np.ndarray

    @classmethod
    def initialize(
        cls,
        visible_size: int,
        hidden_size: int,
        rng: Optional[np.random.Generator] = None
    ) -> "LayerParameters":
        """Uniform(-1, 1) weights and zero biases."""
        rng = rng if rng is not None else np.random.default_rng()
        return cls(
            W1=rng.uniform(-1.0, 1.0, size=(hidden_size, visible_size)),
            W2=rng.uniform(-1.0, 1.0, size=(visible_size, hidden_size)),
            b1=np.zeros(hidden_size),
            b2=np.zeros(visible_size),
        )

    @classmethod
    def zeros_like(cls, other: "LayerParameters") -> "LayerParameters":
        return cls(*(np.zeros_like(a) for a in other.arrays()))

    @property
    def visible_size(self) -> int:
        return self.W1.shape[1]

    @property
    def hidden_size(self) -> int:
        return self.W1.shape[0]

    def shapes(self) -> Dict[str, Tuple[int, ...]]:
        """Declared shape of every block, keyed by parameter name."""
        v, h = self.visible_size, self.hidden_size
        return {"W1": (h, v), "W2": (v, h), "b1": (h,), "b2": (v,)}

    def arrays(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
        return self.W1, self.W2, self.b1, self.b2

    def items(self) -> Iterator[Tuple[str, np.ndarray]]:
        return zip(PARAM_NAMES, self.arrays())

    def copy(self) -> "LayerParameters":
        return LayerParameters(*(a.copy() for a in self.arrays()))

    def scaled(self, factor: float) -> "LayerParameters":
        return LayerParameters(*(factor * a for a in self.arrays()))

    def __add__(self, other: "LayerParameters") -> "LayerParameters":
        return LayerParameters(*(a + b for a, b in zip(self.arrays(), other.arrays())))

    def __sub__(self, other: "LayerParameters") -> "LayerParameters":
        return LayerParameters(*(a - b for a, b in zip(self.arrays(), other.arrays())))

    def validate(self, visible_size: int, hidden_size: int) -> None:
        """
        Check every block against the layer's declared sizes.

        Raises:
            ShapeMismatchError: On the first block with wrong dimensions
        """
        expected = {
            "W1": (hidden_size, visible_size),
            "W2": (visible_size, hidden_size),
            "b1": (hidden_size,),
            "b2": (visible_size,),
        }
        for name, arr in self.items():
            if arr.shape != expected[name]:
                raise ShapeMismatchError(
                    f"{name} has shape {arr.shape}, layer declares {expected[name]}"
                )


class LayerStack:
    """Ordered LayerParameters, one per hidden layer, trained greedily in place."""

    def __init__(self, layers: List[LayerParameters]):
        self.layers = list(layers)
        sizes = [self.layers[0].visible_size] if self.layers else []
        for layer in self.layers:
            layer.validate(sizes[-1], layer.hidden_size)
            sizes.append(layer.hidden_size)
        self.layer_sizes = sizes

    @classmethod
    def initialize(
        cls,
        layer_sizes: List[int],
        rng: Optional[np.random.Generator] = None
    ) -> "LayerStack":
        """
        Random weights and zero biases for every layer.

        Args:
            layer_sizes: [visible_size, hidden_size_1, ..., hidden_size_k]
            rng: Random generator (shared seed keeps workers consistent)
        """
        rng = rng if rng is not None else np.random.default_rng()
        layers = [
            LayerParameters.initialize(layer_sizes[i], layer_sizes[i + 1], rng)
            for i in range(len(layer_sizes) - 1)
        ]
        return cls(layers)

    def __len__(self) -> int:
        return len(self.layers)

    def __getitem__(self, lyr: int) -> LayerParameters:
        return self.layers[lyr]

    def __setitem__(self, lyr: int, params: LayerParameters) -> None:
        params.validate(self.layer_sizes[lyr], self.layer_sizes[lyr + 1])
        self.layers[lyr] = params

    def __iter__(self) -> Iterator[LayerParameters]:
        return iter(self.layers)
