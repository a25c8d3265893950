"""
Elementwise nonlinearities.
"""

from enum import Enum
import numpy as np

from ..errors import ConfigurationError


def sigmoid(x: np.ndarray) -> np.ndarray:
    """1 / (1 + e^-x)"""
    return 1.0 / (1.0 + np.exp(-x))


def relu(x: np.ndarray) -> np.ndarray:
    """max(x, 0)"""
    return np.maximum(x, 0.0)


def tanh(x: np.ndarray) -> np.ndarray:
    """(e^x - e^-x) / (e^x + e^-x)"""
    return np.tanh(x)


class Activation(str, Enum):
    """Closed set of supported nonlinearities, resolved once at configuration time."""
    SIGMOID = "sigmoid"
    RELU = "relu"
    TANH = "tanh"

    def __call__(self, x: np.ndarray) -> np.ndarray:
        return _FUNCTIONS[self](np.asarray(x, dtype=np.float64))


_FUNCTIONS = {
    Activation.SIGMOID: sigmoid,
    Activation.RELU: relu,
    Activation.TANH: tanh,
}


def get_activation(name) -> Activation:
    """
    Resolve an activation selector (case-insensitive).

    Args:
        name: "sigmoid", "relu"/"ReLU" or "tanh", or an Activation

    Returns:
        The matching Activation

    Raises:
        ConfigurationError: If the selector is not supported
    """
    if isinstance(name, Activation):
        return name
    try:
        return Activation(str(name).lower())
    except ValueError:
        raise ConfigurationError(
            f"Unknown activation function '{name}'. "
            f"Available functions: {[a.value for a in Activation]}"
        ) from None
