"""Sparse autoencoder network core."""

from .activations import Activation, get_activation, sigmoid, relu, tanh
from .params import LayerParameters, LayerStack, PARAM_NAMES
from .model import SparseAutoencoder, ActivationCache, encode, hidden, clamp_rho, RHO_EPSILON

__all__ = [
    "Activation",
    "get_activation",
    "sigmoid",
    "relu",
    "tanh",
    "LayerParameters",
    "LayerStack",
    "PARAM_NAMES",
    "SparseAutoencoder",
    "ActivationCache",
    "encode",
    "hidden",
    "clamp_rho",
    "RHO_EPSILON",
]
