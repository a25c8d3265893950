"""
Sparse autoencoder layer: cost and gradients.
"""

from dataclasses import dataclass
import warnings
import numpy as np
from typing import Optional, Sequence

from .activations import Activation, get_activation, sigmoid
from .params import LayerParameters
from ..errors import NumericDegeneracyWarning
from ..types import SampleMatrix

# Sparsity estimates are clamped into [RHO_EPSILON, 1 - RHO_EPSILON]
RHO_EPSILON = 1e-8


@dataclass
class ActivationCache:
    """Values of one forward/backward invocation. Never persisted."""
    a1: np.ndarray                        # input [visible, n]
    z2: np.ndarray                        # hidden pre-activation [hidden, n]
    a2: np.ndarray                        # hidden activation [hidden, n]
    z3: np.ndarray                        # reconstruction pre-activation [visible, n]
    a3: np.ndarray                        # reconstruction [visible, n]
    delta3: Optional[np.ndarray] = None   # output error signal
    delta2: Optional[np.ndarray] = None   # hidden error signal


def encode(params: LayerParameters, X: SampleMatrix) -> np.ndarray:
    """
    Linear encoding W1 x + b1 without activation, the next layer's input.

    Args:
        params: Trained layer
        X: Samples [visible, n]

    Returns:
        Encoded samples [hidden, n]
    """
    return params.W1 @ X + params.b1[:, None]


def hidden(params: LayerParameters, X: SampleMatrix, activation=Activation.SIGMOID) -> np.ndarray:
    """Hidden features activation(W1 x + b1) [hidden, n]."""
    return get_activation(activation)(encode(params, X))


def clamp_rho(rho: np.ndarray) -> np.ndarray:
    """Keep the sparsity estimate strictly inside (0, 1)."""
    clamped = np.clip(rho, RHO_EPSILON, 1.0 - RHO_EPSILON)
    if not np.array_equal(clamped, rho):
        warnings.warn(
            f"sparsity estimate degenerate (min={np.min(rho):g}, max={np.max(rho):g}); "
            f"clamped to [{RHO_EPSILON:g}, {1.0 - RHO_EPSILON:g}]",
            NumericDegeneracyWarning,
            stacklevel=3,
        )
    return clamped


class SparseAutoencoder:
    """
    Single-hidden-layer sparse autoencoder with sigmoid encoder and decoder.

    The network owns only hyperparameters; parameters are passed in so the
    same instance evaluates the worker's working copy, its baseline snapshot
    or freshly read store values.
    """

    def __init__(self, weight_decay: float = 0.0, sparsity_target: float = 0.05, sparsity_weight: float = 0.0):
        """
        Args:
            weight_decay: lambda, L2 penalty on W1 and W2 (not on biases)
            sparsity_target: Target mean activation of each hidden unit
            sparsity_weight: beta, weight of the KL sparsity penalty
        """
        self.weight_decay = weight_decay
        self.sparsity_target = sparsity_target
        self.sparsity_weight = sparsity_weight

    @classmethod
    def from_config(cls, cfg) -> "SparseAutoencoder":
        return cls(
            weight_decay=cfg.weight_decay,
            sparsity_target=cfg.sparsity_target,
            sparsity_weight=cfg.sparsity_weight,
        )

    def forward(self, params: LayerParameters, X: SampleMatrix) -> ActivationCache:
        """
        Two-stage forward pass.

        Args:
            params: Layer parameters
            X: Samples [visible, n]

        Returns:
            ActivationCache with input, hidden and reconstruction values
        """
        z2 = params.W1 @ X + params.b1[:, None]
        a2 = sigmoid(z2)
        z3 = params.W2 @ a2 + params.b2[:, None]
        a3 = sigmoid(z3)
        return ActivationCache(a1=X, z2=z2, a2=a2, z3=z3, a3=a3)

    def sparsity(self, params: LayerParameters, X: SampleMatrix) -> np.ndarray:
        """Mean hidden activation over the columns of X (forward-only pass)."""
        return sigmoid(params.W1 @ X + params.b1[:, None]).mean(axis=1)

    def kl_divergence(self, rho: np.ndarray) -> np.ndarray:
        """KL(target || rho) per hidden unit."""
        p = self.sparsity_target
        return p * np.log(p / rho) + (1 - p) * np.log((1 - p) / (1 - rho))

    def cost(self, params: LayerParameters, X: SampleMatrix) -> float:
        """
        Reconstruction cost with weight decay and sparsity penalty.

        Args:
            params: Layer parameters
            X: Samples [visible, n]

        Returns:
            sum ||x - x_hat||^2 / 2n + lambda/2 (||W1||^2 + ||W2||^2) + beta sum KL,
            only the weight decay term when X has no columns
        """
        n = X.shape[1]
        decay = self.weight_decay / 2.0 * ((params.W1 ** 2).sum() + (params.W2 ** 2).sum())
        if n == 0:
            return float(decay)
        cache = self.forward(params, X)
        error = ((cache.a1 - cache.a3) ** 2 / 2).sum() / n
        rho = clamp_rho(cache.a2.sum(axis=1) / n)
        return float(error + decay + self.sparsity_weight * self.kl_divergence(rho).sum())

    def _backward(
        self,
        params: LayerParameters,
        X: SampleMatrix,
        rho: np.ndarray,
        count: int
    ) -> LayerParameters:
        cache = self.forward(params, X)
        a2, a3 = cache.a2, cache.a3
        p = self.sparsity_target
        cache.delta3 = -(X - a3) * (a3 * (1 - a3))
        sparsity_delta = -p / rho + (1 - p) / (1 - rho)
        cache.delta2 = (
            params.W2.T @ cache.delta3 + self.sparsity_weight * sparsity_delta[:, None]
        ) * (a2 * (1 - a2))

        return LayerParameters(
            W1=(cache.delta2 @ X.T) / count + self.weight_decay * params.W1,
            W2=(cache.delta3 @ a2.T) / count + self.weight_decay * params.W2,
            b1=cache.delta2.sum(axis=1) / count,
            b2=cache.delta3.sum(axis=1) / count,
        )

    def batch_grad(self, params: LayerParameters, X: SampleMatrix) -> LayerParameters:
        """
        Gradient averaged over every column of X, rho from the full dataset.

        Args:
            params: Layer parameters
            X: Samples [visible, n]

        Returns:
            Gradient {dW1, dW2, db1, db2}; all zeros when X has no columns
        """
        n = X.shape[1]
        if n == 0:
            return LayerParameters.zeros_like(params)
        rho = clamp_rho(self.sparsity(params, X))
        return self._backward(params, X, rho, n)

    def stochastic_grad(self, params: LayerParameters, X: SampleMatrix, index: int) -> LayerParameters:
        """
        Unnormalized gradient of one sample; rho is that sample's own activation.

        Args:
            params: Layer parameters
            X: Samples [visible, n]
            index: Column of X to use

        Returns:
            Gradient {dW1, dW2, db1, db2}
        """
        x = X[:, [index]]
        rho = clamp_rho(sigmoid(params.W1 @ x + params.b1[:, None])[:, 0])
        return self._backward(params, x, rho, 1)

    def mini_batch_grad(
        self,
        params: LayerParameters,
        X: SampleMatrix,
        indices: Sequence[int]
    ) -> LayerParameters:
        """
        Gradient averaged over a subset of columns, rho from that subset.

        A subset of size 1 takes the stochastic path.

        Args:
            params: Layer parameters
            X: Samples [visible, n]
            indices: Columns of X forming the mini-batch

        Returns:
            Gradient {dW1, dW2, db1, db2}
        """
        indices = np.asarray(indices, dtype=np.intp)
        if indices.size == 1:
            return self.stochastic_grad(params, X, int(indices[0]))
        batch = X[:, indices]
        rho = clamp_rho(self.sparsity(params, batch))
        return self._backward(params, batch, rho, indices.size)
