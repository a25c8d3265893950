"""
Tests for the sparse autoencoder network core.

Covers cost evaluation, the batch, stochastic and mini-batch gradients, and the
relations between them.
"""

import numpy as np
import pytest

from downpour_sae.errors import NumericDegeneracyWarning, ShapeMismatchError
from downpour_sae.network import (
    LayerParameters,
    LayerStack,
    SparseAutoencoder,
    RHO_EPSILON,
    clamp_rho,
    encode,
    hidden,
)


def numerical_grad(model, params, X, eps=1e-6) -> LayerParameters:
    grads = []
    for name, arr in params.items():
        g = np.zeros_like(arr)
        for idx in np.ndindex(arr.shape):
            orig = arr[idx]
            arr[idx] = orig + eps
            plus = model.cost(params, X)
            arr[idx] = orig - eps
            minus = model.cost(params, X)
            arr[idx] = orig
            g[idx] = (plus - minus) / (2 * eps)
        grads.append(g)
    return LayerParameters(*grads)


def assert_params_close(a: LayerParameters, b: LayerParameters, **kwargs):
    for (name, x), (_, y) in zip(a.items(), b.items()):
        np.testing.assert_allclose(x, y, err_msg=name, **kwargs)


class TestForwardAndCost:

    def test_forward_shapes(self, model, params, samples):
        cache = model.forward(params, samples)
        assert cache.a1 is samples
        assert cache.z2.shape == cache.a2.shape == (3, 6)
        assert cache.z3.shape == cache.a3.shape == (4, 6)
        assert np.all((cache.a3 > 0) & (cache.a3 < 1))

    def test_cost_matches_definition(self, model, params, samples):
        n = samples.shape[1]
        a2 = 1 / (1 + np.exp(-(params.W1 @ samples + params.b1[:, None])))
        a3 = 1 / (1 + np.exp(-(params.W2 @ a2 + params.b2[:, None])))
        rho = a2.mean(axis=1)
        p = model.sparsity_target
        kl = p * np.log(p / rho) + (1 - p) * np.log((1 - p) / (1 - rho))
        expected = (
            ((samples - a3) ** 2).sum() / 2 / n
            + model.weight_decay / 2 * ((params.W1 ** 2).sum() + (params.W2 ** 2).sum())
            + model.sparsity_weight * kl.sum()
        )
        assert model.cost(params, samples) == pytest.approx(expected, rel=1e-12)

    def test_cost_non_negative_without_sparsity(self, params, rng):
        model = SparseAutoencoder(weight_decay=0.0, sparsity_weight=0.0)
        for _ in range(5):
            X = rng.normal(size=(4, 8))
            assert model.cost(params, X) >= 0.0

    def test_encode_is_pre_activation(self, params, samples):
        np.testing.assert_allclose(
            encode(params, samples), params.W1 @ samples + params.b1[:, None]
        )

    def test_hidden_applies_activation(self, params, samples):
        np.testing.assert_allclose(
            hidden(params, samples, "relu"), np.maximum(encode(params, samples), 0)
        )


class TestGradients:

    def test_batch_grad_matches_finite_differences(self, model, params, samples):
        analytic = model.batch_grad(params, samples)
        numeric = numerical_grad(model, params, samples)
        assert_params_close(analytic, numeric, rtol=1e-5, atol=1e-8)

    def test_gradient_shapes(self, model, params, samples):
        for grad in (
            model.batch_grad(params, samples),
            model.stochastic_grad(params, samples, 2),
            model.mini_batch_grad(params, samples, [0, 3, 5]),
        ):
            grad.validate(visible_size=4, hidden_size=3)

    def test_mini_batch_of_one_equals_stochastic(self, model, params, samples):
        for index in range(samples.shape[1]):
            mb = model.mini_batch_grad(params, samples, [index])
            sg = model.stochastic_grad(params, samples, index)
            for (_, a), (_, b) in zip(mb.items(), sg.items()):
                np.testing.assert_array_equal(a, b)

    def test_batch_is_average_of_stochastic(self, params, samples):
        model = SparseAutoencoder(weight_decay=1e-2, sparsity_weight=0.0)
        n = samples.shape[1]
        total = LayerParameters.zeros_like(params)
        for i in range(n):
            total = total + model.stochastic_grad(params, samples, i)
        assert_params_close(model.batch_grad(params, samples), total.scaled(1.0 / n), rtol=1e-10, atol=1e-14)

    def test_mini_batch_over_everything_equals_batch(self, model, params, samples):
        full = model.mini_batch_grad(params, samples, np.arange(samples.shape[1]))
        assert_params_close(full, model.batch_grad(params, samples), rtol=1e-12, atol=1e-15)

    def test_weight_decay_only_touches_weights(self, params, samples):
        lam = 0.3
        decayed = SparseAutoencoder(weight_decay=lam, sparsity_target=0.1, sparsity_weight=0.5)
        plain = SparseAutoencoder(weight_decay=0.0, sparsity_target=0.1, sparsity_weight=0.5)
        g_dec = decayed.batch_grad(params, samples)
        g_plain = plain.batch_grad(params, samples)
        np.testing.assert_allclose(g_dec.W1 - g_plain.W1, lam * params.W1, atol=1e-14)
        np.testing.assert_allclose(g_dec.W2 - g_plain.W2, lam * params.W2, atol=1e-14)
        np.testing.assert_array_equal(g_dec.b1, g_plain.b1)
        np.testing.assert_array_equal(g_dec.b2, g_plain.b2)

    def test_zero_decay_reproduces_undecayed_gradient(self, params, samples):
        model = SparseAutoencoder(weight_decay=0.0, sparsity_weight=0.0)
        grad = model.stochastic_grad(params, samples, 1)
        x = samples[:, [1]]
        a2 = 1 / (1 + np.exp(-(params.W1 @ x + params.b1[:, None])))
        a3 = 1 / (1 + np.exp(-(params.W2 @ a2 + params.b2[:, None])))
        d3 = -(x - a3) * a3 * (1 - a3)
        d2 = (params.W2.T @ d3) * a2 * (1 - a2)
        np.testing.assert_allclose(grad.W1, d2 @ x.T, rtol=1e-12)
        np.testing.assert_allclose(grad.W2, d3 @ a2.T, rtol=1e-12)
        np.testing.assert_allclose(grad.b1, d2[:, 0], rtol=1e-12)
        np.testing.assert_allclose(grad.b2, d3[:, 0], rtol=1e-12)

    def test_gradient_step_lowers_cost(self, model, params, samples):
        before = model.cost(params, samples)
        stepped = params - model.batch_grad(params, samples).scaled(0.1)
        assert model.cost(stepped, samples) < before


class TestSparsityClamp:

    def test_interior_values_untouched(self):
        rho = np.array([0.1, 0.5, 0.9])
        np.testing.assert_array_equal(clamp_rho(rho), rho)

    def test_degenerate_values_clamped_with_warning(self):
        with pytest.warns(NumericDegeneracyWarning):
            out = clamp_rho(np.array([0.0, 0.5, 1.0]))
        np.testing.assert_array_equal(out, [RHO_EPSILON, 0.5, 1.0 - RHO_EPSILON])

    def test_saturated_hidden_units_give_finite_cost(self, samples):
        params = LayerParameters.initialize(4, 3, np.random.default_rng(0))
        params.b1 = np.array([-800.0, 0.0, 800.0])
        model = SparseAutoencoder(sparsity_target=0.1, sparsity_weight=1.0)
        with pytest.warns(NumericDegeneracyWarning):
            cost = model.cost(params, samples)
        assert np.isfinite(cost)

    def test_saturated_hidden_units_give_finite_gradients(self, samples):
        params = LayerParameters.initialize(4, 3, np.random.default_rng(0))
        params.b1 = np.array([-800.0, 0.0, 800.0])
        model = SparseAutoencoder(sparsity_target=0.1, sparsity_weight=1.0)
        with pytest.warns(NumericDegeneracyWarning):
            grads = [
                model.stochastic_grad(params, samples, 0),
                model.mini_batch_grad(params, samples, [1, 2, 4]),
                model.batch_grad(params, samples),
            ]
        for grad in grads:
            for name, arr in grad.items():
                assert np.isfinite(arr).all(), name


class TestEmptySamples:

    def test_cost_is_weight_decay_only(self, params):
        model = SparseAutoencoder(weight_decay=0.2, sparsity_weight=0.5)
        expected = 0.1 * ((params.W1 ** 2).sum() + (params.W2 ** 2).sum())
        assert model.cost(params, np.zeros((4, 0))) == pytest.approx(expected)

    def test_batch_grad_is_zero(self, model, params):
        grad = model.batch_grad(params, np.zeros((4, 0)))
        for name, arr in grad.items():
            np.testing.assert_array_equal(arr, np.zeros_like(arr), err_msg=name)


class TestParameters:

    def test_initialize_shapes_and_zero_biases(self, rng):
        p = LayerParameters.initialize(5, 2, rng)
        assert p.W1.shape == (2, 5) and p.W2.shape == (5, 2)
        np.testing.assert_array_equal(p.b1, np.zeros(2))
        np.testing.assert_array_equal(p.b2, np.zeros(5))
        assert np.all(np.abs(p.W1) <= 1.0)

    def test_validate_rejects_wrong_shape(self, params):
        params.b2 = np.zeros(3)
        with pytest.raises(ShapeMismatchError, match="b2"):
            params.validate(visible_size=4, hidden_size=3)

    def test_copy_is_independent(self, params):
        original = params.W1[0, 0]
        snapshot = params.copy()
        params.W1[0, 0] += 1.0
        assert snapshot.W1[0, 0] == original

    def test_stack_layer_sizes(self, rng):
        stack = LayerStack.initialize([6, 4, 2], rng)
        assert stack.layer_sizes == [6, 4, 2]
        assert len(stack) == 2
        assert stack[1].W1.shape == (2, 4)

    def test_stack_rejects_mismatched_replacement(self, rng):
        stack = LayerStack.initialize([6, 4, 2], rng)
        with pytest.raises(ShapeMismatchError):
            stack[1] = LayerParameters.initialize(6, 2, rng)
