import numpy as np
import pytest

from downpour_sae.config import SAEConfig
from downpour_sae.network import LayerParameters, SparseAutoencoder
from downpour_sae.store import LocalParameterStore, ParameterStoreAdapter


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(42)


@pytest.fixture
def params(rng) -> LayerParameters:
    """Layer with 4 visible and 3 hidden units, non-zero biases."""
    p = LayerParameters.initialize(4, 3, rng)
    p.b1 = rng.normal(scale=0.1, size=3)
    p.b2 = rng.normal(scale=0.1, size=4)
    return p


@pytest.fixture
def samples(rng) -> np.ndarray:
    """SampleMatrix of 4 features x 6 samples in (0, 1)."""
    return rng.uniform(0.05, 0.95, size=(4, 6))


@pytest.fixture
def model() -> SparseAutoencoder:
    return SparseAutoencoder(weight_decay=1e-3, sparsity_target=0.1, sparsity_weight=0.5)


@pytest.fixture
def store() -> LocalParameterStore:
    return LocalParameterStore(n_workers=1, timeout=10)


@pytest.fixture
def adapter(store) -> ParameterStoreAdapter:
    return ParameterStoreAdapter(store.client(0, namespace="layer0"))


@pytest.fixture
def base_config() -> SAEConfig:
    return SAEConfig(
        visible_size=4,
        hidden_layer_sizes=[3],
        rounds=1,
        learning_rate=0.1,
        weight_decay=0.0,
        sparsity_weight=0.0,
    )
