"""Parameter store clients and the named-parameter adapter."""

from .base import ParameterStore
from .local import LocalParameterStore, LocalStoreClient
from .adapter import ParameterStoreAdapter

__all__ = ["ParameterStore", "LocalParameterStore", "LocalStoreClient", "ParameterStoreAdapter"]
