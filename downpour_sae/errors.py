"""
Error taxonomy for downpour_sae.
"""


class DownpourSAEError(Exception):
    """Base class for all package errors."""


class ConfigurationError(DownpourSAEError, ValueError):
    """Unknown learning method, activation selector or invalid option."""


class ShapeMismatchError(DownpourSAEError, ValueError):
    """A matrix does not have the dimensions its layer declares."""


class StoreUnavailable(DownpourSAEError, RuntimeError):
    """A parameter store call failed; fatal for the whole run."""


class NumericDegeneracyWarning(RuntimeWarning):
    """Sparsity estimate reached 0 or 1 and had to be clamped."""
