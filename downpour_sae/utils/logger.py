"""
Package-wide logger.
"""

import logging

logger = logging.getLogger("downpour_sae")

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(debug: bool = False) -> logging.Logger:
    """
    Attach a stream handler to the package logger (once) and set its level.

    Args:
        debug: Emit DEBUG records (per-push cost) when True

    Returns:
        The package logger
    """
    if not any(getattr(h, "_downpour_sae", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        handler._downpour_sae = True
        logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if debug else logging.INFO)
    return logger


def worker_logger(rank: int) -> logging.LoggerAdapter:
    """Logger adapter that prefixes every message with the worker rank."""
    return _WorkerAdapter(logger, {"rank": rank})


class _WorkerAdapter(logging.LoggerAdapter):

    def process(self, msg, kwargs):
        return f"worker{self.extra['rank']} {msg}", kwargs
