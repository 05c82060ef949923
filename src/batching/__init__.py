# src/batching/__init__.py
"""Batching policy: when to turn accumulated events into a request."""

from .controller import BatchController, BatchingConfig

__all__ = ["BatchController", "BatchingConfig"]
