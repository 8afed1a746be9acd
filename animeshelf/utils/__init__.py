"""Utility modules for paths, formatting and concurrency."""

from .concurrency import run_ordered

__all__ = [
    "run_ordered",
]
