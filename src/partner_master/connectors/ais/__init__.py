"""Remote tabular data service connector."""

from .client import AISClient

__all__ = ["AISClient"]
