"""Concrete browser engines."""

from .playwright_engine import PlaywrightEngine

__all__ = ["PlaywrightEngine"]
