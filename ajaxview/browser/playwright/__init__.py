"""
Playwright rendering engine.

This package provides the Engine implementation backed by the
Playwright async API.
"""

from .driver import PlaywrightEngine, PlaywrightView, describe_error

__all__ = ["PlaywrightEngine", "PlaywrightView", "describe_error"]
