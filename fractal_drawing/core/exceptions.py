"""
Exception hierarchy for fractal generation.

Arithmetic never raises for ordinary operations; invalid input is rejected
at the parameter boundary and worker faults are surfaced by the scheduler.
"""

from typing import Optional


class FractalError(Exception):
    """Base class for all fractal generation errors."""


class InvalidParameterError(FractalError, ValueError):
    """Raised when a render parameter or coordinate is out of range or non-finite."""


class RenderError(FractalError, RuntimeError):
    """Raised when a render could not produce a complete image."""

    def __init__(self, message: str, tile_id: Optional[int] = None):
        super().__init__(message)
        self.tile_id = tile_id


class RenderCancelled(RenderError):
    """Raised inside a tile that stopped because the render was abandoned."""
