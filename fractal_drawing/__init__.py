"""
Generalized Mandelbrot set renderer.

This library renders escape-time images of z -> z^p + c for an arbitrary
real exponent p, with smooth hue coloring and optional parallel tiling that
produces exactly the same pixels as the single-threaded render.

Key Features:
- Immutable complex number type with the full transcendental function family
- Escape-time evaluation with smooth coloring
- Tile-based parallel rendering with deterministic merging
- Progress reporting, PNG export with metadata, and a click CLI

Example usage:
    >>> from fractal_drawing import FractalRenderer, RenderParameters
    >>> renderer = FractalRenderer(RenderParameters(parallel=True))
    >>> image = renderer.render()
    >>> renderer.save(image, ".")
"""

__version__ = "1.0.0"
__author__ = "Fractal Drawing Team"

from fractal_drawing.core.complex_number import ComplexNumber
from fractal_drawing.core.exceptions import (FractalError, InvalidParameterError,
                                             RenderCancelled, RenderError)
from fractal_drawing.core.parameters import ComplexPlane, RenderParameters
from fractal_drawing.core.escape_time import EscapeTimeEvaluator, PixelResult
from fractal_drawing.acceleration.progress import ProgressTracker
from fractal_drawing.acceleration.multiprocessing import TileScheduler
from fractal_drawing.rendering.image_output import ImageExporter, RenderMetadata
from fractal_drawing.io.config import ConfigManager

# Main API classes
from fractal_drawing.api import FractalRenderer

__all__ = [
    "FractalRenderer",
    "RenderParameters",
    "ComplexPlane",
    "ComplexNumber",
    "EscapeTimeEvaluator",
    "PixelResult",
    "ProgressTracker",
    "TileScheduler",
    "ImageExporter",
    "RenderMetadata",
    "ConfigManager",
    "FractalError",
    "InvalidParameterError",
    "RenderError",
    "RenderCancelled",
]
