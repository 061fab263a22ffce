"""
Render parameters and complex plane geometry.

This module defines the immutable parameter record that describes a render
request, and the ComplexPlane that maps pixel indices to plane coordinates.
"""

import math
from dataclasses import dataclass, asdict, fields
from typing import Any, Dict, Optional, Tuple
import logging

from .complex_number import ComplexNumber
from .exceptions import InvalidParameterError

logger = logging.getLogger(__name__)

BASE_WIDTH = 1920
BASE_HEIGHT = 1080

# Half-extents of the default view before zooming (16:9 aspect)
HALF_WIDTH = 16.0 / 9.0
HALF_HEIGHT = 1.0


def default_max_iterations(zoom: float) -> int:
    """Iteration limit derived from the linear zoom: 75 + round(5 * 1.85^ln(1 + 2 zoom))."""
    return 75 + int(math.floor(5 * 1.85 ** math.log1p(zoom * 2) + 0.5))


class ComplexPlane:
    """Represents a complex plane region with coordinate mapping utilities."""

    def __init__(self, xmin: float, xmax: float, ymin: float, ymax: float,
                 width: int, height: int):
        """
        Initialize complex plane bounds and resolution.

        Args:
            xmin, xmax: Real axis values at the left edge and one pixel past the right edge
            ymin, ymax: Imaginary axis values at the top row and one pixel past the bottom row
            width, height: Image resolution in pixels

        ``ymin`` may be greater than ``ymax``; rows then run downwards in the plane.
        """
        if width <= 0 or height <= 0:
            raise InvalidParameterError("Width and height must be positive")
        if xmin == xmax or ymin == ymax:
            raise InvalidParameterError("Invalid bounds: plane has zero extent")

        self.xmin = xmin
        self.xmax = xmax
        self.ymin = ymin
        self.ymax = ymax
        self.width = width
        self.height = height

        self.x_scale = (xmax - xmin) / width
        self.y_scale = (ymax - ymin) / height

    def pixel_to_complex(self, px: int, py: int) -> ComplexNumber:
        """Convert pixel coordinates to a plane coordinate."""
        return ComplexNumber(px * self.x_scale + self.xmin, py * self.y_scale + self.ymin)

    def __repr__(self) -> str:
        return (f"ComplexPlane(xmin={self.xmin!r}, xmax={self.xmax!r}, ymin={self.ymin!r}, "
                f"ymax={self.ymax!r}, width={self.width}, height={self.height})")


@dataclass(frozen=True)
class RenderParameters:
    """Configuration for a generalized Mandelbrot render."""

    # View
    x: float = -0.75
    y: float = 0.0
    zoom_magnitude: float = 0.0

    # Iteration
    exponent: float = 2.0
    bailout: float = 2.0
    max_iterations: Optional[int] = None

    # Coloring
    color_factor: float = 1.0
    color_offset: float = 0.0

    # Output size and execution
    resolution: int = 1
    parallel: bool = False
    workers: Optional[int] = None

    @property
    def zoom(self) -> float:
        """Linear zoom, 2 ** zoom_magnitude."""
        return 2.0 ** self.zoom_magnitude

    @property
    def bailout_squared(self) -> float:
        return self.bailout * self.bailout

    @property
    def iteration_limit(self) -> int:
        """Explicit max_iterations, or the zoom-derived default when unset or 0."""
        if self.max_iterations:
            return self.max_iterations
        return default_max_iterations(self.zoom)

    @property
    def exponent_complex(self) -> ComplexNumber:
        return ComplexNumber(self.exponent, 0.0)

    @property
    def inverse_exponent_complex(self) -> ComplexNumber:
        return ComplexNumber(1.0 / self.exponent, 0.0)

    @property
    def width(self) -> int:
        return BASE_WIDTH * self.resolution

    @property
    def height(self) -> int:
        return BASE_HEIGHT * self.resolution

    @property
    def bounds(self) -> Tuple[float, float, float, float]:
        """Plane rectangle (xmin, xmax, ymin, ymax); ymin is the top row."""
        zoom = self.zoom
        return (self.x - HALF_WIDTH / zoom,
                self.x + HALF_WIDTH / zoom,
                self.y + HALF_HEIGHT / zoom,
                self.y - HALF_HEIGHT / zoom)

    def plane(self, width: Optional[int] = None, height: Optional[int] = None) -> ComplexPlane:
        """
        Create the complex plane for this render.

        Args:
            width: Override pixel width (defaults to 1920 * resolution)
            height: Override pixel height (defaults to 1080 * resolution)
        """
        return ComplexPlane(*self.bounds, width or self.width, height or self.height)

    def validate(self) -> 'RenderParameters':
        """
        Validate parameter values.

        Returns:
            self, so calls can be chained

        Raises:
            InvalidParameterError: on the first invalid value
        """
        for name in ('x', 'y', 'zoom_magnitude', 'exponent', 'bailout',
                     'color_factor', 'color_offset'):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or isinstance(value, bool):
                raise InvalidParameterError(f"{name} must be numeric, got {value!r}")
            if not math.isfinite(value):
                raise InvalidParameterError(f"Invalid value for {name}: {value}")

        if self.bailout <= 1.0:
            raise InvalidParameterError(f"Invalid bailout value: {self.bailout} (must be > 1)")

        try:
            zoom = self.zoom
        except OverflowError:
            raise InvalidParameterError(f"Zoom magnitude too large: {self.zoom_magnitude}")
        if not (zoom > 0 and math.isfinite(zoom)):
            raise InvalidParameterError(f"Invalid zoom magnitude: {self.zoom_magnitude}")

        if self.exponent == 0.0 or self.exponent == 1.0:
            raise InvalidParameterError(f"Invalid exponent: {self.exponent} (cannot be 0 or 1)")

        if self.color_factor <= 0.0:
            raise InvalidParameterError(f"Invalid color factor: {self.color_factor} (must be > 0)")
        if not 0.0 <= self.color_offset < 1.0:
            raise InvalidParameterError(
                f"Color offset must be between 0 and 1: {self.color_offset}")

        if self.max_iterations is not None:
            if not isinstance(self.max_iterations, int) or self.max_iterations < 0:
                raise InvalidParameterError(
                    f"Iterations cannot be set to a negative value: {self.max_iterations}")

        if not isinstance(self.resolution, int) or self.resolution < 1:
            raise InvalidParameterError(f"Invalid resolution multiplier: {self.resolution}")

        if self.workers is not None and (not isinstance(self.workers, int) or self.workers < 1):
            raise InvalidParameterError(f"Invalid worker count: {self.workers}")

        return self

    def to_dict(self) -> Dict[str, Any]:
        """Convert parameters to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RenderParameters':
        """Create parameters from dictionary, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise InvalidParameterError(f"Unknown parameters: {', '.join(sorted(unknown))}")
        return cls(**data)

    def describe(self) -> str:
        return (f"center=({self.x}, {self.y}), zoom=2^{self.zoom_magnitude}, "
                f"exponent={self.exponent}, bailout={self.bailout}, "
                f"iterations={self.iteration_limit}, size={self.width}x{self.height}")
