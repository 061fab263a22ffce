"""
Escape-time evaluation for generalized Mandelbrot sets.

For a plane coordinate c the orbit z_0 = 0, z_{n+1} = z_n^p + c is iterated
until it leaves the bailout radius or the iteration limit is reached. The
final orbit value is reduced to a smoothing magnitude, which together with
the iteration count yields a cyclic hue and then an RGB color.

Pixels are evaluated by the compiled kernel in
``fractal_drawing.acceleration.numba_backend``. The ComplexNumber methods
``iterate`` and ``smoothing_magnitude`` compute the same quantities one step
at a time for inspection.
"""

import math
from dataclasses import dataclass
from typing import Callable, Optional, Tuple
import logging

import numpy as np

from .complex_number import ComplexNumber, NEGATIVE_ONE, ZERO
from .exceptions import InvalidParameterError, RenderCancelled
from .parameters import ComplexPlane, RenderParameters
from ..acceleration.numba_backend import escape_time_kernel
from ..rendering.coloring import hue_to_rgb, hues_to_rgb

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PixelResult:
    """Escape behavior and color of a single coordinate."""
    iterations: int
    magnitude: float
    hue: float
    rgb: Tuple[int, int, int]


class EscapeTimeEvaluator:
    """Evaluates coordinates against one set of render parameters."""

    def __init__(self, params: RenderParameters):
        """
        Initialize the evaluator.

        Args:
            params: Validated render parameters
        """
        self.params = params
        self.exponent = params.exponent_complex
        self.inverse_exponent = params.inverse_exponent_complex
        self.bailout = params.bailout
        self.bailout_squared = params.bailout_squared
        self.normalization = self.bailout_squared - self.bailout
        self.max_iterations = params.iteration_limit
        self.color_factor = params.color_factor
        self.color_offset = params.color_offset

    def iterate(self, c: ComplexNumber) -> Tuple[int, ComplexNumber]:
        """
        Iterate the orbit of c.

        Returns:
            (iteration count, final orbit value)
        """
        p = self.exponent
        bail2 = self.bailout_squared
        max_iterations = self.max_iterations

        # 0^p contributes nothing, so the first step from the origin lands on c
        z = c
        n = 1
        while n < max_iterations and z.abs_squared() < bail2:
            z = z.pow(p).add(c)
            n += 1
        return n, z

    def smoothing_magnitude(self, z: ComplexNumber, c: ComplexNumber) -> float:
        """|(-1) * (z - c)^(1/p)|, taken as 0 when z == c."""
        difference = z.subtract(c)
        if difference == ZERO:
            return 0.0
        return difference.pow(self.inverse_exponent).multiply(NEGATIVE_ONE).abs()

    def hue(self, iterations: int, magnitude: float) -> float:
        """
        Unwrapped hue for an iteration count and smoothing magnitude.

        A non-finite smoothing term contributes 0, which keeps the hue finite
        for singular orbits.
        """
        term = (self.bailout_squared - magnitude) / self.normalization
        if not math.isfinite(term):
            term = 0.0
        return ((iterations + term) / self.max_iterations) * self.color_factor + self.color_offset

    def _kernel(self, c_real: np.ndarray, c_imag: np.ndarray):
        return escape_time_kernel(c_real, c_imag, self.exponent.real, self.inverse_exponent.real,
                                  self.max_iterations, self.bailout,
                                  self.color_factor, self.color_offset)

    def evaluate(self, c) -> PixelResult:
        """
        Evaluate a single coordinate.

        Args:
            c: Plane coordinate (ComplexNumber or Python number)

        Raises:
            InvalidParameterError: if c has a NaN or infinite component
        """
        c = ComplexNumber.coerce(c).require_finite("coordinate")
        iterations, magnitudes, hues = self._kernel(np.array([c.real]), np.array([c.imag]))
        hue = float(hues[0])
        return PixelResult(int(iterations[0]), float(magnitudes[0]), hue, hue_to_rgb(hue))

    def render_block(self, plane: ComplexPlane, x_start: int, x_end: int,
                     y_start: int, y_end: int,
                     progress: Optional[Callable[[int], None]] = None,
                     cancelled: Optional[Callable[[], bool]] = None) -> np.ndarray:
        """
        Render a rectangular block of the full plane.

        Coordinates are derived from global pixel indices on the full plane's
        scale, so any partition of the image evaluates exactly the same
        coordinates.

        Args:
            plane: Full-image plane
            x_start, x_end: Column range [x_start, x_end)
            y_start, y_end: Row range [y_start, y_end)
            progress: Called with the number of pixels finished after each column
            cancelled: Polled before each column; a true result aborts the block

        Returns:
            uint8 RGB array of shape (y_end - y_start, x_end - x_start, 3)

        Raises:
            RenderCancelled: if ``cancelled`` returned True
            InvalidParameterError: if the plane maps a pixel to a non-finite coordinate
        """
        width = x_end - x_start
        height = y_end - y_start
        hues = np.empty((height, width), dtype=np.float64)

        real_axis = np.arange(x_start, x_end) * plane.x_scale + plane.xmin
        imag_axis = np.arange(y_start, y_end) * plane.y_scale + plane.ymin
        if not (np.all(np.isfinite(real_axis)) and np.all(np.isfinite(imag_axis))):
            raise InvalidParameterError("Non-finite coordinate in render block")

        column = np.empty(height, dtype=np.float64)
        for x in range(width):
            if cancelled is not None and cancelled():
                raise RenderCancelled("Render cancelled")
            column.fill(real_axis[x])
            hues[:, x] = self._kernel(column, imag_axis)[2]
            if progress is not None:
                progress(height)

        return hues_to_rgb(hues)
