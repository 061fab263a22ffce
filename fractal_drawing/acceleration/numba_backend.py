"""
Numba JIT compilation backend for escape-time evaluation.

This module provides the compiled kernel behind every render path. It
evaluates the orbit z -> z^p + c with the same polar power formula as
ComplexNumber.pow, reduces the final orbit value to the smoothing magnitude
and returns the unwrapped hue of each point. The single-pixel and block paths
both call it, so they yield identical bytes.
"""

import math
import logging

import numba
import numpy as np
from numba import jit

logger = logging.getLogger(__name__)

logger.debug(f"Numba available: {numba.__version__}")


@jit(nopython=True, cache=True)
def complex_pow(a, b, power_real, power_imag):
    """
    Raise a + bi to a complex power using exp(p * ln(z)).

    A zero base gives 0 for Re p > 0, 1 for p == 0 and (inf, 0) otherwise.

    Returns:
        Tuple of (real, imag)
    """
    if a == 0.0 and b == 0.0:
        if power_real > 0.0:
            return 0.0, 0.0
        if power_real == 0.0 and power_imag == 0.0:
            return 1.0, 0.0
        return np.inf, 0.0

    modulus_sq = a * a + b * b
    if modulus_sq == 0.0:
        log_this = -np.inf
    else:
        log_this = 0.5 * math.log(modulus_sq)
    theta = math.atan2(b, a)
    magnitude = math.exp(power_real * log_this - power_imag * theta)
    angle = power_imag * log_this + power_real * theta
    if math.isinf(angle):
        return np.nan, np.nan
    return magnitude * math.cos(angle), magnitude * math.sin(angle)


@jit(nopython=True, cache=True)
def smoothing_magnitude(zr, zi, cr, ci, inverse_power):
    """|(-1) * (z - c)^(1/p)|, taken as 0 when z == c."""
    dr = zr - cr
    di = zi - ci
    if dr == 0.0 and di == 0.0:
        return 0.0
    wr, wi = complex_pow(dr, di, inverse_power, 0.0)
    return math.hypot(wr * -1.0 - wi * 0.0, wr * 0.0 + wi * -1.0)


@jit(nopython=True, cache=True)
def escape_time_kernel(c_real, c_imag, power, inverse_power, max_iter, bailout,
                       color_factor, color_offset):
    """
    JIT-compiled escape-time kernel for a flat run of points.

    Args:
        c_real: Real components of c values
        c_imag: Imaginary components of c values
        power: Real exponent of the iteration
        inverse_power: 1 / power
        max_iter: Maximum iterations
        bailout: Bailout radius
        color_factor: Hue scale
        color_offset: Hue shift

    Returns:
        Tuple of (iterations, magnitudes, hues)
    """
    count = c_real.shape[0]
    iterations = np.empty(count, dtype=np.int64)
    magnitudes = np.empty(count, dtype=np.float64)
    hues = np.empty(count, dtype=np.float64)

    bailout_sq = bailout * bailout
    normalization = bailout_sq - bailout

    for k in range(count):
        cr = c_real[k]
        ci = c_imag[k]

        # 0^p contributes nothing, so the first step from the origin lands on c
        zr = cr
        zi = ci
        n = 1
        while n < max_iter and zr * zr + zi * zi < bailout_sq:
            pr, pi = complex_pow(zr, zi, power, 0.0)
            zr = pr + cr
            zi = pi + ci
            n += 1

        magnitude = smoothing_magnitude(zr, zi, cr, ci, inverse_power)
        term = (bailout_sq - magnitude) / normalization
        if not math.isfinite(term):
            term = 0.0

        iterations[k] = n
        magnitudes[k] = magnitude
        hues[k] = ((n + term) / max_iter) * color_factor + color_offset

    return iterations, magnitudes, hues
