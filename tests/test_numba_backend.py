import math

import numpy as np
import pytest

from fractal_drawing.acceleration.numba_backend import (complex_pow, escape_time_kernel,
                                                       smoothing_magnitude)
from fractal_drawing.core.complex_number import ComplexNumber


@pytest.mark.parametrize("z", [(0.3, 0.4), (-0.6, 0.2), (1.5, -0.8), (-1.2, -1.1)])
@pytest.mark.parametrize("p", [2.0, 3.0, -2.0, 0.5, 4.5])
def test_pow_matches_complex_number(z, p):
    real, imag = complex_pow(z[0], z[1], p, 0.0)
    expected = ComplexNumber(*z).pow(ComplexNumber(p, 0.0))
    assert real == pytest.approx(expected.real, abs=1e-12)
    assert imag == pytest.approx(expected.imag, abs=1e-12)


def test_pow_zero_base():
    assert complex_pow(0.0, 0.0, 2.0, 0.0) == (0.0, 0.0)
    assert complex_pow(0.0, 0.0, 0.0, 0.0) == (1.0, 0.0)
    real, imag = complex_pow(0.0, 0.0, -2.0, 0.0)
    assert math.isinf(real)
    assert imag == 0.0


def test_pow_overflow_is_infinite():
    real, _ = complex_pow(1e200, 0.0, 5.0, 0.0)
    assert math.isinf(real)


def test_smoothing_magnitude_of_equal_points():
    assert smoothing_magnitude(1.5, -0.5, 1.5, -0.5, -0.5) == 0.0
    # (2i)^(1/2) = 1 + i
    assert smoothing_magnitude(1.0, 3.0, 1.0, 1.0, 0.5) == pytest.approx(math.sqrt(2))


def test_kernel_output_shapes():
    c_real = np.array([0.0, 2.0, 1.0])
    c_imag = np.array([0.0, 0.0, 1.0])
    iterations, magnitudes, hues = escape_time_kernel(c_real, c_imag, 2.0, 0.5, 100, 2.0, 1.0, 0.0)

    assert list(iterations) == [100, 1, 2]
    assert magnitudes[0] == 0.0
    assert hues[0] == pytest.approx(1.02)
    assert np.all(np.isfinite(hues))


def test_kernel_empty_input():
    empty = np.empty(0, dtype=np.float64)
    iterations, magnitudes, hues = escape_time_kernel(empty, empty, 2.0, 0.5, 10, 2.0, 1.0, 0.0)
    assert iterations.shape == magnitudes.shape == hues.shape == (0,)
