import math

import numpy as np
import pytest

from fractal_drawing.core.complex_number import ComplexNumber
from fractal_drawing.core.escape_time import EscapeTimeEvaluator
from fractal_drawing.core.exceptions import InvalidParameterError, RenderCancelled
from fractal_drawing.core.parameters import RenderParameters


@pytest.fixture
def evaluator():
    params = RenderParameters(exponent=2.0, bailout=2.0, max_iterations=100).validate()
    return EscapeTimeEvaluator(params)


def test_origin_never_escapes(evaluator):
    result = evaluator.evaluate(0)
    assert result.iterations == 100


@pytest.mark.parametrize("max_iterations", [10, 250, 1000])
def test_interior_point_reaches_limit(max_iterations):
    params = RenderParameters(max_iterations=max_iterations).validate()
    assert EscapeTimeEvaluator(params).evaluate(ComplexNumber(0, 0)).iterations == max_iterations


def test_interior_hue(evaluator):
    # z stays at 0, so the smoothing magnitude is 0 and the term is bail^2 / (bail^2 - bail)
    result = evaluator.evaluate(0)
    assert result.magnitude == 0.0
    assert result.hue == pytest.approx((100 + 2.0) / 100)
    assert result.rgb == (255, 31, 0)


def test_escape_immediately(evaluator):
    result = evaluator.evaluate(ComplexNumber(2, 0))
    assert result.iterations == 1
    assert math.isfinite(result.hue)


def test_escape_after_two_steps(evaluator):
    # z1 = 1+i (|z|^2 = 2), z2 = (1+i)^2 + 1+i = 1+3i (|z|^2 = 10)
    n, z = evaluator.iterate(ComplexNumber(1, 1))
    assert n == 2
    assert z.real == pytest.approx(1.0)
    assert z.imag == pytest.approx(3.0)


def test_smoothing_magnitude(evaluator):
    z = ComplexNumber(1, 3)
    c = ComplexNumber(1, 1)
    # (z - c)^(1/2) = (2i)^(1/2) = 1 + i
    assert evaluator.smoothing_magnitude(z, c) == pytest.approx(math.sqrt(2))


def test_hue_formula():
    params = RenderParameters(bailout=3.0, max_iterations=50, color_factor=2.0,
                              color_offset=0.25).validate()
    evaluator = EscapeTimeEvaluator(params)
    expected = ((7 + (9.0 - 4.0) / (9.0 - 3.0)) / 50) * 2.0 + 0.25
    assert evaluator.hue(7, 4.0) == pytest.approx(expected)


def test_non_finite_smoothing_term_falls_back(evaluator):
    assert evaluator.hue(100, math.inf) == pytest.approx(1.0)
    assert evaluator.hue(100, math.nan) == pytest.approx(1.0)


def test_determinism(evaluator):
    c = ComplexNumber(-0.74, 0.11)
    assert evaluator.evaluate(c) == evaluator.evaluate(c)


@pytest.mark.parametrize("exponent", [-2.0, -1.5, 0.5, 3.0, 4.5])
def test_other_exponents_stay_finite(exponent):
    params = RenderParameters(exponent=exponent, max_iterations=60).validate()
    evaluator = EscapeTimeEvaluator(params)
    for c in (ComplexNumber(0, 0), ComplexNumber(0.3, -0.2), ComplexNumber(-1.1, 0.7)):
        result = evaluator.evaluate(c)
        assert 1 <= result.iterations <= 60
        assert math.isfinite(result.hue)
        assert all(0 <= channel <= 255 for channel in result.rgb)


@pytest.mark.parametrize("c", [ComplexNumber(math.nan, 0), complex(0, math.inf)])
def test_rejects_non_finite_coordinate(evaluator, c):
    with pytest.raises(InvalidParameterError):
        evaluator.evaluate(c)


class TestRenderBlock:

    def test_matches_per_pixel_evaluation(self, params, small_plane):
        evaluator = EscapeTimeEvaluator(params)
        image = evaluator.render_block(small_plane, 0, small_plane.width, 0, small_plane.height)

        assert image.shape == (small_plane.height, small_plane.width, 3)
        assert image.dtype == np.uint8
        for x, y in [(0, 0), (5, 3), (20, 12), (39, 23)]:
            expected = evaluator.evaluate(small_plane.pixel_to_complex(x, y)).rgb
            assert tuple(image[y, x]) == expected

    def test_sub_block_uses_global_coordinates(self, params, small_plane):
        evaluator = EscapeTimeEvaluator(params)
        full = evaluator.render_block(small_plane, 0, small_plane.width, 0, small_plane.height)
        block = evaluator.render_block(small_plane, 10, 25, 4, 17)
        assert np.array_equal(block, full[4:17, 10:25])

    def test_progress_counts_every_pixel(self, params, small_plane):
        evaluator = EscapeTimeEvaluator(params)
        reports = []
        evaluator.render_block(small_plane, 0, 8, 0, 5, progress=reports.append)
        assert reports == [5] * 8

    def test_cancellation(self, params, small_plane):
        evaluator = EscapeTimeEvaluator(params)
        with pytest.raises(RenderCancelled):
            evaluator.render_block(small_plane, 0, 8, 0, 5, cancelled=lambda: True)

    def test_image_is_not_uniform(self, params, small_plane):
        evaluator = EscapeTimeEvaluator(params)
        image = evaluator.render_block(small_plane, 0, small_plane.width, 0, small_plane.height)
        assert len(np.unique(image.reshape(-1, 3), axis=0)) > 5


def test_negative_exponent_outer_band_uses_zero_magnitude():
    # |c| >= bailout escapes at n=1 with z == c, so the smoothing magnitude is 0
    params = RenderParameters(exponent=-2.0, max_iterations=85).validate()
    evaluator = EscapeTimeEvaluator(params)
    c = ComplexNumber(-2.5, 0.9)

    result = evaluator.evaluate(c)

    assert result.iterations == 1
    assert result.magnitude == 0.0
    assert result.hue == pytest.approx(3 / 85)
    assert evaluator.smoothing_magnitude(c, c) == 0.0


def test_outer_band_hue_does_not_depend_on_exponent_sign():
    c = ComplexNumber(-2.5, 0.9)
    positive = EscapeTimeEvaluator(RenderParameters(exponent=2.0, max_iterations=85).validate())
    negative = EscapeTimeEvaluator(RenderParameters(exponent=-2.0, max_iterations=85).validate())
    assert positive.evaluate(c).rgb == negative.evaluate(c).rgb


@pytest.mark.parametrize("exponent", [2.0, 3.0])
@pytest.mark.parametrize("c", [ComplexNumber(-0.2, 0.1), ComplexNumber(0.5, 0.5),
                               ComplexNumber(0.45, -0.1), ComplexNumber(1.5, 1.5)])
def test_compiled_evaluation_matches_step_by_step(exponent, c):
    evaluator = EscapeTimeEvaluator(RenderParameters(exponent=exponent, max_iterations=50).validate())
    n, z = evaluator.iterate(c)
    magnitude = evaluator.smoothing_magnitude(z, c)

    result = evaluator.evaluate(c)

    assert result.iterations == n
    if math.isfinite(magnitude):
        assert result.magnitude == pytest.approx(magnitude)
    assert result.hue == pytest.approx(evaluator.hue(n, magnitude))
