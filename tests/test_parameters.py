import dataclasses
import math

import pytest

from fractal_drawing.core.exceptions import InvalidParameterError
from fractal_drawing.core.parameters import (ComplexPlane, RenderParameters,
                                             default_max_iterations)


def test_defaults():
    params = RenderParameters().validate()
    assert (params.x, params.y) == (-0.75, 0.0)
    assert params.zoom == 1.0
    assert params.bailout_squared == 4.0
    assert params.width == 1920
    assert params.height == 1080
    assert params.parallel is False


def test_bounds_follow_aspect_ratio():
    xmin, xmax, ymin, ymax = RenderParameters().bounds
    assert xmin == pytest.approx(-0.75 - 16 / 9)
    assert xmax == pytest.approx(-0.75 + 16 / 9)
    # the top row is the larger imaginary value
    assert (ymin, ymax) == (1.0, -1.0)


def test_zoom_shrinks_bounds():
    params = RenderParameters(x=0.25, y=0.5, zoom_magnitude=2.0)
    xmin, xmax, ymin, ymax = params.bounds
    assert params.zoom == 4.0
    assert xmax - xmin == pytest.approx(2 * (16 / 9) / 4)
    assert ymin == pytest.approx(0.75)
    assert ymax == pytest.approx(0.25)


def test_resolution_multiplier():
    params = RenderParameters(resolution=2)
    assert (params.width, params.height) == (3840, 2160)
    plane = params.plane()
    assert (plane.width, plane.height) == (3840, 2160)


def test_derived_iteration_limit():
    assert default_max_iterations(1.0) == 85
    assert RenderParameters().iteration_limit == 85
    assert RenderParameters(max_iterations=0).iteration_limit == 85
    expected = 75 + round(5 * 1.85 ** math.log1p(2 * 2.0 ** 10))
    assert RenderParameters(zoom_magnitude=10).iteration_limit == expected


def test_explicit_iteration_limit():
    assert RenderParameters(max_iterations=500).iteration_limit == 500


def test_exponent_as_complex():
    params = RenderParameters(exponent=3.0)
    assert complex(params.exponent_complex) == 3 + 0j
    assert params.inverse_exponent_complex.real == pytest.approx(1 / 3)
    assert params.inverse_exponent_complex.imag == 0.0


@pytest.mark.parametrize("changes", [
    {"bailout": 1.0},
    {"bailout": 0.5},
    {"exponent": 0.0},
    {"exponent": 1.0},
    {"resolution": 0},
    {"x": math.nan},
    {"y": math.inf},
    {"zoom_magnitude": 5000.0},
    {"color_factor": 0.0},
    {"color_offset": 1.0},
    {"color_offset": -0.1},
    {"max_iterations": -1},
    {"workers": 0},
])
def test_validation_rejects(changes):
    with pytest.raises(InvalidParameterError):
        RenderParameters(**changes).validate()


def test_negative_exponent_is_valid():
    RenderParameters(exponent=-2.0).validate()


def test_frozen():
    params = RenderParameters()
    with pytest.raises(dataclasses.FrozenInstanceError):
        params.x = 1.0


def test_dict_round_trip():
    params = RenderParameters(x=0.1, exponent=3.0, parallel=True, workers=4)
    assert RenderParameters.from_dict(params.to_dict()) == params


def test_from_dict_rejects_unknown_keys():
    with pytest.raises(InvalidParameterError, match="colour"):
        RenderParameters.from_dict({"colour": 1})


class TestComplexPlane:

    def test_pixel_mapping(self):
        plane = ComplexPlane(-2.0, 2.0, 1.0, -1.0, 4, 2)
        assert plane.x_scale == 1.0
        assert plane.y_scale == -1.0
        assert complex(plane.pixel_to_complex(0, 0)) == -2 + 1j
        assert complex(plane.pixel_to_complex(3, 1)) == 1 + 0j

    def test_invalid_size(self):
        with pytest.raises(InvalidParameterError):
            ComplexPlane(-1, 1, -1, 1, 0, 10)

    def test_zero_extent(self):
        with pytest.raises(InvalidParameterError):
            ComplexPlane(1, 1, -1, 1, 10, 10)
