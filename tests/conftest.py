import pytest

from fractal_drawing.core.parameters import RenderParameters


@pytest.fixture
def params():
    """Classic full-frame Mandelbrot parameters with a short iteration limit."""
    return RenderParameters(x=-0.75, y=0.0, zoom_magnitude=0.0, exponent=2.0, bailout=2.0,
                            color_factor=1.0, color_offset=0.0, max_iterations=40).validate()


@pytest.fixture
def small_plane(params):
    """The classic view sampled on a 40x24 grid."""
    return params.plane(40, 24)


@pytest.fixture
def small_size(monkeypatch):
    """Shrink the base image size so full renders stay fast."""
    monkeypatch.setattr('fractal_drawing.core.parameters.BASE_WIDTH', 32)
    monkeypatch.setattr('fractal_drawing.core.parameters.BASE_HEIGHT', 18)
    return 32, 18
