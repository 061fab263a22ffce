import numpy as np
import pytest
from PIL import Image

from fractal_drawing.core.parameters import RenderParameters
from fractal_drawing.rendering.image_output import (ImageExporter, RenderMetadata,
                                                    render_filename, unique_path)


@pytest.fixture
def image():
    rng = np.random.default_rng(3)
    return rng.integers(0, 256, size=(18, 32, 3), dtype=np.uint8)


def test_render_filename():
    assert render_filename(RenderParameters()) == (
        "Mandelbrot (-0.75,0.0) zoom=0.0, colorFactor=1.0, colorConstant=0.0, "
        "iterations=85, exponent=2.0, bailout=2.0")


def test_render_filename_uses_explicit_iterations():
    params = RenderParameters(x=0.5, y=-1, zoom_magnitude=3, max_iterations=300, exponent=3)
    name = render_filename(params)
    assert name.startswith("Mandelbrot (0.5,-1.0) zoom=3.0,")
    assert "iterations=300" in name
    assert name.endswith("exponent=3.0, bailout=2.0")


def test_unique_path_appends_counter(tmp_path):
    first = unique_path(tmp_path, "render")
    assert first == tmp_path / "render.png"
    first.touch()
    second = unique_path(tmp_path, "render")
    assert second == tmp_path / "render_1.png"
    second.touch()
    assert unique_path(tmp_path, "render") == tmp_path / "render_2.png"


def test_save_render_never_overwrites(tmp_path, image):
    exporter = ImageExporter()
    params = RenderParameters()
    first = exporter.save_render(image, tmp_path, params)
    second = exporter.save_render(image, tmp_path, params)

    assert first != second
    assert second.name.endswith("_1.png")
    with Image.open(first) as saved:
        assert saved.size == (32, 18)
        assert np.array_equal(np.asarray(saved), image)


def test_save_render_requires_directory(tmp_path, image):
    target = tmp_path / "file.txt"
    target.write_text("x")
    with pytest.raises(NotADirectoryError):
        ImageExporter().save_render(image, target, RenderParameters())
    with pytest.raises(NotADirectoryError):
        ImageExporter().save_render(image, tmp_path / "missing", RenderParameters())


def test_png_metadata_round_trip(tmp_path, image):
    exporter = ImageExporter()
    metadata = RenderMetadata.from_parameters(RenderParameters(exponent=3.0), render_time=1.5)
    path = tmp_path / "out.png"
    exporter.save_image(image, path, metadata)

    loaded = exporter.extract_metadata_from_image(path)
    assert loaded == metadata
    assert loaded.exponent == 3.0
    assert loaded.resolution == (1920, 1080)


def test_jpeg_writes_companion_metadata(tmp_path, image):
    exporter = ImageExporter()
    metadata = RenderMetadata.from_parameters(RenderParameters())
    path = tmp_path / "out.jpg"
    exporter.save_image(image, path, metadata)

    assert path.with_suffix('.json').exists()
    assert exporter.extract_metadata_from_image(path) == metadata


def test_image_without_metadata(tmp_path, image):
    path = tmp_path / "plain.png"
    ImageExporter().save_image(image, path)
    assert ImageExporter().extract_metadata_from_image(path) is None


def test_unsupported_format(tmp_path, image):
    with pytest.raises(ValueError, match="Unsupported format"):
        ImageExporter().save_image(image, tmp_path / "out.bmp")


@pytest.mark.parametrize("bad", [
    np.zeros((4, 4), dtype=np.uint8),
    np.zeros((4, 4, 4), dtype=np.uint8),
    np.zeros((4, 4, 3), dtype=np.float64),
])
def test_rejects_bad_arrays(tmp_path, bad):
    with pytest.raises(ValueError):
        ImageExporter().save_image(bad, tmp_path / "out.png")


def test_preview_is_scaled(image):
    preview = ImageExporter().create_preview(image, size=(64, 36))
    assert preview.size == (64, 36)


def test_preview_shows_image(image, monkeypatch):
    shown = []
    monkeypatch.setattr(Image.Image, 'show', lambda self, title=None: shown.append(self.size))
    ImageExporter().preview(image, size=(16, 9))
    assert shown == [(16, 9)]
