"""
Image export for finished renders.

This module writes pixel buffers to disk with embedded render metadata,
names files after the render parameters without overwriting existing files,
and shows a scaled preview of a finished image.
"""

import numpy as np
from typing import Any, Dict, Optional, Tuple
from pathlib import Path
from dataclasses import dataclass, asdict, field
import json
import logging
from datetime import datetime

from PIL import Image, PngImagePlugin

from .. import __version__
from ..core.parameters import RenderParameters

logger = logging.getLogger(__name__)

PREVIEW_SIZE = (1280, 720)


@dataclass
class RenderMetadata:
    """Metadata for fractal renders."""

    center: Tuple[float, float]
    zoom_magnitude: float
    exponent: float
    bailout: float
    max_iterations: int
    color_factor: float
    color_offset: float
    resolution: Tuple[int, int]  # width, height
    bounds: Tuple[float, float, float, float]  # xmin, xmax, ymin, ymax

    render_time_seconds: float = 0.0
    tiles_used: bool = False

    timestamp: str = ""
    software_version: str = __version__

    extra: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Set default timestamp if not provided."""
        if not self.timestamp:
            self.timestamp = datetime.now().isoformat()

    @classmethod
    def from_parameters(cls, params: RenderParameters, render_time: float = 0.0) -> 'RenderMetadata':
        return cls(
            center=(params.x, params.y),
            zoom_magnitude=params.zoom_magnitude,
            exponent=params.exponent,
            bailout=params.bailout,
            max_iterations=params.iteration_limit,
            color_factor=params.color_factor,
            color_offset=params.color_offset,
            resolution=(params.width, params.height),
            bounds=params.bounds,
            render_time_seconds=render_time,
            tiles_used=params.parallel,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert metadata to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RenderMetadata':
        """Create metadata from dictionary."""
        data = dict(data)
        for key in ('center', 'resolution', 'bounds'):
            if key in data:
                data[key] = tuple(data[key])
        return cls(**data)

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, json_str: str) -> 'RenderMetadata':
        """Create metadata from JSON string."""
        return cls.from_dict(json.loads(json_str))


def render_filename(params: RenderParameters) -> str:
    """Base file name (without extension) describing the render parameters."""
    return (f"Mandelbrot ({float(params.x)!r},{float(params.y)!r}) "
            f"zoom={float(params.zoom_magnitude)!r}, "
            f"colorFactor={float(params.color_factor)!r}, "
            f"colorConstant={float(params.color_offset)!r}, "
            f"iterations={params.iteration_limit}, "
            f"exponent={float(params.exponent)!r}, "
            f"bailout={float(params.bailout)!r}")


def unique_path(directory: Path, name: str, extension: str = '.png') -> Path:
    """
    First path in ``directory`` for ``name`` that does not exist yet.

    Tries ``name.ext``, then ``name_1.ext``, ``name_2.ext`` and so on.
    """
    candidate = directory / f"{name}{extension}"
    append = 1
    while candidate.exists():
        candidate = directory / f"{name}_{append}{extension}"
        append += 1
    return candidate


class ImageExporter:
    """Image export with metadata support."""

    def __init__(self):
        self.supported_formats = {
            '.png': self._save_png,
            '.jpg': self._save_jpeg,
            '.jpeg': self._save_jpeg,
        }

    def save_image(self, image_array: np.ndarray, filepath: Path,
                   metadata: Optional[RenderMetadata] = None,
                   quality: int = 95) -> None:
        """
        Save RGB image array to file with metadata.

        Args:
            image_array: uint8 RGB image array (height, width, 3)
            filepath: Output file path
            metadata: Render metadata to embed
            quality: JPEG quality (1-100)
        """
        filepath = Path(filepath)
        suffix = filepath.suffix.lower()

        if suffix not in self.supported_formats:
            supported = ', '.join(self.supported_formats.keys())
            raise ValueError(f"Unsupported format '{suffix}'. Supported: {supported}")

        pil_image = self._to_pil(image_array)

        save_method = self.supported_formats[suffix]
        try:
            save_method(pil_image, filepath, metadata, quality)
        except OSError as e:
            raise OSError(f"Exception writing image {filepath}: {e}") from e

        logger.info(f"Saved image: {filepath} ({pil_image.size[0]}x{pil_image.size[1]})")

    def save_render(self, image_array: np.ndarray, output_dir: Path,
                    params: RenderParameters,
                    metadata: Optional[RenderMetadata] = None) -> Path:
        """
        Save a render as PNG in ``output_dir`` named after its parameters.

        Existing files are never overwritten; a numeric suffix is added instead.

        Returns:
            Path of the written file

        Raises:
            NotADirectoryError: if output_dir is not an existing directory
        """
        output_dir = Path(output_dir)
        if not output_dir.is_dir():
            raise NotADirectoryError(f"Invalid output path - must be a directory: {output_dir.resolve()}")

        logger.info("Saving Image...")
        filepath = unique_path(output_dir, render_filename(params))
        self.save_image(image_array, filepath, metadata or RenderMetadata.from_parameters(params))
        return filepath

    def _to_pil(self, image_array: np.ndarray) -> Image.Image:
        if image_array.ndim != 3 or image_array.shape[2] != 3:
            raise ValueError(f"Expected RGB image array (H, W, 3), got {image_array.shape}")
        if image_array.dtype != np.uint8:
            raise ValueError(f"Expected uint8 image array, got {image_array.dtype}")
        return Image.fromarray(np.ascontiguousarray(image_array))

    def _save_png(self, pil_image: Image.Image, filepath: Path,
                  metadata: Optional[RenderMetadata], quality: int) -> None:
        """Save as PNG with metadata."""
        pnginfo = PngImagePlugin.PngInfo()

        if metadata:
            pnginfo.add_text("Title", "Generalized Mandelbrot set")
            pnginfo.add_text("Software", f"fractal-drawing v{metadata.software_version}")
            pnginfo.add_text("Creation Time", metadata.timestamp)
            pnginfo.add_text("FractalMetadata", metadata.to_json())

        pil_image.save(filepath, "PNG", pnginfo=pnginfo)

    def _save_jpeg(self, pil_image: Image.Image, filepath: Path,
                   metadata: Optional[RenderMetadata], quality: int) -> None:
        """Save as JPEG, with metadata in a companion JSON file."""
        pil_image.save(filepath, "JPEG", quality=quality, optimize=True)

        if metadata:
            json_path = filepath.with_suffix('.json')
            json_path.write_text(metadata.to_json())
            logger.info(f"Saved metadata: {json_path}")

    def extract_metadata_from_image(self, filepath: Path) -> Optional[RenderMetadata]:
        """
        Extract render metadata from a saved image.

        Returns:
            Extracted metadata or None when the file carries none
        """
        filepath = Path(filepath)

        with Image.open(filepath) as img:
            text = getattr(img, 'text', {})
            if 'FractalMetadata' in text:
                return RenderMetadata.from_json(text['FractalMetadata'])

        json_path = filepath.with_suffix('.json')
        if filepath.suffix.lower() in ('.jpg', '.jpeg') and json_path.exists():
            return RenderMetadata.from_json(json_path.read_text())

        return None

    def create_preview(self, image_array: np.ndarray,
                       size: Tuple[int, int] = PREVIEW_SIZE) -> Image.Image:
        """Scaled copy of the image for on-screen display."""
        return self._to_pil(image_array).resize(size, Image.LANCZOS)

    def preview(self, image_array: np.ndarray, size: Tuple[int, int] = PREVIEW_SIZE) -> None:
        """Show a scaled preview in the system image viewer."""
        logger.info("Display Image")
        self.create_preview(image_array, size).show(title="Fractal preview")
