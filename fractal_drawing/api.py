"""
Main API classes for fractal generation.

This module provides the high-level interface that ties the escape-time
engine, the tile scheduler, progress reporting and image export together.
"""

import numpy as np
from typing import Callable, Optional
from pathlib import Path
import logging
import time

from .core.parameters import ComplexPlane, RenderParameters
from .acceleration.multiprocessing import TileScheduler
from .acceleration.progress import ProgressTracker
from .rendering.image_output import ImageExporter, RenderMetadata

logger = logging.getLogger(__name__)


class FractalRenderer:
    """Main fractal rendering engine."""

    def __init__(self, params: Optional[RenderParameters] = None, use_processes: bool = True):
        """
        Initialize fractal renderer.

        Args:
            params: Render parameters (uses defaults if None)
            use_processes: Run parallel tiles in processes rather than threads

        Raises:
            InvalidParameterError: if the parameters are invalid
        """
        self.params = (params or RenderParameters()).validate()
        self.use_processes = use_processes
        self.last_render_time = 0.0

        logger.info(f"FractalRenderer initialized: {self.params.describe()}")

    def _prepare(self, plane: Optional[ComplexPlane],
                 progress_callback: Optional[Callable[[int], None]]):
        plane = plane or self.params.plane()
        tracker = ProgressTracker(plane.width * plane.height)
        if progress_callback is not None:
            tracker.add_listener(progress_callback)
        return plane, tracker

    def _finish(self, image: np.ndarray, start_time: float) -> np.ndarray:
        image.flags.writeable = False
        self.last_render_time = time.time() - start_time
        logger.info(f"Render complete: {self.last_render_time:.2f}s")
        return image

    def render(self, progress_callback: Optional[Callable[[int], None]] = None,
               plane: Optional[ComplexPlane] = None) -> np.ndarray:
        """
        Render the fractal.

        Uses the tiled path when ``params.parallel`` is set.

        Args:
            progress_callback: Called with each new whole percentage
            plane: Region to render (defaults to the full parameter plane)

        Returns:
            Read-only uint8 RGB array of shape (height, width, 3)
        """
        if self.params.parallel:
            return self.render_parallel(progress_callback, plane)
        return self.render_single(progress_callback, plane)

    def render_single(self, progress_callback: Optional[Callable[[int], None]] = None,
                      plane: Optional[ComplexPlane] = None) -> np.ndarray:
        """Render on the calling thread as a single tile."""
        start_time = time.time()
        logger.info("Begin Generation")
        plane, tracker = self._prepare(plane, progress_callback)
        scheduler = TileScheduler(1, use_processes=self.use_processes)
        image = scheduler.render_single(self.params, plane, tracker)
        return self._finish(image, start_time)

    def render_parallel(self, progress_callback: Optional[Callable[[int], None]] = None,
                        plane: Optional[ComplexPlane] = None) -> np.ndarray:
        """
        Render on a grid of tiles in a worker pool.

        Raises:
            RenderError: if any tile fails
        """
        start_time = time.time()
        logger.info("Begin Multithreaded Generation")
        plane, tracker = self._prepare(plane, progress_callback)
        scheduler = TileScheduler(self.params.workers, use_processes=self.use_processes)
        image = scheduler.render(self.params, plane, tracker)
        return self._finish(image, start_time)

    def metadata(self) -> RenderMetadata:
        return RenderMetadata.from_parameters(self.params, self.last_render_time)

    def save(self, image: np.ndarray, output_dir: Path) -> Path:
        """
        Save a rendered image into a directory.

        Returns:
            Path of the written file
        """
        return ImageExporter().save_render(image, Path(output_dir), self.params, self.metadata())

    def preview(self, image: np.ndarray) -> None:
        ImageExporter().preview(image)
