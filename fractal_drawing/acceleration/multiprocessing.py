"""
Tile-based parallel rendering.

The image is split into a grid of tiles, each evaluated independently in a
worker pool, and the tile buffers are merged by their grid offsets. Every
pixel is evaluated from its global index, so the merged image is identical
to the single-tile render regardless of grid shape or completion order.
"""

import numpy as np
from typing import List, Optional
import multiprocessing as mp
import queue
import threading
import logging
import time
from dataclasses import dataclass
from concurrent.futures import (ProcessPoolExecutor, ThreadPoolExecutor, Future,
                                FIRST_COMPLETED, wait)

from ..core.escape_time import EscapeTimeEvaluator
from ..core.exceptions import RenderCancelled, RenderError
from ..core.parameters import ComplexPlane, RenderParameters
from .progress import ProgressTracker

logger = logging.getLogger(__name__)

POLL_INTERVAL = 0.1


@dataclass(frozen=True)
class TileSpec:
    """Specification for a single tile in parallel rendering."""
    tile_id: int
    column: int
    row: int
    x_start: int
    x_end: int
    y_start: int
    y_end: int

    @property
    def width(self) -> int:
        return self.x_end - self.x_start

    @property
    def height(self) -> int:
        return self.y_end - self.y_start

    def get_bounds(self, plane: ComplexPlane):
        """Get complex plane bounds (xmin, xmax, ymin, ymax) for this tile."""
        xmin = plane.xmin + self.x_start * plane.x_scale
        xmax = plane.xmin + self.x_end * plane.x_scale
        ymin = plane.ymin + self.y_start * plane.y_scale
        ymax = plane.ymin + self.y_end * plane.y_scale
        return xmin, xmax, ymin, ymax


@dataclass
class TileResult:
    """Result from processing a single tile."""
    tile_id: int
    x_start: int
    y_start: int
    pixels: np.ndarray
    processing_time: float


def plan_tiles(width: int, height: int, divisions: int) -> List[TileSpec]:
    """
    Create a divisions x divisions grid of tiles covering the image.

    Tiles are width // divisions by height // divisions pixels; the last
    column and row absorb any remainder. ``divisions`` is clamped so that
    no tile is empty.

    Args:
        width: Total image width
        height: Total image height
        divisions: Tiles per side

    Returns:
        List of TileSpec objects in row-major order
    """
    divisions = max(1, min(divisions, width, height))
    part_width = width // divisions
    part_height = height // divisions

    tiles = []
    for row in range(divisions):
        y_start = row * part_height
        y_end = height if row == divisions - 1 else y_start + part_height
        for column in range(divisions):
            x_start = column * part_width
            x_end = width if column == divisions - 1 else x_start + part_width
            tiles.append(TileSpec(
                tile_id=len(tiles),
                column=column,
                row=row,
                x_start=x_start,
                x_end=x_end,
                y_start=y_start,
                y_end=y_end,
            ))

    logger.debug(f"Planned {len(tiles)} tiles ({divisions}x{divisions}) "
                 f"of about {part_width}x{part_height} pixels")
    return tiles


def process_tile(params: RenderParameters, plane: ComplexPlane, tile: TileSpec,
                 progress_queue=None, cancel_event=None) -> TileResult:
    """
    Render one tile, in a worker process or thread.

    Args:
        params: Render parameters
        plane: Full-image complex plane
        tile: Tile to render
        progress_queue: Receives the pixel count of each finished column
        cancel_event: Set by the scheduler when the render is abandoned

    Returns:
        TileResult with the tile's local RGB buffer
    """
    start_time = time.time()

    evaluator = EscapeTimeEvaluator(params)
    report = progress_queue.put if progress_queue is not None else None
    cancelled = cancel_event.is_set if cancel_event is not None else None

    pixels = evaluator.render_block(plane, tile.x_start, tile.x_end,
                                    tile.y_start, tile.y_end,
                                    progress=report, cancelled=cancelled)

    return TileResult(
        tile_id=tile.tile_id,
        x_start=tile.x_start,
        y_start=tile.y_start,
        pixels=pixels,
        processing_time=time.time() - start_time,
    )


def assemble_tiles(tile_results: List[TileResult], total_width: int, total_height: int) -> np.ndarray:
    """
    Assemble tile buffers into a complete image.

    Args:
        tile_results: Results of every tile, in any order
        total_width: Total image width
        total_height: Total image height

    Returns:
        uint8 RGB array of shape (total_height, total_width, 3)
    """
    image = np.zeros((total_height, total_width, 3), dtype=np.uint8)

    for tile_result in tile_results:
        x_start = tile_result.x_start
        y_start = tile_result.y_start
        tile_height, tile_width = tile_result.pixels.shape[:2]
        image[y_start:y_start + tile_height, x_start:x_start + tile_width] = tile_result.pixels

    return image


def get_optimal_process_count() -> int:
    """Number of workers to use when none is configured."""
    return mp.cpu_count()


class TileScheduler:
    """Runs renders on one tile or on a grid of tiles in a worker pool."""

    def __init__(self, num_workers: Optional[int] = None, use_processes: bool = True):
        """
        Initialize the scheduler.

        Args:
            num_workers: Worker count and tiles per side (None for CPU count)
            use_processes: Use a process pool; False selects a thread pool
        """
        if num_workers is None:
            self.num_workers = get_optimal_process_count()
        else:
            self.num_workers = max(1, num_workers)
        self.use_processes = use_processes

        backend = 'processes' if use_processes else 'threads'
        logger.info(f"Tile scheduler: {self.num_workers} workers ({backend})")

    def render_single(self, params: RenderParameters, plane: ComplexPlane,
                      tracker: Optional[ProgressTracker] = None) -> np.ndarray:
        """Render the whole plane as one tile in the calling thread."""
        logger.info("Evaluating and coloring pixels")
        evaluator = EscapeTimeEvaluator(params)
        report = tracker.advance if tracker is not None else None
        return evaluator.render_block(plane, 0, plane.width, 0, plane.height, progress=report)

    def render(self, params: RenderParameters, plane: ComplexPlane,
               tracker: Optional[ProgressTracker] = None) -> np.ndarray:
        """
        Render using parallel tile-based processing.

        Falls back to the single-tile path when the grid has one tile.

        Returns:
            Complete uint8 RGB image

        Raises:
            RenderError: if any tile fails; no partial image is returned
        """
        tiles = plan_tiles(plane.width, plane.height, self.num_workers)
        if len(tiles) == 1:
            return self.render_single(params, plane, tracker)

        start_time = time.time()
        pool_size = min(self.num_workers, len(tiles))
        logger.info(f"Setting up {pool_size} workers for {len(tiles)} tiles")

        if self.use_processes:
            with mp.Manager() as manager:
                progress_queue = manager.Queue()
                cancel_event = manager.Event()
                with ProcessPoolExecutor(max_workers=pool_size) as executor:
                    tile_results = self._run(executor, params, plane, tiles,
                                             progress_queue, cancel_event, tracker)
        else:
            progress_queue = queue.Queue()
            cancel_event = threading.Event()
            with ThreadPoolExecutor(max_workers=pool_size) as executor:
                tile_results = self._run(executor, params, plane, tiles,
                                         progress_queue, cancel_event, tracker)

        logger.info("Assembling tile results")
        image = assemble_tiles(tile_results, plane.width, plane.height)

        total_time = time.time() - start_time
        total_processing_time = sum(tr.processing_time for tr in tile_results)
        logger.info(f"Parallel rendering complete: {total_time:.2f}s total, "
                    f"{total_processing_time:.2f}s processing time, "
                    f"efficiency: {total_processing_time / max(total_time, 1e-9):.2f}")
        return image

    def _run(self, executor, params, plane, tiles, progress_queue, cancel_event,
             tracker: Optional[ProgressTracker]) -> List[TileResult]:
        future_to_tile = {
            executor.submit(process_tile, params, plane, tile, progress_queue, cancel_event): tile
            for tile in tiles
        }
        pending = set(future_to_tile)
        tile_results = []

        logger.info("Evaluating...")
        try:
            while pending:
                done, pending = wait(pending, timeout=POLL_INTERVAL, return_when=FIRST_COMPLETED)
                self._drain(progress_queue, tracker)
                for future in done:
                    tile_results.append(self._result(future, future_to_tile[future]))
        except BaseException:
            # any failure, including an interrupt, abandons the render
            cancel_event.set()
            for future in pending:
                future.cancel()
            # running tiles poll the event and stop at their next column
            wait(pending)
            raise

        self._drain(progress_queue, tracker)
        return tile_results

    @staticmethod
    def _result(future: Future, tile: TileSpec) -> TileResult:
        try:
            return future.result()
        except RenderCancelled:
            raise
        except Exception as e:
            logger.error(f"Tile {tile.tile_id} ({tile.column}, {tile.row}) failed: {e}")
            raise RenderError(f"Tile {tile.tile_id} failed: {e}", tile_id=tile.tile_id) from e

    @staticmethod
    def _drain(progress_queue, tracker: Optional[ProgressTracker]) -> None:
        while True:
            try:
                count = progress_queue.get_nowait()
            except queue.Empty:
                return
            if tracker is not None:
                tracker.advance(count)
