"""
Parallel execution over rectangular image tiles.

Each stage of the pipeline dispatches one task per tile to a fixed-size
thread pool and waits for every tile before returning. numpy releases the
GIL inside its kernels, so threads give real parallelism on per-pixel work
while sharing the pipeline buffers without copies.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Any, Callable, Iterator

logger = logging.getLogger(__name__)

# Use all available CPUs but leave one free for system
DEFAULT_WORKERS = max(1, os.cpu_count() - 1) if os.cpu_count() else 4


@dataclass(frozen=True)
class Tile:
    """Half-open pixel rectangle [y0, y1) x [x0, x1)."""

    y0: int
    y1: int
    x0: int
    x1: int

    @property
    def index(self) -> tuple[slice, slice]:
        """Numpy index selecting the tile from a (H, W, ...) array."""
        return slice(self.y0, self.y1), slice(self.x0, self.x1)

    @property
    def size(self) -> int:
        return (self.y1 - self.y0) * (self.x1 - self.x0)


def iter_tiles(height: int, width: int, tile_size: int) -> Iterator[Tile]:
    """Yield disjoint tiles covering a (height, width) grid in row-major order."""
    if tile_size < 1:
        raise ValueError(f"tile_size must be >= 1, got {tile_size}")
    for y0 in range(0, height, tile_size):
        for x0 in range(0, width, tile_size):
            yield Tile(y0, min(y0 + tile_size, height), x0, min(x0 + tile_size, width))


class TileExecutor:
    """
    Run per-tile tasks with stage barriers.

    Parameters
    ----------
    workers : int or None, default None
        Number of worker threads. None uses auto-detection (CPU count - 1).
        Set to 1 for sequential processing.
    tile_size : int, default 256
        Edge length of the square tiles.
    show_progress : bool, default False
        Show a progress bar per stage.
    """

    def __init__(self, workers: int | None = None, tile_size: int = 256, show_progress: bool = False):
        if workers is None:
            workers = DEFAULT_WORKERS
        if workers < 1:
            raise ValueError(f"workers must be >= 1, got {workers}")
        if tile_size < 1:
            raise ValueError(f"tile_size must be >= 1, got {tile_size}")
        self.workers = workers
        self.tile_size = tile_size
        self.show_progress = show_progress

    def tiles(self, height: int, width: int) -> list[Tile]:
        return list(iter_tiles(height, width, self.tile_size))

    def for_each(
        self,
        height: int,
        width: int,
        task: Callable[[Tile], None],
        desc: str = "Tiles",
    ) -> None:
        """
        Run ``task`` once per tile and return when all tiles are done.

        An exception raised by any tile propagates to the caller.
        """
        self._run(height, width, task, desc)

    def reduce(
        self,
        height: int,
        width: int,
        task: Callable[[Tile], Any],
        combine: Callable[[Any, Any], Any] = max,
        initial: Any = None,
        desc: str = "Reduce",
    ) -> Any:
        """
        Map ``task`` over all tiles and fold the partial results.

        Exactly one partial result per tile is consumed before returning.
        ``combine`` must be associative and commutative so that the result
        does not depend on completion order.

        Returns
        -------
        Any
            The folded value, or ``initial`` when there are no tiles.
        """
        partials = self._run(height, width, task, desc)
        result = initial
        for value in partials:
            result = value if result is None else combine(result, value)
        return result

    def _run(self, height: int, width: int, task: Callable[[Tile], Any], desc: str) -> list[Any]:
        from .cli_output import create_progress_bar

        tiles = self.tiles(height, width)
        n_tiles = len(tiles)
        results: list[Any] = [None] * n_tiles

        pbar = create_progress_bar(
            total=n_tiles,
            desc=desc,
            unit="tile",
            disable=not self.show_progress,
        )

        # Sequential for a single worker or a single tile
        if self.workers <= 1 or n_tiles <= 1:
            with pbar:
                for i, tile in enumerate(tiles):
                    results[i] = task(tile)
                    pbar.update(1)
            return results

        with ThreadPoolExecutor(max_workers=min(self.workers, n_tiles)) as executor:
            futures = {executor.submit(task, tile): i for i, tile in enumerate(tiles)}
            with pbar:
                for future in as_completed(futures):
                    results[futures[future]] = future.result()
                    pbar.update(1)

        logger.debug("%s: %d tiles on %d workers", desc, n_tiles, self.workers)
        return results
