"""Parallel frame rendering over contiguous row bands."""

from __future__ import annotations

import itertools
import logging
import math
import os
from concurrent.futures import Executor, Future, ProcessPoolExecutor, ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from operator import attrgetter
from typing import Callable, Iterator, Optional, Sequence, Union

import numpy as np

from .color import Rgb
from .errors import ConfigurationError, RenderError
from .simd import LANES, SimdComplex
from .viewport import Viewport, ViewSnapshot

logger = logging.getLogger(__name__)

DEFAULT_WORKER_COUNT = 16

ColorFunction = Callable[[complex], Rgb]
BatchColorFunction = Callable[[SimdComplex], Sequence[Rgb]]
View = Union[Viewport, ViewSnapshot]


@dataclass(frozen=True)
class RenderedChunk:
    """Colors of one row band, in row-major order, tagged with its first row."""

    start_row: int
    pixels: list[Rgb]


@dataclass(frozen=True)
class Frame:
    """A complete rendered image; pixel ``(x, y)`` lives at ``y * width + x``."""

    width: int
    height: int
    pixels: tuple[Rgb, ...]

    def __len__(self) -> int:
        return len(self.pixels)

    def __iter__(self) -> Iterator[Rgb]:
        return iter(self.pixels)

    def pixel(self, x: int, y: int) -> Rgb:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) is outside a {self.width}x{self.height} frame")
        return self.pixels[y * self.width + x]

    def as_u32(self) -> np.ndarray:
        """Pack the frame into the ``0x00RRGGBB`` display buffer layout."""

        return np.fromiter((p.as_u32() for p in self.pixels), dtype=np.uint32, count=len(self.pixels))

    def as_array(self) -> np.ndarray:
        rgb = np.array([p.as_tuple() for p in self.pixels], dtype=np.uint8)
        return rgb.reshape(self.height, self.width, 3)


def resolve_worker_count(worker_count: Optional[int] = None) -> int:
    if worker_count is None:
        return os.cpu_count() or DEFAULT_WORKER_COUNT
    if worker_count < 1:
        raise ConfigurationError(f"worker count must be at least 1, got {worker_count}")
    return int(worker_count)


def partition_rows(height: int, chunk_count: int) -> list[range]:
    """Split ``[0, height)`` into ``chunk_count`` contiguous bands of ``ceil(height / chunk_count)`` rows.

    Trailing bands are empty when there are fewer rows than chunks.
    """

    chunk_height = max(1, math.ceil(height / chunk_count))
    bands = []
    for index in range(chunk_count):
        start = min(index * chunk_height, height)
        stop = min(start + chunk_height, height)
        bands.append(range(start, stop))
    return bands


def render_chunk(rows: range, view: ViewSnapshot, color_fn: ColorFunction) -> RenderedChunk:
    to_complex = view.mapper()
    pixels = [color_fn(to_complex(x, y)) for y in rows for x in range(view.width)]
    return RenderedChunk(start_row=rows.start, pixels=pixels)


def render_chunk_batched(
    rows: range,
    view: ViewSnapshot,
    batch_fn: BatchColorFunction,
    lanes: Optional[int],
) -> RenderedChunk:
    """Render a band by feeding consecutive points to ``batch_fn`` ``lanes`` at a time.

    A trailing partial batch is padded with copies of its last point and the
    padded lanes are dropped from the result. ``lanes=None`` sends the whole
    band as a single batch.
    """

    to_complex = view.mapper()
    points = [to_complex(x, y) for y in rows for x in range(view.width)]
    if not points:
        return RenderedChunk(start_row=rows.start, pixels=[])

    size = len(points) if lanes is None else lanes
    pixels: list[Rgb] = []
    for start in range(0, len(points), size):
        group = points[start:start + size]
        logical = len(group)
        if logical < size:
            group.extend([group[-1]] * (size - logical))
        colors = batch_fn(SimdComplex.from_points(group))
        pixels.extend(colors[:logical])
    return RenderedChunk(start_row=rows.start, pixels=pixels)


def _cancel(futures: list[Future]) -> None:
    for future in futures:
        future.cancel()


class Renderer:
    """Render whole frames on a worker pool that lives as long as the renderer.

    Rows are split into one contiguous band per worker, so each worker's
    output is already a slice of the row-major frame. Bands complete in any
    order and are put back in place by their start row before being joined.
    """

    def __init__(self, worker_count: Optional[int] = None, *, use_processes: bool = False) -> None:
        self.worker_count = resolve_worker_count(worker_count)
        self.use_processes = use_processes
        if use_processes:
            self._executor: Optional[Executor] = ProcessPoolExecutor(max_workers=self.worker_count)
        else:
            self._executor = ThreadPoolExecutor(max_workers=self.worker_count, thread_name_prefix="render")
        logger.debug(
            "Render pool started with %d %s",
            self.worker_count,
            "processes" if use_processes else "threads",
        )

    def render(self, view: View, color_fn: ColorFunction) -> Frame:
        """Color every pixel of ``view`` with ``color_fn(plane_point)``."""

        return self._render(view, render_chunk, color_fn)

    def render_simd(self, view: View, batch_fn: BatchColorFunction, lanes: Optional[int] = LANES) -> Frame:
        """Color every pixel of ``view`` with a batched function taking :class:`SimdComplex` batches."""

        if lanes is not None and lanes < 1:
            raise ConfigurationError(f"lane count must be at least 1, got {lanes}")
        return self._render(view, render_chunk_batched, batch_fn, lanes)

    def _render(self, view: View, worker: Callable[..., RenderedChunk], *args) -> Frame:
        if self._executor is None:
            raise RenderError("renderer has been closed")

        snapshot = view.snapshot()
        bands = partition_rows(snapshot.height, self.worker_count)
        futures: list[Future] = []
        try:
            for rows in bands:
                futures.append(self._executor.submit(worker, rows, snapshot, *args))
        except Exception as exc:
            _cancel(futures)
            raise RenderError(f"failed to dispatch render chunk {len(futures)} of {len(bands)}") from exc
        logger.debug("Dispatched %d row bands for a %dx%d frame", len(futures), snapshot.width, snapshot.height)

        chunks: list[RenderedChunk] = []
        try:
            for future in as_completed(futures):
                chunks.append(future.result())
        except Exception as exc:
            _cancel(futures)
            raise RenderError("render worker failed") from exc

        # Completion order is arbitrary; band order is restored here.
        chunks.sort(key=attrgetter("start_row"))
        pixels = tuple(itertools.chain.from_iterable(chunk.pixels for chunk in chunks))
        expected = snapshot.width * snapshot.height
        if len(pixels) != expected:
            raise RenderError(f"rendered {len(pixels)} pixels, expected {expected}")
        return Frame(snapshot.width, snapshot.height, pixels)

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def __enter__(self) -> "Renderer":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
