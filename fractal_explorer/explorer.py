"""Headless state machine behind the interactive explorer window."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .coloring import ColorComputer
from .config import INITIAL_SEED
from .errors import ConfigurationError
from .renderer import Renderer
from .simd import LANES
from .viewport import Direction, Viewport

logger = logging.getLogger(__name__)

BASE_SEED_STEP = 0.001
FRAMES_PER_SECOND = 60


@dataclass(frozen=True)
class RenderStats:
    pixels: int
    width: int
    height: int
    elapsed: float
    scale: float
    offset: complex
    seed: complex

    @property
    def fps(self) -> float:
        return 1.0 / self.elapsed if self.elapsed > 0 else float("inf")


class ExplorerSession:
    """Viewport, seed and display buffer driven by one control thread.

    Input handlers only mutate state and mark the session dirty; the next
    :meth:`update` renders a new frame into :attr:`buffer`.
    """

    frame_duration = 1.0 / FRAMES_PER_SECOND

    def __init__(
        self,
        width: int,
        height: int,
        color_computer: ColorComputer,
        renderer: Renderer,
        *,
        seed: complex = INITIAL_SEED,
        lanes: Optional[int] = LANES,
    ) -> None:
        self.view = Viewport(width, height)
        self.color_computer = color_computer
        self.renderer = renderer
        self.lanes = lanes
        self.initial_seed = complex(seed)
        self.seed = self.initial_seed
        self.buffer = np.zeros(width * height, dtype=np.uint32)
        self.should_redraw = True
        self._commands = {
            "up": lambda: self.translate_view(Direction.UP),
            "down": lambda: self.translate_view(Direction.DOWN),
            "left": lambda: self.translate_view(Direction.LEFT),
            "right": lambda: self.translate_view(Direction.RIGHT),
            "seed-up": lambda: self.translate_seed(Direction.UP),
            "seed-down": lambda: self.translate_seed(Direction.DOWN),
            "seed-left": lambda: self.translate_seed(Direction.LEFT),
            "seed-right": lambda: self.translate_seed(Direction.RIGHT),
            "zoom-in": self.zoom_in,
            "zoom-out": self.zoom_out,
            "reset": self.reset,
        }

    @property
    def commands(self) -> list[str]:
        return list(self._commands)

    def apply(self, command: str) -> None:
        try:
            action = self._commands[command]
        except KeyError:
            raise ConfigurationError(
                f"unknown command '{command}'. Valid choices: {', '.join(self._commands)}."
            ) from None
        action()

    def translate_view(self, direction: Direction) -> None:
        self.view.translate(direction)
        self.should_redraw = True

    def translate_seed(self, direction: Direction) -> None:
        self.seed += direction.as_complex() * BASE_SEED_STEP * self.view.scale
        self.should_redraw = True

    def scroll(self, delta: float) -> None:
        if delta > 0:
            self.zoom_out()
        else:
            self.zoom_in()

    def zoom_in(self) -> None:
        self.view.zoom_in()
        self.should_redraw = True

    def zoom_out(self) -> None:
        self.view.zoom_out()
        self.should_redraw = True

    def reset(self) -> None:
        self.view.reset()
        self.seed = self.initial_seed
        self.should_redraw = True

    def update(self) -> Optional[RenderStats]:
        if not self.should_redraw:
            return None
        return self.redraw()

    def redraw(self) -> RenderStats:
        start = time.perf_counter()
        color_computer = self.color_computer.with_seed(self.seed)
        if color_computer.backend == "scalar":
            frame = self.renderer.render(self.view, color_computer)
        else:
            frame = self.renderer.render_simd(self.view, color_computer.batch, self.lanes)
        self.buffer = frame.as_u32()
        self.should_redraw = False
        stats = RenderStats(
            pixels=len(frame),
            width=frame.width,
            height=frame.height,
            elapsed=time.perf_counter() - start,
            scale=self.view.scale,
            offset=self.view.offset,
            seed=self.seed,
        )
        log_stats(stats)
        return stats

    def delay_until_next_frame(self, elapsed: float) -> None:
        if elapsed < self.frame_duration:
            time.sleep(self.frame_duration - elapsed)


def log_stats(stats: RenderStats) -> None:
    logger.info(
        "Rendered %dpx (%dx%d) in %.0fms (%.1f FPS)",
        stats.pixels,
        stats.width,
        stats.height,
        stats.elapsed * 1000.0,
        stats.fps,
    )
    logger.info("Scale = %+e", stats.scale)
    logger.info("ViewOffset = %s", stats.offset)
    logger.info("Seed = %s", stats.seed)
