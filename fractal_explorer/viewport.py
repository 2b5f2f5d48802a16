"""Mapping between pixel space and a navigable window of the complex plane."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from .errors import ConfigurationError

INITIAL_OFFSET = complex(0.0, 0.0)
INITIAL_SCALE = 1.0
BASE_OFFSET_STEP = 0.025
ZOOM_FACTOR = 0.85


class Direction(Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"

    def as_complex(self) -> complex:
        return _DIRECTION_VECTORS[self]


_DIRECTION_VECTORS = {
    Direction.UP: complex(0.0, 1.0),
    Direction.DOWN: complex(0.0, -1.0),
    Direction.LEFT: complex(-1.0, 0.0),
    Direction.RIGHT: complex(1.0, 0.0),
}


def _check_dimensions(width: int, height: int) -> None:
    if int(width) <= 0 or int(height) <= 0:
        raise ConfigurationError(f"viewport dimensions must be positive, got {width}x{height}")


def _check_scale(scale: float) -> None:
    if not math.isfinite(scale) or scale <= 0.0:
        raise ConfigurationError(f"viewport scale must be finite and strictly positive, got {scale!r}")


@dataclass(frozen=True)
class ViewSnapshot:
    """Immutable copy of a viewport, shared by every worker rendering one frame."""

    width: int
    height: int
    scale: float
    offset: complex

    def __post_init__(self) -> None:
        _check_dimensions(self.width, self.height)
        _check_scale(self.scale)

    def snapshot(self) -> "ViewSnapshot":
        return self

    def mapper(self) -> Callable[[int, int], complex]:
        return pixel_mapper(self)


def pixel_mapper(view: ViewSnapshot) -> Callable[[int, int], complex]:
    """Create a function that maps ``(x, y)`` pixel coordinates to complex plane points.

    The shorter image side spans ``scale`` plane units, so the aspect ratio is
    square in plane units. The y axis is inverted so that screen-down is
    plane-down. Every value is captured when the mapper is created.
    """

    pixel_scale = view.scale / min(view.width, view.height)
    half_width = view.width * 0.5
    half_height = view.height * 0.5
    offset = view.offset

    def to_complex(x: int, y: int) -> complex:
        re = pixel_scale * (x - half_width)
        im = pixel_scale * (half_height - y)
        return complex(re, im) + offset

    return to_complex


def pixel_to_complex(view: ViewSnapshot, x: int, y: int) -> complex:
    return pixel_mapper(view)(x, y)


class Viewport:
    """Navigation state owned by the interactive loop.

    It is mutated between frames only. The renderer takes a
    :class:`ViewSnapshot` through :meth:`snapshot`.
    """

    def __init__(
        self,
        width: int,
        height: int,
        *,
        scale: float = INITIAL_SCALE,
        offset: complex = INITIAL_OFFSET,
    ) -> None:
        _check_dimensions(width, height)
        _check_scale(scale)
        self._width = int(width)
        self._height = int(height)
        self._initial_scale = float(scale)
        self._initial_offset = complex(offset)
        self._scale = self._initial_scale
        self._offset = self._initial_offset

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def scale(self) -> float:
        return self._scale

    @property
    def offset(self) -> complex:
        return self._offset

    def snapshot(self) -> ViewSnapshot:
        return ViewSnapshot(self._width, self._height, self._scale, self._offset)

    def mapper(self) -> Callable[[int, int], complex]:
        return pixel_mapper(self.snapshot())

    def translate(self, direction: Direction) -> None:
        # Step grows with the scale so panning looks constant-speed on screen.
        self._offset += direction.as_complex() * BASE_OFFSET_STEP * self._scale

    def zoom_in(self) -> None:
        self._set_scale(self._scale * ZOOM_FACTOR)

    def zoom_out(self) -> None:
        self._set_scale(self._scale / ZOOM_FACTOR)

    def reset(self) -> None:
        self._scale = self._initial_scale
        self._offset = self._initial_offset

    def _set_scale(self, scale: float) -> None:
        _check_scale(scale)
        self._scale = scale

    def __repr__(self) -> str:
        return (
            f"Viewport(width={self._width}, height={self._height}, "
            f"scale={self._scale!r}, offset={self._offset!r})"
        )
