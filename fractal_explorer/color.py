"""Colors, gradient palettes and the palette registry."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Mapping, Sequence

import numpy as np

from .errors import ConfigurationError

PALETTE_SIZE = 256


@dataclass(frozen=True)
class Rgb:
    r: int
    g: int
    b: int

    def as_u32(self) -> int:
        """Pack as ``0x00RRGGBB`` for a 32-bit display buffer."""

        return (self.r << 16) | (self.g << 8) | self.b

    def as_tuple(self) -> tuple[int, int, int]:
        return (self.r, self.g, self.b)


def grayscale(value: int) -> Rgb:
    return Rgb(value, value, value)


class Palette:
    """A 256-entry lookup table from iteration count to color."""

    def __init__(self, table: np.ndarray) -> None:
        table = np.asarray(table, dtype=np.uint8)
        if table.shape != (PALETTE_SIZE, 3):
            raise ConfigurationError(f"palette table must have shape ({PALETTE_SIZE}, 3), got {table.shape}")
        self._table = table
        self._colors = tuple(Rgb(int(r), int(g), int(b)) for r, g, b in table.tolist())

    @classmethod
    def from_gradient(cls, gradient: Sequence[Rgb]) -> "Palette":
        """Interpolate each channel linearly between consecutive gradient stops.

        The stops are spread evenly over the table, so entry 0 is the first
        stop and entry 255 is the last one.
        """

        if not 2 <= len(gradient) <= PALETTE_SIZE:
            raise ConfigurationError(
                f"color gradient must specify between 2 and {PALETTE_SIZE} colors, got {len(gradient)}"
            )
        stops = np.array([color.as_tuple() for color in gradient], dtype=np.float64)
        range_count = len(gradient) - 1

        positions = np.arange(PALETTE_SIZE, dtype=np.float64) * range_count / (PALETTE_SIZE - 1)
        range_index = np.minimum(np.floor(positions).astype(np.int64), range_count - 1)
        alpha = (positions - range_index)[:, np.newaxis]

        start = stops[range_index]
        end = stops[range_index + 1]
        table = np.where(alpha >= 1.0, end, start + (end - start) * alpha)
        return cls(np.trunc(table).astype(np.uint8))

    @property
    def table(self) -> np.ndarray:
        return self._table

    def color(self, value: int) -> Rgb:
        if not 0 <= value < PALETTE_SIZE:
            raise ValueError(f"palette index must be within [0, {PALETTE_SIZE - 1}], got {value}")
        return self._colors[value]

    def colors(self, values: Iterable[int]) -> list[Rgb]:
        values = list(values)
        if values and not 0 <= min(values) <= max(values) < PALETTE_SIZE:
            raise ValueError(f"palette indices must be within [0, {PALETTE_SIZE - 1}]")
        lookup = self._colors
        return [lookup[v] for v in values]

    def __len__(self) -> int:
        return PALETTE_SIZE


CYAN = (
    Rgb(0, 0, 0),
    Rgb(0, 35, 66),
    Rgb(0, 56, 89),
    Rgb(0, 78, 114),
    Rgb(0, 102, 139),
    Rgb(0, 127, 165),
    Rgb(0, 152, 187),
    Rgb(0, 177, 205),
    Rgb(0, 203, 220),
    Rgb(0, 229, 231),
    Rgb(0, 255, 238),
)

BLUE_GREEN = (
    Rgb(97, 179, 255),
    Rgb(33, 10, 127),
    Rgb(5, 136, 218),
    Rgb(11, 204, 49),
    Rgb(33, 253, 43),
    Rgb(0, 0, 0),
)

YELLOW_RED = (
    Rgb(0, 0, 0),
    Rgb(250, 255, 0),
    Rgb(255, 168, 0),
    Rgb(255, 77, 0),
    Rgb(153, 41, 41),
    Rgb(0, 0, 0),
)

RAINBOW = (
    Rgb(255, 255, 255),
    Rgb(255, 0, 0),
    Rgb(255, 255, 0),
    Rgb(0, 255, 255),
    Rgb(127, 127, 255),
    Rgb(255, 0, 255),
    Rgb(0, 0, 255),
    Rgb(0, 255, 0),
    Rgb(0, 0, 0),
)

GRADIENTS: Mapping[str, Sequence[Rgb]] = {
    "cyan": CYAN,
    "blue_green": BLUE_GREEN,
    "yellow_red": YELLOW_RED,
    "rainbow": RAINBOW,
}


@dataclass
class PaletteRegistry:
    """Named palettes built once at startup and handed to the application."""

    palettes: dict[str, Palette] = field(default_factory=dict)

    def register(self, name: str, palette: Palette) -> None:
        self.palettes[name] = palette

    def get(self, name: str) -> Palette:
        try:
            return self.palettes[name]
        except KeyError:
            known = ", ".join(sorted(self.palettes))
            raise ConfigurationError(f"unknown palette '{name}'. Valid choices: {known}.") from None

    def names(self) -> list[str]:
        return sorted(self.palettes)

    def __contains__(self, name: object) -> bool:
        return name in self.palettes


def default_palettes() -> PaletteRegistry:
    registry = PaletteRegistry()
    for name, gradient in GRADIENTS.items():
        registry.register(name, Palette.from_gradient(gradient))
    return registry
