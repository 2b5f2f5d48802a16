"""Public API for parallel escape-time fractal rendering."""

from .color import Palette, PaletteRegistry, Rgb, default_palettes, grayscale
from .coloring import ColorComputer, FractalKind
from .config import ExplorerConfig, configure_logging
from .errors import ConfigurationError, FractalError, RenderError
from .explorer import ExplorerSession, RenderStats
from .renderer import Frame, Renderer, partition_rows
from .simd import LANES, SimdComplex, SimdCounter
from .viewport import Direction, Viewport, ViewSnapshot, pixel_mapper, pixel_to_complex

__all__ = [
    "ColorComputer",
    "ConfigurationError",
    "Direction",
    "ExplorerConfig",
    "ExplorerSession",
    "FractalError",
    "FractalKind",
    "Frame",
    "LANES",
    "Palette",
    "PaletteRegistry",
    "RenderError",
    "RenderStats",
    "Renderer",
    "Rgb",
    "SimdComplex",
    "SimdCounter",
    "ViewSnapshot",
    "Viewport",
    "configure_logging",
    "default_palettes",
    "grayscale",
    "partition_rows",
    "pixel_mapper",
    "pixel_to_complex",
]
