"""Exception types raised by the fractal explorer."""

from __future__ import annotations


class FractalError(Exception):
    """Base class for all explorer errors."""


class ConfigurationError(FractalError, ValueError):
    """Raised when a viewport, palette or renderer is configured with invalid values."""


class RenderError(FractalError, RuntimeError):
    """Raised when a frame cannot be produced in full."""
