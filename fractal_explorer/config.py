"""Startup configuration and logging setup for the explorer."""

from __future__ import annotations

import logging
import os
import warnings
from dataclasses import dataclass
from typing import Optional

from .coloring import BACKENDS, FractalKind
from .errors import ConfigurationError
from .simd import LANES

DEFAULT_WIDTH = 1280
DEFAULT_HEIGHT = 720
INITIAL_SEED = complex(-0.7768, 0.1374)
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class ExplorerConfig:
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    workers: Optional[int] = None
    fractal: str = "julia"
    palette: str = "yellow_red"
    backend: str = "simd"
    lanes: Optional[int] = LANES
    seed: complex = INITIAL_SEED
    frames: int = 1
    actions: tuple[str, ...] = ()
    use_processes: bool = False
    verbose: bool = False

    def validate(self) -> "ExplorerConfig":
        if self.width <= 0 or self.height <= 0:
            raise ConfigurationError(f"dimensions must be positive, got {self.width}x{self.height}")
        if self.workers is not None and self.workers < 1:
            raise ConfigurationError(f"worker count must be at least 1, got {self.workers}")
        if self.lanes is not None and self.lanes < 1:
            raise ConfigurationError(f"lane count must be at least 1, got {self.lanes}")
        if self.frames < 0:
            raise ConfigurationError(f"frame count cannot be negative, got {self.frames}")
        if self.backend not in BACKENDS:
            raise ConfigurationError(f"unknown backend '{self.backend}'. Valid choices: {', '.join(BACKENDS)}.")
        FractalKind.parse(self.fractal)
        return self


def configure_logging(verbose: bool = False) -> None:
    """Configure root logging and mute TensorFlow unless ``verbose`` is set.

    Must run before TensorFlow is imported for the native log level to apply.
    """

    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format=LOG_FORMAT)
    if verbose:
        return

    os.environ.setdefault("TF_CPP_MIN_LOG_LEVEL", "3")
    warnings.filterwarnings(
        "ignore",
        message=r"Protobuf gencode version .* is exactly one major version older than the runtime version .*",
        category=UserWarning,
        module="google.protobuf",
    )
    logging.getLogger("tensorflow").setLevel(logging.ERROR)
