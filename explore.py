"""Render fractal explorer frames headlessly and report per-frame metrics."""

import logging
import sys
import time
from argparse import ArgumentParser

from fractal_explorer import (
    ColorComputer,
    ConfigurationError,
    ExplorerConfig,
    ExplorerSession,
    FractalKind,
    RenderError,
    Renderer,
    configure_logging,
    default_palettes,
)
from fractal_explorer.coloring import BACKENDS
from fractal_explorer.color import GRADIENTS
from fractal_explorer.config import DEFAULT_HEIGHT, DEFAULT_WIDTH, INITIAL_SEED

logger = logging.getLogger("explore")


def build_parser():
    parser = ArgumentParser(description="Render escape-time fractal frames and report timings.")

    parser.add_argument('--width', type=int,
                        dest='width', help='frame width in pixels',
                        metavar='WIDTH', default=DEFAULT_WIDTH)

    parser.add_argument('--height', type=int,
                        dest='height', help='frame height in pixels',
                        metavar='HEIGHT', default=DEFAULT_HEIGHT)

    parser.add_argument('--workers', type=int,
                        dest='workers', help='number of render workers (default: CPU count)',
                        metavar='WORKERS', default=None)

    parser.add_argument('--processes', dest='use_processes', action='store_true',
                        help='render on a process pool instead of a thread pool')

    parser.add_argument('--fractal', type=str, choices=[kind.value for kind in FractalKind],
                        dest='fractal', help='iteration rule to render',
                        default='julia')

    parser.add_argument('--palette', type=str, choices=sorted(GRADIENTS),
                        dest='palette', help='color palette',
                        default='yellow_red')

    parser.add_argument('--backend', type=str, choices=BACKENDS,
                        dest='backend', help='"scalar" per pixel, "simd" numpy lanes or "tensor" TensorFlow batches',
                        default='simd')

    parser.add_argument('--lanes', type=int,
                        dest='lanes', help='batch width for the simd and tensor backends; 0 sends one batch per row band',
                        metavar='LANES', default=8)

    parser.add_argument('--seed-re', type=float,
                        dest='seed_re', help='real part of the seed constant',
                        metavar='SEED_RE', default=INITIAL_SEED.real)

    parser.add_argument('--seed-im', type=float,
                        dest='seed_im', help='imaginary part of the seed constant',
                        metavar='SEED_IM', default=INITIAL_SEED.imag)

    parser.add_argument('--frames', type=int,
                        dest='frames', help='number of frames to render after applying the actions',
                        metavar='FRAMES', default=1)

    parser.add_argument('--action', dest='actions', action='append', metavar='ACTION',
                        help='Navigation command applied before each frame. May be repeated. '
                             'Choices: up, down, left, right, seed-up, seed-down, seed-left, seed-right, '
                             'zoom-in, zoom-out, reset.')

    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable debug logging, including TensorFlow diagnostics.')

    return parser


def resolve_config(opt, parser: ArgumentParser) -> ExplorerConfig:
    try:
        return ExplorerConfig(
            width=opt.width,
            height=opt.height,
            workers=opt.workers,
            fractal=opt.fractal,
            palette=opt.palette,
            backend=opt.backend,
            lanes=opt.lanes if opt.lanes != 0 else None,
            seed=complex(opt.seed_re, opt.seed_im),
            frames=opt.frames,
            actions=tuple(opt.actions or ()),
            use_processes=bool(opt.use_processes),
            verbose=bool(opt.verbose),
        ).validate()
    except ConfigurationError as exc:
        parser.error(str(exc))


def run(config: ExplorerConfig) -> int:
    palettes = default_palettes()
    color_computer = ColorComputer(
        kind=FractalKind.parse(config.fractal),
        palette=palettes.get(config.palette),
        seed=config.seed,
        backend=config.backend,
    )

    with Renderer(config.workers, use_processes=config.use_processes) as renderer:
        session = ExplorerSession(
            config.width,
            config.height,
            color_computer,
            renderer,
            seed=config.seed,
            lanes=config.lanes,
        )
        logger.info(
            "Rendering %s with the %s backend on %d workers",
            config.fractal,
            config.backend,
            renderer.worker_count,
        )
        for i in range(config.frames):
            start = time.perf_counter()
            for action in config.actions:
                session.apply(action)
            session.should_redraw = True
            session.update()
            logger.debug("frame %d out of %d", i + 1, config.frames)
            session.delay_until_next_frame(time.perf_counter() - start)
    return 0


def main(argv=None):
    parser = build_parser()
    opt = parser.parse_args(argv)
    config = resolve_config(opt, parser)
    configure_logging(config.verbose)

    try:
        return run(config)
    except ConfigurationError as exc:
        parser.error(str(exc))
    except RenderError as exc:
        logger.error("Render failed: %s", exc)
        return 1


if __name__ == '__main__':
    sys.exit(main())
