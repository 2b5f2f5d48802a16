import threading
from concurrent.futures import Future

import pytest

from fractal_explorer import (
    ColorComputer,
    ConfigurationError,
    FractalKind,
    Frame,
    Renderer,
    RenderError,
    Rgb,
    Viewport,
    partition_rows,
)
from fractal_explorer.renderer import DEFAULT_WORKER_COUNT, render_chunk_batched, resolve_worker_count


def expected_pixels(view, color_fn):
    to_complex = view.mapper()
    return tuple(color_fn(to_complex(x, y)) for y in range(view.height) for x in range(view.width))


def coordinate_color(z):
    # Encodes the plane point so any misplaced pixel is detected.
    return Rgb(int(z.real * 10) % 256, int(z.imag * 10) % 256, 0)


def test_partition_covers_rows_in_order():
    bands = partition_rows(10, 4)
    assert bands == [range(0, 3), range(3, 6), range(6, 9), range(9, 10)]


def test_partition_with_more_workers_than_rows():
    bands = partition_rows(3, 8)
    assert len(bands) == 8
    assert [len(b) for b in bands] == [1, 1, 1, 0, 0, 0, 0, 0]
    assert [row for band in bands for row in band] == [0, 1, 2]


def test_worker_count_resolution():
    assert resolve_worker_count(3) == 3
    assert resolve_worker_count(None) >= 1
    assert DEFAULT_WORKER_COUNT == 16
    with pytest.raises(ConfigurationError):
        Renderer(0)


def test_single_worker_equals_per_pixel_computation(julia_computer, small_view):
    with Renderer(1) as renderer:
        frame = renderer.render(small_view, julia_computer)
    assert isinstance(frame, Frame)
    assert frame.pixels == expected_pixels(small_view, julia_computer)


@pytest.mark.parametrize("workers", [1, 2, 3, 8, 40])
def test_worker_count_does_not_change_frame(workers, small_view):
    with Renderer(workers) as renderer:
        frame = renderer.render(small_view, coordinate_color)
    assert len(frame) == small_view.width * small_view.height
    assert frame.pixels == expected_pixels(small_view, coordinate_color)


def test_repeated_renders_are_identical(renderer, julia_computer, small_view):
    first = renderer.render(small_view, julia_computer)
    second = renderer.render(small_view, julia_computer)
    assert first == second


def test_out_of_order_completion_is_reordered(small_view):
    to_complex = small_view.mapper()
    first_pixel = to_complex(0, 0)
    last_pixel = to_complex(small_view.width - 1, small_view.height - 1)
    last_band_done = threading.Event()

    def gated(z):
        # The first band cannot finish before the last band has produced its final pixel.
        if z == first_pixel:
            assert last_band_done.wait(timeout=10)
        color = coordinate_color(z)
        if z == last_pixel:
            last_band_done.set()
        return color

    with Renderer(2) as renderer:
        frame = renderer.render(small_view, gated)
    assert last_band_done.is_set()
    assert frame.pixels == expected_pixels(small_view, coordinate_color)


def test_simd_path_matches_scalar(julia_computer, small_view):
    with Renderer(3) as renderer:
        scalar = renderer.render(small_view, julia_computer)
        batched = renderer.render_simd(small_view, julia_computer.batch)
    assert batched == scalar


@pytest.mark.parametrize("lanes", [1, 5, 8, 13, None])
def test_partial_batches_are_padded_and_truncated(lanes, small_view):
    seen_widths = []

    def batch_fn(points):
        seen_widths.append(points.lanes)
        return [coordinate_color(z) for z in points.to_complex()]

    with Renderer(4) as renderer:
        frame = renderer.render_simd(small_view, batch_fn, lanes)
    assert frame.pixels == expected_pixels(small_view, coordinate_color)
    if lanes is not None:
        assert set(seen_widths) == {lanes}


def test_empty_band_renders_nothing(small_view):
    chunk = render_chunk_batched(range(5, 5), small_view.snapshot(), lambda points: [], 8)
    assert chunk.start_row == 5
    assert chunk.pixels == []


def test_fewer_rows_than_workers():
    view = Viewport(7, 2)
    with Renderer(6) as renderer:
        frame = renderer.render(view, coordinate_color)
    assert frame.pixels == expected_pixels(view, coordinate_color)


@pytest.mark.parametrize("kind", list(FractalKind))
def test_every_fractal_kind_renders(kind, palettes, small_view):
    computer = ColorComputer(kind, palettes.get("rainbow"), seed=complex(0.1, 0.0))
    with Renderer(2) as renderer:
        frame = renderer.render(small_view, computer)
    assert frame.pixels == expected_pixels(small_view, computer)


def test_worker_failure_is_a_render_error(small_view):
    def broken(z):
        raise ArithmeticError("boom")

    with Renderer(2) as renderer:
        with pytest.raises(RenderError) as info:
            renderer.render(small_view, broken)
    assert isinstance(info.value.__cause__, ArithmeticError)


def test_wrong_batch_width_is_a_render_error(small_view):
    with Renderer(2) as renderer:
        with pytest.raises(RenderError):
            renderer.render_simd(small_view, lambda points: [Rgb(0, 0, 0)])


def test_render_after_close_fails(small_view):
    renderer = Renderer(2)
    renderer.close()
    with pytest.raises(RenderError):
        renderer.render(small_view, coordinate_color)


def test_invalid_lane_count(renderer, small_view):
    with pytest.raises(ConfigurationError):
        renderer.render_simd(small_view, lambda points: [], lanes=0)


def test_frame_buffers(small_view):
    with Renderer(2) as renderer:
        frame = renderer.render(small_view, coordinate_color)
    packed = frame.as_u32()
    assert packed.shape == (small_view.width * small_view.height,)
    assert int(packed[3 * small_view.width + 2]) == frame.pixel(2, 3).as_u32()
    array = frame.as_array()
    assert array.shape == (small_view.height, small_view.width, 3)
    assert tuple(array[3, 2]) == frame.pixel(2, 3).as_tuple()


def test_process_pool_matches_threads(julia_computer):
    view = Viewport(12, 9, scale=3.0)
    with Renderer(2, use_processes=True) as renderer:
        frame = renderer.render_simd(view, julia_computer.batch)
    assert frame.pixels == expected_pixels(view, julia_computer)


def test_dispatch_failure_is_a_render_error(small_view):
    pending = Future()
    failure = RuntimeError("cannot schedule new futures")
    calls = []

    def submit(*args, **kwargs):
        calls.append(args)
        if len(calls) == 1:
            return pending
        raise failure

    with Renderer(4) as renderer:
        renderer._executor.submit = submit
        with pytest.raises(RenderError) as info:
            renderer.render(small_view, coordinate_color)
        del renderer._executor.submit
    assert info.value.__cause__ is failure
    assert len(calls) == 2
    assert pending.cancelled()


def test_pixel_outside_frame_is_rejected(small_view):
    with Renderer(2) as renderer:
        frame = renderer.render(small_view, coordinate_color)
    for x, y in [(-1, 0), (0, -1), (small_view.width, 0), (0, small_view.height)]:
        with pytest.raises(IndexError):
            frame.pixel(x, y)
