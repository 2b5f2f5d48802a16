import numpy as np
import pytest

from fractal_explorer import ConfigurationError, Palette, PaletteRegistry, Rgb, default_palettes, grayscale
from fractal_explorer.color import GRADIENTS, PALETTE_SIZE


def test_rgb_packs_with_zero_top_byte():
    assert Rgb(0x12, 0x34, 0x56).as_u32() == 0x00123456
    assert Rgb(255, 255, 255).as_u32() == 0x00FFFFFF


def test_grayscale():
    assert grayscale(7) == Rgb(7, 7, 7)


@pytest.mark.parametrize("name", sorted(GRADIENTS))
def test_palette_endpoints_are_gradient_stops(name):
    gradient = GRADIENTS[name]
    palette = Palette.from_gradient(gradient)
    assert palette.color(0) == gradient[0]
    assert palette.color(255) == gradient[-1]


def test_two_stop_palette_is_monotonic():
    palette = Palette.from_gradient([Rgb(0, 255, 10), Rgb(255, 0, 10)])
    table = palette.table.astype(int)
    assert np.all(np.diff(table[:, 0]) >= 0)
    assert np.all(np.diff(table[:, 1]) <= 0)
    assert np.all(table[:, 2] == 10)
    assert palette.color(255) == Rgb(255, 0, 10)


@pytest.mark.parametrize("name", sorted(GRADIENTS))
def test_channels_follow_each_segment_direction(name):
    gradient = GRADIENTS[name]
    table = Palette.from_gradient(gradient).table.astype(int)
    segments = len(gradient) - 1
    for index in range(PALETTE_SIZE - 1):
        segment = min(index * segments // (PALETTE_SIZE - 1), segments - 1)
        next_segment = min((index + 1) * segments // (PALETTE_SIZE - 1), segments - 1)
        if segment != next_segment:
            continue
        start, end = gradient[segment].as_tuple(), gradient[segment + 1].as_tuple()
        for channel in range(3):
            step = table[index + 1, channel] - table[index, channel]
            direction = end[channel] - start[channel]
            assert step * direction >= 0
            if direction == 0:
                assert step == 0


def test_gradient_size_is_validated():
    with pytest.raises(ConfigurationError):
        Palette.from_gradient([Rgb(0, 0, 0)])
    with pytest.raises(ConfigurationError):
        Palette.from_gradient([Rgb(0, 0, 0)] * 257)


def test_colors_batch_lookup():
    palette = Palette.from_gradient([Rgb(0, 0, 0), Rgb(255, 255, 255)])
    assert palette.colors([0, 255]) == [Rgb(0, 0, 0), Rgb(255, 255, 255)]


def test_registry():
    registry = default_palettes()
    assert registry.names() == sorted(GRADIENTS)
    assert "cyan" in registry
    with pytest.raises(ConfigurationError):
        registry.get("missing")
    custom = PaletteRegistry()
    palette = Palette.from_gradient([Rgb(1, 2, 3), Rgb(4, 5, 6)])
    custom.register("tiny", palette)
    assert custom.get("tiny") is palette


@pytest.mark.parametrize("value", [-1, 256])
def test_out_of_range_counts_are_rejected(value):
    palette = Palette.from_gradient(GRADIENTS["cyan"])
    with pytest.raises(ValueError):
        palette.color(value)
    with pytest.raises(ValueError):
        palette.colors([0, value])
