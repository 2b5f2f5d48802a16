import pytest

from fractal_explorer import ColorComputer, FractalKind, Renderer, Viewport, default_palettes


@pytest.fixture(scope="session")
def palettes():
    return default_palettes()


@pytest.fixture
def julia_computer(palettes):
    return ColorComputer(FractalKind.JULIA, palettes.get("yellow_red"), seed=complex(-0.7768, 0.1374))


@pytest.fixture
def small_view():
    return Viewport(24, 17, scale=3.0)


@pytest.fixture
def renderer():
    with Renderer(4) as r:
        yield r
