"""Fixtures and configuration for pytest."""

import moderngl
import pytest
from PIL import Image

from gltr.catalog import ShaderDescriptor
from gltr.errors import GLContextError
from gltr.render.context import GLConfig, create_context
from gltr.uniforms import Builtins

FADE_GLSL = (
    "vec4 transition(vec2 uv){return mix(getFromColor(uv),getToColor(uv),progress);}"
)


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "gpu: mark test as requiring a GPU")


@pytest.fixture
def fade_descriptor() -> ShaderDescriptor:
    """The plain cross-fade transition."""
    return ShaderDescriptor(name="fade", body=FADE_GLSL)


@pytest.fixture
def make_descriptor():
    """Factory for descriptors with declared parameters."""

    def factory(param_types=None, default_params=None, name="test") -> ShaderDescriptor:
        return ShaderDescriptor(
            name=name,
            body=FADE_GLSL,
            param_types=param_types or {},
            default_params=default_params or {},
        )

    return factory


@pytest.fixture
def builtins() -> Builtins:
    """Built-in uniforms with placeholder texture handles."""
    return Builtins(
        from_texture="from-texture",
        to_texture="to-texture",
        progress=0.5,
        ratio=16 / 9,
        from_aspect=4 / 3,
        to_aspect=1.0,
    )


@pytest.fixture(scope="module")
def gl_context() -> moderngl.Context:
    """Create a ModernGL context for all tests in a module."""
    try:
        with create_context(GLConfig()) as ctx:
            yield ctx
    except GLContextError as e:
        pytest.skip(f"Failed to create ModernGL context: {e}")


@pytest.fixture
def solid_image(tmp_path):
    """Factory writing a solid-color PNG and returning its path."""

    def factory(name: str, color: tuple[int, int, int, int], size=(1, 1)):
        path = tmp_path / f"{name}.png"
        Image.new("RGBA", size, color).save(path)
        return path

    return factory
