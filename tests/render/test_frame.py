"""Tests for program compilation, uniform binding and frame rendering."""

import numpy as np
import pytest
from PIL import Image

from gltr.catalog import ShaderDescriptor, default_catalog
from gltr.composer import compose
from gltr.errors import MissingSamplerOverride, ShaderCompileError
from gltr.modes import FitMode
from gltr.render import (
    RenderConfig,
    bind_parameters,
    compile_program,
    create_texture,
    render_frame,
    render_transition,
    save_image,
)
from gltr.uniforms import Builtins, ParameterTable, ParamType, ParamValue, build

RED = (255, 0, 0, 255)
GREEN = (0, 255, 0, 255)
BLUE = (0, 0, 255, 255)
TOLERANCE = 1


class FakeUniform:
    def __init__(self):
        self.value = None


class FakeProgram:
    """Stands in for moderngl.Program: iterable member names and item access."""

    def __init__(self, names):
        self.members = {name: FakeUniform() for name in names}

    def __iter__(self):
        return iter(self.members)

    def __getitem__(self, name):
        return self.members[name]


class FakeTexture:
    def __init__(self):
        self.location = None

    def use(self, location=0):
        self.location = location


def assert_color(pixel, expected, tolerance=TOLERANCE):
    diff = np.abs(np.asarray(pixel, dtype=int) - np.asarray(expected, dtype=int))
    assert np.all(diff <= tolerance), f"{tuple(pixel)} != {expected}"


class TestBindParameters:
    """Test suite for uniform submission."""

    def test_binds_active_uniforms(self):
        from_texture, to_texture, luma = FakeTexture(), FakeTexture(), FakeTexture()
        table = ParameterTable()
        table.set("from", ParamValue(ParamType.SAMPLER2D, from_texture))
        table.set("to", ParamValue(ParamType.SAMPLER2D, to_texture))
        table.set("progress", ParamValue(ParamType.FLOAT, 0.5))
        table.set("ratio", ParamValue(ParamType.FLOAT, 1.5))
        table.set("luma", ParamValue(ParamType.SAMPLER2D, luma))
        table.set("opening", ParamValue(ParamType.BOOL, True))
        table.set("squares", ParamValue(ParamType.IVEC2, (10, 10)))

        program = FakeProgram(["from", "to", "progress", "luma", "opening", "squares"])
        bind_parameters(program, table)

        assert (from_texture.location, to_texture.location, luma.location) == (0, 1, 2)
        assert program["from"].value == 0
        assert program["to"].value == 1
        assert program["luma"].value == 2
        assert program["progress"].value == 0.5
        assert program["opening"].value == 1
        assert program["squares"].value == (10, 10)

    def test_inactive_sampler_takes_no_unit(self):
        """A sampler the program does not use leaves the units contiguous."""
        from_texture, to_texture = FakeTexture(), FakeTexture()
        table = ParameterTable()
        table.set("from", ParamValue(ParamType.SAMPLER2D, from_texture))
        table.set("to", ParamValue(ParamType.SAMPLER2D, to_texture))

        program = FakeProgram(["to"])
        bind_parameters(program, table)

        assert from_texture.location is None
        assert to_texture.location == 0
        assert program["to"].value == 0


class TestSaveImage:
    """Test suite for image output."""

    def test_save_array(self, tmp_path):
        array = np.zeros((2, 3, 4), dtype=np.uint8)
        array[..., 0] = 255
        array[..., 3] = 255
        path = tmp_path / "frame.png"
        save_image(array, path)
        with Image.open(path) as image:
            assert image.size == (3, 2)
            assert image.mode == "RGBA"

    def test_save_jpeg_drops_alpha(self, tmp_path):
        path = tmp_path / "frame.jpg"
        save_image(Image.new("RGBA", (2, 2), RED), path)
        with Image.open(path) as image:
            assert image.mode == "RGB"


@pytest.mark.gpu
class TestRenderFrame:
    """Test suite for drawing with a real context."""

    def _builtins(self, ctx, from_color, to_color, progress, size=(1, 1)):
        return Builtins(
            from_texture=create_texture(ctx, Image.new("RGBA", size, from_color)),
            to_texture=create_texture(ctx, Image.new("RGBA", size, to_color)),
            progress=progress,
            ratio=size[0] / size[1],
            from_aspect=size[0] / size[1],
            to_aspect=size[0] / size[1],
        )

    def test_fade_blend(self, gl_context, fade_descriptor):
        """Red to blue at progress 0.5 gives an even blend."""
        builtins = self._builtins(gl_context, RED, BLUE, 0.5)
        table = build(builtins, fade_descriptor)
        source = compose(FitMode.STRETCH, fade_descriptor.body)

        frame = render_frame(gl_context, source, table, (1, 1))

        assert frame.shape == (1, 1, 4)
        assert frame.dtype == np.uint8
        assert_color(frame[0, 0], (128, 0, 128, 255))

    @pytest.mark.parametrize("mode", list(FitMode))
    @pytest.mark.parametrize("progress,expected", [(0.0, RED), (1.0, BLUE)])
    def test_fade_endpoints(self, gl_context, fade_descriptor, mode, progress, expected):
        builtins = self._builtins(gl_context, RED, BLUE, progress, size=(2, 2))
        table = build(builtins, fade_descriptor)
        source = compose(mode, fade_descriptor.body)

        frame = render_frame(gl_context, source, table, (2, 2))

        for pixel in frame.reshape(-1, 4):
            assert_color(pixel, expected)

    def test_rows_top_down(self, gl_context, fade_descriptor):
        """The top row of the source image is the top row of the frame."""
        image = Image.new("RGBA", (1, 2), GREEN)
        image.putpixel((0, 0), RED)
        texture = create_texture(gl_context, image)
        builtins = Builtins(texture, texture, 0.0, 0.5, 0.5, 0.5)
        table = build(builtins, fade_descriptor)
        source = compose(FitMode.STRETCH, fade_descriptor.body)

        frame = render_frame(gl_context, source, table, (1, 2))

        assert_color(frame[0, 0], RED)
        assert_color(frame[1, 0], GREEN)

    @pytest.mark.parametrize("mode", list(FitMode))
    @pytest.mark.parametrize("descriptor", list(default_catalog()), ids=lambda d: d.name)
    def test_catalog_compiles(self, gl_context, descriptor, mode):
        """Every embedded transition compiles in every fit mode."""
        program = compile_program(gl_context, compose(mode, descriptor.body))
        program.release()

    def test_compile_error(self, gl_context, builtins):
        """Compiler diagnostics are surfaced, not swallowed."""
        descriptor = ShaderDescriptor(
            name="broken", body="vec4 transition(vec2 uv) { return undefined_name; }"
        )
        table = build(builtins, descriptor)
        source = compose(FitMode.STRETCH, descriptor.body)

        with pytest.raises(ShaderCompileError) as exc_info:
            render_frame(gl_context, source, table, (1, 1))
        assert exc_info.value.diagnostic


@pytest.mark.gpu
class TestRenderTransition:
    """End-to-end rendering from image files."""

    def test_fade_end_to_end(self, gl_context, solid_image, tmp_path):
        red = solid_image("red", RED)
        blue = solid_image("blue", BLUE)
        output = tmp_path / "out.png"

        image = render_transition(
            red, blue, "fade", "stretch", 0.5, config=RenderConfig(output=output)
        )

        assert image.size == (1, 1)
        assert_color(np.array(image)[0, 0], (128, 0, 128, 255))
        with Image.open(output) as saved:
            assert_color(np.array(saved.convert("RGBA"))[0, 0], (128, 0, 128, 255))

    def test_output_size(self, gl_context, solid_image):
        red = solid_image("red", RED, size=(4, 3))
        blue = solid_image("blue", BLUE, size=(3, 4))

        image = render_transition(
            red, blue, "directional", "contain", 0.3, config=RenderConfig(size=(8, 6))
        )

        assert image.size == (8, 6)

    def test_parameters_and_sampler(self, gl_context, solid_image):
        red = solid_image("red", RED, size=(2, 2))
        blue = solid_image("blue", BLUE, size=(2, 2))
        luma = solid_image("luma", (0, 0, 0, 255), size=(2, 2))

        image = render_transition(
            red,
            blue,
            "displacement",
            "cover",
            1.0,
            sampler_path=luma,
            overrides={"strength": 0.0},
        )

        for pixel in np.array(image).reshape(-1, 4):
            assert_color(pixel, BLUE)

    def test_missing_sampler(self, gl_context, solid_image):
        red = solid_image("red", RED)
        blue = solid_image("blue", BLUE)

        with pytest.raises(MissingSamplerOverride):
            render_transition(red, blue, "displacement", "stretch", 0.5)
