"""Core rendering functions for transition output."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import moderngl
import numpy as np
from loguru import logger
from PIL import Image

from gltr.catalog import ShaderCatalog, ShaderDescriptor, resolve_shader
from gltr.composer import VERTEX_SHADER_SOURCE, compose
from gltr.errors import ShaderCompileError
from gltr.modes import FitMode, resolve
from gltr.render.context import GLConfig, create_context
from gltr.render.textures import load_texture
from gltr.uniforms import Builtins, ParameterTable, ParamType, build

# Full-screen quad as a triangle strip
QUAD_VERTICES = np.array([-1.0, -1.0, 1.0, -1.0, -1.0, 1.0, 1.0, 1.0], dtype="f4")

# Formats Pillow cannot write with an alpha channel
_OPAQUE_FORMATS = {"JPEG", "JPG", "BMP"}


@dataclass
class RenderConfig:
    """Render configuration settings.

    Attributes:
        size: Output (width, height); the ``from`` image size when None
        output: Path the image is written to, if any
        image_format: Pillow format name; inferred from the extension if None
    """

    size: tuple[int, int] | None = None
    output: str | Path | None = None
    image_format: str | None = None


def compile_program(ctx: moderngl.Context, fragment_source: str) -> moderngl.Program:
    """Compile a composed fragment program with the full-screen vertex shader."""
    try:
        program = ctx.program(
            vertex_shader=VERTEX_SHADER_SOURCE, fragment_shader=fragment_source
        )
    except moderngl.Error as e:
        logger.error("Shader compilation error")
        raise ShaderCompileError(str(e)) from e

    logger.info("Shader program compiled successfully")
    logger.info(f"Available uniforms: {list(program)}")
    return program


def bind_parameters(program: moderngl.Program, table: ParameterTable) -> None:
    """Submit every table entry the program uses.

    Entries the program does not declare, or that the compiler optimized
    away, are ignored. Textures take consecutive units from 0.
    """
    unit = 0
    for name, texture in table.samplers():
        if name not in program:
            continue
        texture.use(location=unit)
        program[name].value = unit
        unit += 1

    for name, param in table.items():
        if param.is_sampler or name not in program:
            continue
        value = param.value
        if param.type is ParamType.BOOL:
            value = int(value)
        program[name].value = value


def render_frame(
    ctx: moderngl.Context,
    fragment_source: str,
    table: ParameterTable,
    size: tuple[int, int],
) -> np.ndarray:
    """Draw one frame offscreen.

    Args:
        ctx: ModernGL context
        fragment_source: Composed fragment program
        table: Uniform values to bind
        size: Framebuffer (width, height)

    Returns:
        RGBA uint8 array of shape (height, width, 4), top row first
    """
    program = compile_program(ctx, fragment_source)
    vbo = ctx.buffer(QUAD_VERTICES.tobytes())
    vao = ctx.vertex_array(program, [(vbo, "2f", "in_position")])
    fbo = ctx.simple_framebuffer(size)

    try:
        fbo.use()
        ctx.clear(0.0, 0.0, 0.0, 1.0)
        bind_parameters(program, table)
        vao.render(moderngl.TRIANGLE_STRIP)

        data = fbo.read(components=4, dtype="f1", alignment=1)
        img = np.frombuffer(data, dtype=np.uint8).reshape(size[1], size[0], 4)
        # OpenGL has Y=0 at the bottom, image formats at the top
        return np.flipud(img).copy()
    finally:
        fbo.release()
        vao.release()
        vbo.release()
        program.release()


def save_image(
    image: Image.Image | np.ndarray,
    path: str | Path,
    image_format: str | None = None,
) -> None:
    """Write a rendered frame with Pillow."""
    if isinstance(image, np.ndarray):
        image = Image.fromarray(image)
    fmt = (image_format or Path(path).suffix.lstrip(".")).upper()
    if fmt in _OPAQUE_FORMATS:
        image = image.convert("RGB")
    image.save(path, format=image_format)
    logger.info(f"Image saved to {path}")


def render_transition(
    from_path: str | Path,
    to_path: str | Path,
    shader: str | ShaderDescriptor,
    mode: str | FitMode,
    progress: float,
    *,
    sampler_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
    catalog: ShaderCatalog | None = None,
    config: RenderConfig | None = None,
    gl_config: GLConfig | None = None,
) -> Image.Image:
    """Render one transition frame between two images.

    Args:
        from_path: Image shown at progress 0
        to_path: Image shown at progress 1
        shader: Catalog name, ``.glsl`` path or descriptor
        mode: Fit mode or its token
        progress: Transition progress, normally in [0, 1]
        sampler_path: Image bound to the shader's sampler2D parameters
        overrides: Parameter values replacing the catalog defaults
        catalog: Catalog for name lookups; the embedded one if None
        config: Output size and destination
        gl_config: OpenGL context configuration

    Returns:
        PIL Image containing the rendered frame
    """
    cfg = config or RenderConfig()
    descriptor = (
        shader if isinstance(shader, ShaderDescriptor) else resolve_shader(shader, catalog)
    )
    fit = mode if isinstance(mode, FitMode) else resolve(mode)
    fragment_source = compose(fit, descriptor.body)
    logger.info(f"Rendering {descriptor.name} ({fit.value}) at progress {progress}")

    with create_context(gl_config) as ctx:
        textures: list[moderngl.Texture] = []
        try:
            from_texture, from_size = load_texture(ctx, from_path)
            textures.append(from_texture)
            to_texture, to_size = load_texture(ctx, to_path)
            textures.append(to_texture)

            sampler = None
            if sampler_path is not None:
                sampler, _ = load_texture(ctx, sampler_path)
                textures.append(sampler)

            size = cfg.size or from_size
            builtins = Builtins(
                from_texture=from_texture,
                to_texture=to_texture,
                progress=progress,
                ratio=size[0] / size[1],
                from_aspect=from_size[0] / from_size[1],
                to_aspect=to_size[0] / to_size[1],
            )
            table = build(builtins, descriptor, sampler, overrides)
            for name, reason in table.skipped.items():
                logger.warning(f"Parameter {name} not bound: {reason}")

            array = render_frame(ctx, fragment_source, table, size)
        finally:
            for texture in textures:
                texture.release()

    image = Image.fromarray(array)
    if cfg.output:
        save_image(image, cfg.output, cfg.image_format)
    return image


__all__ = [
    "QUAD_VERTICES",
    "RenderConfig",
    "bind_parameters",
    "compile_program",
    "render_frame",
    "render_transition",
    "save_image",
]
