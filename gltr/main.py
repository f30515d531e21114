"""Command line interface for gltr.

Renders a single frame of a GL transition between two images, lists the
embedded transition catalog and exports composed fragment programs.
"""

from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar, cast

import arrow
import typer
from loguru import logger

from gltr.catalog import ShaderDescriptor, default_catalog, resolve_shader
from gltr.composer import compose
from gltr.errors import GltrError
from gltr.modes import FitMode, resolve
from gltr.render import GLConfig, RenderConfig, render_transition
from gltr.uniforms import parse_override

# Define type variables for TypedCallable
F = TypeVar("F", bound=Callable[..., Any])


# TypedCommand decorator helper
def typed_command(app_command: Any) -> Callable[[F], F]:
    """Wrap typer command with proper typing for mypy."""

    def decorator(func: F) -> F:
        return cast(F, app_command(func))

    return decorator


app = typer.Typer(
    name="gltr",
    help=(
        "Render one frame of a GL transition between two images. "
        "Commands: render, list, export-code."
    ),
    add_completion=False,
)


def _fail(error: Exception) -> typer.Exit:
    logger.error(str(error))
    return typer.Exit(1)


def _get_size(width: int | None, height: int | None) -> tuple[int, int] | None:
    """Create a size tuple, None when the size comes from the input image."""
    if width is None and height is None:
        return None
    if width is None or height is None:
        raise typer.BadParameter("--width and --height must be given together")
    if width <= 0 or height <= 0:
        raise typer.BadParameter("--width and --height must be positive")
    return (width, height)


def _describe_params(descriptor: ShaderDescriptor) -> str:
    parts = []
    for name, tag in descriptor.param_types.items():
        if name in descriptor.default_params:
            parts.append(f"{name}:{tag}={descriptor.default_params[name]}")
        else:
            parts.append(f"{name}:{tag}")
    return " ".join(parts)


# Reusable arguments and options
SHADER_OPTION = typer.Option(
    ..., "--shader", "-s", help="Catalog shader name or path to a .glsl file"
)
MODE_OPTION = typer.Option(
    "stretch", "--mode", "-m", help="Fit mode (contain, stretch, cover)"
)
PARAM_OPTION = typer.Option(
    None, "--param", help="Override a shader parameter as NAME=JSON (repeatable)"
)


@typed_command(app.command("render"))
def render_command(
    from_image: Path = typer.Option(..., "--from", "-f", help="Image at progress 0"),
    to_image: Path = typer.Option(..., "--to", "-t", help="Image at progress 1"),
    shader: str = SHADER_OPTION,
    mode: str = MODE_OPTION,
    progress: float = typer.Option(..., "--progress", "-p", help="Progress (0-1)"),
    output: Path = typer.Option(
        Path("output.png"), "--output", "-o", help="Output image file path"
    ),
    width: int | None = typer.Option(None, "--width", "-w", help="Output width"),
    height: int | None = typer.Option(None, "--height", "-h", help="Output height"),
    sampler: Path | None = typer.Option(
        None, "--sampler", help="Image bound to the shader's sampler2D parameters"
    ),
    params: list[str] | None = PARAM_OPTION,
    backend: str = typer.Option(
        "standalone", "--backend", help="OpenGL context backend (standalone, glfw)"
    ),
) -> None:
    """Render a transition frame to an image file.

    Example: gltr render -f a.png -t b.png -s fade -m cover -p 0.5 -o out.png
    """
    size = _get_size(width, height)
    try:
        overrides = dict(parse_override(p) for p in params or [])
        gl_config = GLConfig(backend=backend)
        render_transition(
            from_image,
            to_image,
            shader,
            mode,
            progress,
            sampler_path=sampler,
            overrides=overrides,
            config=RenderConfig(size=size, output=output),
            gl_config=gl_config,
        )
    except GltrError as e:
        raise _fail(e) from e
    except (OSError, ValueError) as e:
        logger.error(f"Could not write {output}: {e}")
        raise typer.Exit(1) from e


@typed_command(app.command("list"))
def list_command() -> None:
    """List the transitions in the embedded catalog."""
    try:
        catalog = default_catalog()
    except GltrError as e:
        raise _fail(e) from e

    for descriptor in catalog:
        params = _describe_params(descriptor)
        typer.echo(f"{descriptor.name}  {params}".rstrip())


def _add_header_comments(code: str, descriptor: ShaderDescriptor, mode: FitMode) -> str:
    """Prefix composed code with a generated-by header."""
    timestamp = arrow.utcnow().format("YYYY-MM-DD HH:mm:ss UTC")
    header = f"// Generated by gltr v{__import__('gltr').__version__}\n"
    header += f"// Generation time: {timestamp}\n"
    header += f"// Transition: {descriptor.name}\n"
    if descriptor.author:
        header += f"// Author: {descriptor.author}\n"
    if descriptor.license:
        header += f"// License: {descriptor.license}\n"
    header += f"// Mode: {mode.value}\n"

    # The #version directive must stay on the first line
    version, _, rest = code.partition("\n")
    return f"{version}\n{header}{rest}"


@typed_command(app.command("export-code"))
def export_code_command(
    output: Path | None = typer.Argument(
        None, help="Output code file path (stdout when omitted)"
    ),
    shader: str = SHADER_OPTION,
    mode: str = MODE_OPTION,
    format: str = typer.Option(
        "plain", "--format", "-F", help="Code format (plain, commented)"
    ),
) -> None:
    """Export the composed fragment program for a transition.

    Example: gltr export-code -s directional -m contain directional.frag
    """
    if format not in ("plain", "commented"):
        raise typer.BadParameter(f"Unknown format: {format}")

    try:
        descriptor = resolve_shader(shader)
        fit = resolve(mode)
    except GltrError as e:
        raise _fail(e) from e

    code = compose(fit, descriptor.body)
    if format == "commented":
        code = _add_header_comments(code, descriptor, fit)

    if output is None:
        typer.echo(code, nl=False)
        return

    logger.info(f"Exporting shader code to {output}...")
    output.write_text(code)
    logger.info(f"Shader code exported to {output}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
