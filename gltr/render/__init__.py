"""Rendering functionality for transitions."""

from .context import CONTEXT_BACKENDS, GLConfig, GLContextError, create_context
from .frame import (
    RenderConfig,
    bind_parameters,
    compile_program,
    render_frame,
    render_transition,
    save_image,
)
from .textures import create_texture, load_image, load_texture

__all__ = [
    # Main rendering functions
    "render_frame",
    "render_transition",
    "save_image",
    "RenderConfig",
    # Program and uniforms
    "compile_program",
    "bind_parameters",
    # Textures
    "create_texture",
    "load_image",
    "load_texture",
    # Context management
    "CONTEXT_BACKENDS",
    "GLConfig",
    "GLContextError",
    "create_context",
]
