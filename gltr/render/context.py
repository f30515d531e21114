"""OpenGL context management."""

import os
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

import glfw
import moderngl

from gltr.errors import GLContextError

CONTEXT_BACKENDS = ("standalone", "glfw")


@dataclass
class GLConfig:
    """OpenGL context configuration.

    Attributes:
        major_version: Required OpenGL major version
        minor_version: Required OpenGL minor version
        backend: ``standalone`` for a headless moderngl context, ``glfw`` for
            a hidden window
        gl_backend: moderngl standalone backend, e.g. ``egl`` on servers
    """

    major_version: int = 3
    minor_version: int = 3
    backend: str = "standalone"
    gl_backend: str | None = field(
        default_factory=lambda: os.environ.get("GLTR_GL_BACKEND") or None
    )

    def __post_init__(self) -> None:
        """Validate OpenGL version and backend."""
        if (
            self.major_version < 3
            or self.major_version > 4
            or (self.major_version == 3 and self.minor_version < 3)
            or (self.major_version == 4 and self.minor_version > 6)
        ):
            raise GLContextError(
                f"Unsupported OpenGL version: {self.major_version}.{self.minor_version}"
            )
        if self.backend not in CONTEXT_BACKENDS:
            raise GLContextError(f"Unsupported context backend: {self.backend}")

    @property
    def require(self) -> int:
        """Version number in moderngl's format, e.g. 3.3 -> 330."""
        return self.major_version * 100 + self.minor_version * 10


@contextmanager
def _standalone_context(cfg: GLConfig) -> Iterator[moderngl.Context]:
    kwargs = {"standalone": True, "require": cfg.require}
    if cfg.gl_backend:
        kwargs["backend"] = cfg.gl_backend
    try:
        ctx = moderngl.create_context(**kwargs)
    except Exception as e:
        raise GLContextError(f"Failed to create OpenGL context: {e}") from e

    try:
        yield ctx
    finally:
        ctx.release()


@contextmanager
def _glfw_context(cfg: GLConfig) -> Iterator[moderngl.Context]:
    if not glfw.init():
        raise GLContextError("Failed to initialize GLFW")

    window = None
    ctx = None
    try:
        glfw.window_hint(glfw.VISIBLE, False)
        glfw.window_hint(glfw.CONTEXT_VERSION_MAJOR, cfg.major_version)
        glfw.window_hint(glfw.CONTEXT_VERSION_MINOR, cfg.minor_version)
        glfw.window_hint(glfw.OPENGL_PROFILE, glfw.OPENGL_CORE_PROFILE)
        glfw.window_hint(glfw.OPENGL_FORWARD_COMPAT, True)

        # Create hidden window
        window = glfw.create_window(1, 1, "gltr", None, None)
        if not window:
            raise GLContextError("Failed to create GLFW window")

        glfw.make_context_current(window)
        ctx = moderngl.create_context(require=cfg.require)
        yield ctx

    finally:
        if ctx:
            ctx.release()
        if window:
            glfw.destroy_window(window)
        glfw.terminate()


@contextmanager
def create_context(config: GLConfig | None = None) -> Iterator[moderngl.Context]:
    """Create an OpenGL context for offscreen rendering.

    The context and any window behind it are released on exit.
    """
    cfg = config or GLConfig()
    factory = _glfw_context if cfg.backend == "glfw" else _standalone_context
    with factory(cfg) as ctx:
        yield ctx


__all__ = [
    "CONTEXT_BACKENDS",
    "GLConfig",
    "GLContextError",
    "create_context",
]
