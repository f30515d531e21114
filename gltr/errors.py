"""Errors raised while resolving, composing and rendering transitions."""

from typing import Any


class GltrError(Exception):
    """Base class for all gltr errors"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class InvalidMode(GltrError):
    """Fit mode token is not one of contain, stretch or cover"""

    def __init__(self, token: str):
        super().__init__(f"Invalid transition mode: {token!r}")
        self.token = token


class ShaderNotFound(GltrError):
    """No catalog entry or shader file matches the requested name"""

    def __init__(self, name: str):
        super().__init__(f"Shader not found: {name!r}")
        self.name = name


class CatalogParseError(GltrError):
    """Catalog resource or shader file metadata is malformed"""

    def __init__(self, reason: str):
        super().__init__(f"Could not parse shader catalog: {reason}")
        self.reason = reason


class ShaderCompileError(GltrError):
    """The GL compiler rejected the composed program"""

    def __init__(self, diagnostic: str):
        super().__init__(f"Failed to compile shader program:\n{diagnostic}")
        self.diagnostic = diagnostic


class ParamTypeMismatch(GltrError):
    """Parameter value does not have the declared type"""

    def __init__(self, name: str, expected: Any, value: Any = None):
        expected_name = getattr(expected, "value", expected)
        message = f"Parameter {name!r} expects {expected_name}"
        if value is not None:
            message += f", got {value!r}"
        super().__init__(message)
        self.name = name
        self.expected = expected
        self.value = value


class ParamArityError(GltrError):
    """Vector parameter has fewer elements than its type requires"""

    def __init__(self, name: str, expected: int, actual: int):
        super().__init__(
            f"Parameter {name!r} expects {expected} elements, got {actual}"
        )
        self.name = name
        self.expected = expected
        self.actual = actual


class MissingSamplerOverride(GltrError):
    """Sampler parameter declared without a texture supplied for it"""

    def __init__(self, name: str):
        super().__init__(
            f"Parameter {name!r} is a sampler2D and needs a texture (--sampler)"
        )
        self.name = name


class UnknownParameter(GltrError):
    """Override given for a parameter the shader does not declare"""

    def __init__(self, name: str):
        super().__init__(f"Shader declares no parameter named {name!r}")
        self.name = name


class InvalidParameterOverride(GltrError):
    """Command line parameter override is not NAME=JSON"""

    def __init__(self, text: str, reason: str = "expected NAME=VALUE"):
        super().__init__(f"Invalid parameter override {text!r}: {reason}")
        self.text = text


class TextureLoadError(GltrError):
    """Image file could not be decoded into a texture"""

    def __init__(self, path: Any, reason: str = ""):
        message = f"Could not load image {str(path)!r}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.path = path


class GLContextError(GltrError):
    """OpenGL context error."""


__all__ = [
    "GltrError",
    "InvalidMode",
    "ShaderNotFound",
    "CatalogParseError",
    "ShaderCompileError",
    "ParamTypeMismatch",
    "ParamArityError",
    "MissingSamplerOverride",
    "UnknownParameter",
    "InvalidParameterOverride",
    "TextureLoadError",
    "GLContextError",
]
