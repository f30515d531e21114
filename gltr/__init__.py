from gltr.catalog import (
    ShaderCatalog,
    ShaderDescriptor,
    default_catalog,
    load_catalog,
    load_shader_file,
)
from gltr.composer import VERTEX_SHADER_SOURCE, compose
from gltr.errors import GltrError
from gltr.modes import FitMode, resolve
from gltr.uniforms import Builtins, ParameterTable, ParamType, ParamValue, build

__version__ = "0.1.0"


__all__ = [
    "Builtins",
    "FitMode",
    "GltrError",
    "ParameterTable",
    "ParamType",
    "ParamValue",
    "ShaderCatalog",
    "ShaderDescriptor",
    "VERTEX_SHADER_SOURCE",
    "build",
    "compose",
    "default_catalog",
    "load_catalog",
    "load_shader_file",
    "resolve",
]
