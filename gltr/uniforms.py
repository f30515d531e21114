"""Typed shader parameters and the per-render parameter table.

Every uniform handed to the GPU is a ``ParamValue``: a type tag plus a
payload whose shape matches the tag. Shader parameters come from loosely
typed catalog JSON and are converted against their declared type before
they are bound.
"""

import json
import numbers
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from gltr.catalog import ShaderDescriptor
from gltr.errors import (
    InvalidParameterOverride,
    MissingSamplerOverride,
    ParamArityError,
    ParamTypeMismatch,
    UnknownParameter,
)

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1


class ParamType(Enum):
    """Declared GLSL type of a shader parameter."""

    BOOL = "bool"
    FLOAT = "float"
    INT = "int"
    IVEC2 = "ivec2"
    VEC2 = "vec2"
    VEC3 = "vec3"
    VEC4 = "vec4"
    SAMPLER2D = "sampler2D"

    @classmethod
    def from_tag(cls, tag: Any) -> "ParamType | None":
        """Map a catalog type tag to a ParamType, None if unrecognized."""
        for member in cls:
            if member.value == tag:
                return member
        return None


VECTOR_ARITY = {
    ParamType.IVEC2: 2,
    ParamType.VEC2: 2,
    ParamType.VEC3: 3,
    ParamType.VEC4: 4,
}


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _is_int32(value: Any) -> bool:
    return (
        isinstance(value, int)
        and not isinstance(value, bool)
        and INT32_MIN <= value <= INT32_MAX
    )


def _payload_matches(type_: ParamType, value: Any) -> bool:
    if type_ is ParamType.BOOL:
        return isinstance(value, bool)
    if type_ is ParamType.FLOAT:
        return isinstance(value, float)
    if type_ is ParamType.INT:
        return _is_int32(value)
    if type_ is ParamType.SAMPLER2D:
        return value is not None
    arity = VECTOR_ARITY[type_]
    if not isinstance(value, tuple) or len(value) != arity:
        return False
    if type_ is ParamType.IVEC2:
        return all(_is_int32(v) for v in value)
    return all(isinstance(v, float) for v in value)


@dataclass(frozen=True)
class ParamValue:
    """A uniform value tagged with its GLSL type.

    Payloads: ``bool``, ``float``, ``int``, tuples of 2 ints (ivec2) or
    2/3/4 floats (vec2/vec3/vec4), or an opaque texture handle (sampler2D).
    """

    type: ParamType
    value: Any

    def __post_init__(self) -> None:
        if not _payload_matches(self.type, self.value):
            raise ValueError(
                f"Payload {self.value!r} does not match type {self.type.value}"
            )

    @property
    def is_sampler(self) -> bool:
        return self.type is ParamType.SAMPLER2D


@dataclass(frozen=True)
class Builtins:
    """Uniforms every transition program receives."""

    from_texture: Any
    to_texture: Any
    progress: float
    ratio: float
    from_aspect: float
    to_aspect: float

    def entries(self) -> dict[str, ParamValue]:
        return {
            "from": ParamValue(ParamType.SAMPLER2D, self.from_texture),
            "to": ParamValue(ParamType.SAMPLER2D, self.to_texture),
            "progress": ParamValue(ParamType.FLOAT, float(self.progress)),
            "ratio": ParamValue(ParamType.FLOAT, float(self.ratio)),
            "_fromR": ParamValue(ParamType.FLOAT, float(self.from_aspect)),
            "_toR": ParamValue(ParamType.FLOAT, float(self.to_aspect)),
        }


BUILTIN_TYPES = {
    "from": ParamType.SAMPLER2D,
    "to": ParamType.SAMPLER2D,
    "progress": ParamType.FLOAT,
    "ratio": ParamType.FLOAT,
    "_fromR": ParamType.FLOAT,
    "_toR": ParamType.FLOAT,
}


class ParameterTable:
    """Name-keyed uniform values for one render.

    Binding a name twice overwrites the earlier value. Declared parameters
    that were not bound are listed in ``skipped`` with the reason.
    """

    def __init__(self) -> None:
        self._values: dict[str, ParamValue] = {}
        self.skipped: dict[str, str] = {}

    def bind(self, name: str, value: ParamValue, declared_type: ParamType) -> None:
        """Bind a value, rejecting it if its tag is not the declared type."""
        if value.type is not declared_type:
            raise ParamTypeMismatch(name, declared_type, value.value)
        self._values[name] = value

    def set(self, name: str, value: ParamValue) -> None:
        """Bind a value; built-in names are checked against their fixed type."""
        self.bind(name, value, BUILTIN_TYPES.get(name, value.type))

    def __getitem__(self, name: str) -> ParamValue:
        return self._values[name]

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def items(self) -> Iterator[tuple[str, ParamValue]]:
        return iter(self._values.items())

    def samplers(self) -> list[tuple[str, Any]]:
        """Texture handles in binding order: ``from``, ``to``, then the rest."""
        names = [n for n in ("from", "to") if n in self._values]
        names += sorted(
            n for n, v in self._values.items() if v.is_sampler and n not in names
        )
        return [(name, self._values[name].value) for name in names]

    def uniforms(self) -> dict[str, Any]:
        """Raw payloads of all non-sampler entries."""
        return {n: v.value for n, v in self._values.items() if not v.is_sampler}


def _coerce_scalar(name: str, type_: ParamType, raw: Any) -> Any:
    if type_ is ParamType.BOOL:
        if isinstance(raw, bool):
            return raw
    elif type_ is ParamType.FLOAT:
        if _is_number(raw):
            return float(raw)
    elif type_ is ParamType.INT:
        if isinstance(raw, float) and raw.is_integer():
            raw = int(raw)
        if _is_int32(raw):
            return raw
    raise ParamTypeMismatch(name, type_, raw)


def _coerce_vector(name: str, type_: ParamType, raw: Any) -> tuple[Any, ...]:
    if isinstance(raw, (str, bytes)) or not isinstance(raw, Sequence):
        raise ParamTypeMismatch(name, type_, raw)

    arity = VECTOR_ARITY[type_]
    if len(raw) < arity:
        raise ParamArityError(name, arity, len(raw))

    # Elements past the arity are ignored
    element_type = ParamType.INT if type_ is ParamType.IVEC2 else ParamType.FLOAT
    try:
        return tuple(_coerce_scalar(name, element_type, v) for v in raw[:arity])
    except ParamTypeMismatch:
        raise ParamTypeMismatch(name, type_, raw) from None


def coerce(name: str, type_: ParamType, raw: Any, sampler: Any = None) -> ParamValue:
    """Convert a loosely typed value into a ParamValue of the declared type.

    Args:
        name: Parameter name, used in error reports
        type_: Declared parameter type
        raw: JSON-like value (bool, number or list of numbers)
        sampler: Texture handle for sampler2D parameters

    Returns:
        Tagged value matching ``type_``
    """
    if type_ is ParamType.SAMPLER2D:
        if sampler is None:
            raise MissingSamplerOverride(name)
        return ParamValue(type_, sampler)
    if type_ in VECTOR_ARITY:
        return ParamValue(type_, _coerce_vector(name, type_, raw))
    return ParamValue(type_, _coerce_scalar(name, type_, raw))


def build(
    builtins: Builtins,
    descriptor: ShaderDescriptor,
    override_sampler: Any = None,
    overrides: Mapping[str, Any] | None = None,
) -> ParameterTable:
    """Build the parameter table for one render.

    The built-in uniforms are bound first, then every parameter the shader
    declares, using the caller's override when given and the catalog default
    otherwise. Sampler parameters always take ``override_sampler``; an
    override value for one raises ``ParamTypeMismatch``.

    Parameters with an unrecognized type tag, without any value, or shadowing
    a built-in name are left out and reported in ``table.skipped``.

    Args:
        builtins: Textures, progress and aspect ratios for this render
        descriptor: Shader whose declared parameters are bound
        override_sampler: Texture bound to sampler2D parameters
        overrides: Values replacing the catalog defaults, by name

    Returns:
        Populated parameter table
    """
    table = ParameterTable()
    for name, value in builtins.entries().items():
        table.set(name, value)

    overrides = dict(overrides or {})
    for name in overrides:
        if name not in descriptor.param_types:
            raise UnknownParameter(name)

    for name, tag in descriptor.param_types.items():
        type_ = ParamType.from_tag(tag)
        if type_ is None:
            table.skipped[name] = f"unknown type {tag!r}"
            continue
        if name in BUILTIN_TYPES:
            table.skipped[name] = "shadows a built-in uniform"
            continue

        if type_ is ParamType.SAMPLER2D:
            # Textures only come from override_sampler, never from plain values
            if name in overrides:
                raise ParamTypeMismatch(name, type_, overrides[name])
            raw, sampler = None, override_sampler
        elif name in overrides:
            raw, sampler = overrides[name], None
        elif name in descriptor.default_params:
            raw, sampler = descriptor.default_params[name], None
        else:
            table.skipped[name] = "no default value"
            continue

        table.bind(name, coerce(name, type_, raw, sampler), type_)

    return table


def parse_override(text: str) -> tuple[str, Any]:
    """Parse a ``NAME=JSON`` parameter override, e.g. ``direction=[1,0]``."""
    name, sep, raw = text.partition("=")
    name = name.strip()
    if not sep or not name:
        raise InvalidParameterOverride(text)
    try:
        return name, json.loads(raw)
    except json.JSONDecodeError as e:
        raise InvalidParameterOverride(text, f"value is not JSON ({e.msg})") from e


__all__ = [
    "ParamType",
    "ParamValue",
    "Builtins",
    "BUILTIN_TYPES",
    "ParameterTable",
    "VECTOR_ARITY",
    "build",
    "coerce",
    "parse_override",
]
