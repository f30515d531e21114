"""Shader catalog: named transition bodies with their declared parameters.

The embedded catalog uses the gl-transitions JSON layout, a list of records::

    {
        "name": "directional",
        "glsl": "uniform vec2 direction; // = vec2(0.0, 1.0)\\n...",
        "paramsTypes": {"direction": "vec2"},
        "defaultParams": {"direction": [0.0, 1.0]}
    }

Standalone ``.glsl`` transition files are also accepted; their parameters
are read from ``uniform <type> <name>; // = <default>`` declarations.
"""

import json
import os
import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any

from gltr.errors import CatalogParseError, ShaderNotFound

CATALOG_PATH = Path(__file__).parent / "data" / "transitions.json"

SHADER_FILE_SUFFIX = ".glsl"

_REQUIRED_FIELDS = {
    "name": str,
    "glsl": str,
    "paramsTypes": Mapping,
    "defaultParams": Mapping,
}

_UNIFORM_RE = re.compile(
    r"^[ \t]*uniform[ \t]+(?P<type>\w+)[ \t]+(?P<name>\w+)[ \t]*"
    r"(?:/\*[ \t]*=[ \t]*(?P<inline>.*?)[ \t]*\*/[ \t]*)?;"
    r"[ \t]*(?://[ \t]*=[ \t]*(?P<comment>.*?)[ \t]*;?[ \t]*|//.*)?$",
    re.MULTILINE,
)

_CONSTRUCTOR_RE = re.compile(r"^(?P<ctor>[a-z]*vec(?P<size>[234]))\s*\((?P<args>.*)\)$")


@dataclass(frozen=True)
class ShaderDescriptor:
    """One transition shader.

    Attributes:
        name: Shader name, matched case-insensitively
        body: GLSL source defining ``vec4 transition(vec2 uv)``
        param_types: Declared type tag per parameter, in declaration order
        default_params: Loosely typed default value per parameter
        author: Optional author credit
        license: Optional license identifier
    """

    name: str
    body: str
    param_types: Mapping[str, str] = field(default_factory=dict)
    default_params: Mapping[str, Any] = field(default_factory=dict)
    author: str | None = None
    license: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "param_types", MappingProxyType(dict(self.param_types)))
        object.__setattr__(
            self, "default_params", MappingProxyType(dict(self.default_params))
        )


class ShaderCatalog:
    """Read-only, case-insensitive registry of shader descriptors."""

    def __init__(self, descriptors: Iterable[ShaderDescriptor]):
        self._entries: dict[str, ShaderDescriptor] = {}
        for descriptor in descriptors:
            key = descriptor.name.lower()
            if key in self._entries:
                raise CatalogParseError(f"duplicate shader name {descriptor.name!r}")
            self._entries[key] = descriptor

    def lookup(self, name: str) -> ShaderDescriptor:
        """Find a shader by name, ignoring case."""
        try:
            return self._entries[name.lower()]
        except KeyError:
            raise ShaderNotFound(name) from None

    def names(self) -> list[str]:
        return [d.name for d in self._entries.values()]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._entries

    def __iter__(self) -> Iterator[ShaderDescriptor]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)


def _parse_record(index: int, record: Any) -> ShaderDescriptor:
    if not isinstance(record, Mapping):
        raise CatalogParseError(f"record {index} is not an object")

    for key, expected in _REQUIRED_FIELDS.items():
        if key not in record:
            raise CatalogParseError(f"record {index} has no {key!r} field")
        if not isinstance(record[key], expected):
            raise CatalogParseError(f"record {index} field {key!r} has the wrong type")

    name = record["name"]
    if not name.strip():
        raise CatalogParseError(f"record {index} has an empty name")

    # Unknown tags are kept; they are skipped when parameters are bound
    for param, tag in record["paramsTypes"].items():
        if not isinstance(param, str) or not isinstance(tag, str):
            raise CatalogParseError(f"{name}: parameter types must map names to tags")

    return ShaderDescriptor(
        name=name,
        body=record["glsl"],
        param_types=record["paramsTypes"],
        default_params=record["defaultParams"],
        author=record.get("author"),
        license=record.get("license"),
    )


def parse_catalog(records: Any) -> ShaderCatalog:
    """Validate decoded catalog JSON and build a ShaderCatalog."""
    if not isinstance(records, list):
        raise CatalogParseError("expected a list of shader records")
    return ShaderCatalog(_parse_record(i, r) for i, r in enumerate(records))


def load_catalog(path: str | Path | None = None) -> ShaderCatalog:
    """Load a JSON catalog file, the embedded catalog when ``path`` is None."""
    source = Path(path) if path is not None else CATALOG_PATH
    try:
        records = json.loads(source.read_text(encoding="utf-8"))
    except OSError as e:
        raise CatalogParseError(f"cannot read {source}: {e}") from e
    except json.JSONDecodeError as e:
        raise CatalogParseError(f"{source.name}: {e}") from e
    return parse_catalog(records)


@lru_cache(maxsize=None)
def default_catalog() -> ShaderCatalog:
    """The embedded catalog, loaded once per process."""
    return load_catalog()


def _parse_number(text: str) -> int | float:
    text = text.strip()
    try:
        return int(text)
    except ValueError:
        return float(text)


def parse_glsl_literal(text: str) -> Any:
    """Parse a GLSL default literal into its JSON-like form.

    Examples: ``0.5`` → 0.5, ``true`` → True, ``vec2(0.0, 1.0)`` → [0.0, 1.0],
    ``vec3(1.0)`` → [1.0, 1.0, 1.0].
    """
    text = text.strip()
    if text in ("true", "false"):
        return text == "true"

    match = _CONSTRUCTOR_RE.match(text)
    if match:
        args = [_parse_number(a) for a in match["args"].split(",") if a.strip()]
        size = int(match["size"])
        if len(args) == 1:
            args = args * size
        return args

    return _parse_number(text)


def parse_shader_source(name: str, source: str) -> ShaderDescriptor:
    """Build a descriptor from transition source with annotated uniforms."""
    param_types: dict[str, str] = {}
    default_params: dict[str, Any] = {}
    for match in _UNIFORM_RE.finditer(source):
        param = match["name"]
        param_types[param] = match["type"]
        default = match["inline"] or match["comment"]
        if default:
            try:
                default_params[param] = parse_glsl_literal(default)
            except ValueError as e:
                raise CatalogParseError(
                    f"{name}: cannot parse default of {param!r}: {default!r}"
                ) from e
    return ShaderDescriptor(
        name=name,
        body=source,
        param_types=param_types,
        default_params=default_params,
    )


def load_shader_file(path: str | Path) -> ShaderDescriptor:
    """Load a standalone transition file; ``.glsl`` is appended if missing."""
    path = Path(path)
    if path.suffix != SHADER_FILE_SUFFIX:
        path = path.with_name(path.name + SHADER_FILE_SUFFIX)
    try:
        source = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ShaderNotFound(str(path)) from None
    return parse_shader_source(path.stem, source)


def _is_shader_path(token: str) -> bool:
    """Paths are spelled with a ``.glsl`` suffix or a directory separator."""
    separators = ("/", os.sep, os.altsep)
    return token.endswith(SHADER_FILE_SUFFIX) or any(
        sep in token for sep in separators if sep
    )


def resolve_shader(token: str, catalog: ShaderCatalog | None = None) -> ShaderDescriptor:
    """Resolve a shader given as a catalog name or a path to a ``.glsl`` file."""
    if _is_shader_path(token):
        return load_shader_file(token)
    return (catalog or default_catalog()).lookup(token)


__all__ = [
    "CATALOG_PATH",
    "ShaderDescriptor",
    "ShaderCatalog",
    "default_catalog",
    "load_catalog",
    "load_shader_file",
    "parse_catalog",
    "parse_glsl_literal",
    "parse_shader_source",
    "resolve_shader",
]
