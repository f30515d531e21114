"""Fragment program composition.

A transition shader only provides ``vec4 transition(vec2 uv)``. This module
wraps that body with the uniforms, the ``getFromColor``/``getToColor``
sampling helpers for the requested fit mode and a fixed entry point.
"""

from gltr.modes import FitMode

GLSL_VERSION = "#version 330 core"

VERTEX_SHADER_SOURCE = f"""{GLSL_VERSION}
in vec2 in_position;
out vec2 uv;
void main() {{
    uv = (in_position + 1.0) * 0.5;
    gl_Position = vec4(in_position, 0.0, 1.0);
}}
"""

FROM_HELPER = "getFromColor"
TO_HELPER = "getToColor"

# Fragment output, outside the names transitions declare
OUTPUT_NAME = "_gltr_fragColor"

# Uniforms only declared for the aspect-correcting modes
RATIO_UNIFORMS = ("ratio", "_fromR", "_toR")

_HELPER_TEMPLATE = """vec4 {helper}(vec2 uv) {{
    return texture({texture}, {coord});
}}"""

_FIT_COORD_TEMPLATE = (
    ".5 + (uv - .5) * vec2({fn}(ratio / {source}, 1.), {fn}({source} / ratio, 1.))"
)

_ENTRY_POINT = f"""void main() {{
    {OUTPUT_NAME} = transition(uv);
}}"""

# GLSL reduction used per axis by the fitting modes
_FIT_FUNCTIONS = {
    FitMode.CONTAIN: "max",
    FitMode.COVER: "min",
}


def _prelude(mode: FitMode) -> str:
    lines = [
        GLSL_VERSION,
        "uniform sampler2D from, to;",
        "uniform float progress;",
    ]
    if mode in _FIT_FUNCTIONS:
        lines.append(f"uniform float {', '.join(RATIO_UNIFORMS)};")
    lines += ["in vec2 uv;", f"out vec4 {OUTPUT_NAME};"]
    return "\n".join(lines)


def _sampling_helper(mode: FitMode, helper: str, texture: str, source: str) -> str:
    if mode is FitMode.STRETCH:
        coord = "uv"
    else:
        coord = _FIT_COORD_TEMPLATE.format(fn=_FIT_FUNCTIONS[mode], source=source)
    return _HELPER_TEMPLATE.format(helper=helper, texture=texture, coord=coord)


def compose(mode: FitMode, transition_body: str) -> str:
    """Compose a complete fragment program around a transition body.

    The body is inserted verbatim and is expected to define
    ``vec4 transition(vec2 uv)`` using ``getFromColor``/``getToColor``.
    It must not define those helper names itself. Its GLSL is not checked
    here; syntax errors surface when the program is compiled.

    Args:
        mode: Aspect-ratio fit mode
        transition_body: GLSL source of the transition function

    Returns:
        Fragment program source
    """
    sections = [
        _prelude(mode),
        _sampling_helper(mode, FROM_HELPER, "from", "_fromR"),
        _sampling_helper(mode, TO_HELPER, "to", "_toR"),
        transition_body,
        _ENTRY_POINT,
    ]
    return "\n\n".join(sections) + "\n"


def fit_scale(mode: FitMode, ratio: float, source_ratio: float) -> tuple[float, float]:
    """Evaluate the per-axis UV scale the sampling helpers apply.

    Args:
        mode: Aspect-ratio fit mode
        ratio: Destination aspect ratio (width / height)
        source_ratio: Source image aspect ratio

    Returns:
        (x, y) factors multiplied into ``uv - 0.5``
    """
    if mode is FitMode.STRETCH:
        return 1.0, 1.0
    reduce = max if mode is FitMode.CONTAIN else min
    return reduce(ratio / source_ratio, 1.0), reduce(source_ratio / ratio, 1.0)


__all__ = [
    "GLSL_VERSION",
    "VERTEX_SHADER_SOURCE",
    "FROM_HELPER",
    "TO_HELPER",
    "OUTPUT_NAME",
    "RATIO_UNIFORMS",
    "compose",
    "fit_scale",
]
