"""
Plotted function definitions and their markup.

Every function yields its base ``\\addplot`` clause, an optional legend entry,
and optional tangent and extrema annotations. Failures are isolated: a bad
domain or expression drops that function only, a bad tangent point or a
non-finite evaluation drops that annotation only.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Union

from . import config
from .analysis import find_extrema, format_number, parse_domain, parse_tangent_point, tangent_line
from .errors import EvaluationError, InvalidDomain, InvalidExpression, InvalidTangentPoint
from .expression import CompiledExpression, compile_expression

logger = logging.getLogger(__name__)

COLOR_OPTIONS: tuple[str, ...] = ("black", "red", "blue", "teal", "orange", "green", "purple")
THICKNESS_OPTIONS: tuple[str, ...] = ("very thin", "thin", "thick", "very thick")

_KEY_ALIASES = {"showLegend": "show_legend", "tangentPoint": "tangent_point"}


@dataclass(frozen=True, slots=True)
class FunctionSpec:
    expression: str
    domain: str = "-10:10"
    show_legend: bool = False
    fill: bool = False
    tangent: bool = False
    dashed: bool = False
    extrema: bool = False
    color: str = "black"
    thickness: str = "thin"
    tangent_point: str = ""

    def __post_init__(self) -> None:
        if self.color not in COLOR_OPTIONS:
            raise ValueError(f"color must be one of {COLOR_OPTIONS}, got {self.color!r}")
        if self.thickness not in THICKNESS_OPTIONS:
            raise ValueError(f"thickness must be one of {THICKNESS_OPTIONS}, got {self.thickness!r}")

    @property
    def is_complete(self) -> bool:
        return bool(str(self.expression).strip()) and bool(str(self.domain).strip())

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> FunctionSpec:
        """Build from snake_case keys or the host form's camelCase ones."""
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            name = _KEY_ALIASES.get(key, key)
            if name not in cls.__dataclass_fields__:
                raise ValueError(f"Unknown function field {key!r}")
            if name == "tangent_point" and value is not None:
                # JSON hosts send the point as a number
                value = str(value)
            kwargs[name] = value
        if "expression" not in kwargs:
            raise ValueError("Function definition needs an 'expression'")
        return cls(**kwargs)


FunctionLike = Union[FunctionSpec, Mapping[str, Any]]


def as_function_spec(item: FunctionLike) -> FunctionSpec:
    if isinstance(item, FunctionSpec):
        return item
    if isinstance(item, Mapping):
        return FunctionSpec.from_mapping(item)
    raise ValueError(f"Expected a function definition, got {type(item).__name__}")


# ===========================================================================
# Markup
# ===========================================================================

def _style_clause(spec: FunctionSpec) -> str:
    style: list[str] = []
    if spec.dashed:
        style.append("dashed")
    if spec.fill:
        style.append(f"fill={spec.color}!20, fill opacity=0.3")
    style.append(spec.color)
    style.append(spec.thickness)
    return ", ".join(style)


def _tangent_annotation(spec: FunctionSpec, f: CompiledExpression,
                        bounds: tuple[float, float]) -> str:
    try:
        x0 = parse_tangent_point(spec.tangent_point, bounds)
        line = tangent_line(f, x0)
        point = f"({format_number(x0)},{format_number(f(x0))})"
    except (InvalidTangentPoint, EvaluationError) as exc:
        logger.warning("Skipping tangent for %r: %s", spec.expression, exc)
        return ""
    return (
        f"\n\\addplot[{spec.color}, dashed, domain={spec.domain}] {{{line}}};"
        f"\n\\addplot[{spec.color}, only marks] coordinates {{{point}}};"
    )


def _extrema_annotation(spec: FunctionSpec, f: CompiledExpression,
                        bounds: tuple[float, float]) -> str:
    try:
        points = find_extrema(f, bounds)
        coordinates = " ".join(f"({format_number(p.x)},{format_number(p.y)})" for p in points)
        labels = "".join(
            f"\n\\node[{p.label_anchor}] at (axis cs:{format_number(p.x)},{format_number(p.label_y)})"
            f" {{{p.kind.value}}};"
            for p in points
        )
    except EvaluationError as exc:
        logger.warning("Skipping extrema for %r: %s", spec.expression, exc)
        return ""
    if not points:
        return ""
    return (
        f"\n\\addplot[{spec.color}, only marks, mark=*, mark size=4pt]"
        f" coordinates {{{coordinates}}};{labels}"
    )


def render_function(spec: FunctionSpec) -> str:
    """Markup for one function.

    Raises :class:`InvalidDomain` or :class:`InvalidExpression` when the
    base plot itself cannot be produced.
    """
    bounds = parse_domain(spec.domain)
    f = compile_expression(spec.expression)

    code = (
        f"\n\\addplot[domain={spec.domain}, {_style_clause(spec)},"
        f" samples={config.PLOT_SAMPLES}] {{{spec.expression}}};"
    )
    if spec.show_legend:
        code += f"\n\\addlegendentry{{\\({spec.expression}\\)}}"
    if spec.tangent and spec.tangent_point:
        code += _tangent_annotation(spec, f, bounds)
    if spec.extrema:
        code += _extrema_annotation(spec, f, bounds)
    return code


def render_functions(functions: Iterable[FunctionLike]) -> str:
    """Markup for every function in order, joined by newlines.

    A function that cannot be rendered is logged and left out; the others
    are unaffected.
    """
    fragments: list[str] = []
    for index, item in enumerate(functions or ()):
        try:
            spec = as_function_spec(item)
            fragments.append(render_function(spec))
        except (InvalidDomain, InvalidExpression) as exc:
            logger.warning("Skipping function #%d: %s", index + 1, exc)
        except (TypeError, ValueError) as exc:
            logger.warning("Skipping malformed function #%d: %s", index + 1, exc)
    return "\n".join(fragments)
