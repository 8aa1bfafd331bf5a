"""Settings-driven pgfplots/TikZ generator with tangent and extrema annotations."""

from .analysis import (
    ExtremumKind,
    ExtremumPoint,
    derivative,
    find_extrema,
    format_number,
    parse_domain,
    parse_tangent_point,
    tangent_coefficients,
    tangent_line,
)
from .errors import (
    EvaluationError,
    InvalidDomain,
    InvalidExpression,
    InvalidTangentPoint,
    TikzPlotError,
    UnknownSetting,
)
from .expression import CompiledExpression, compile_expression
from .functions import COLOR_OPTIONS, THICKNESS_OPTIONS, FunctionSpec, render_functions
from .latex_gen import TikzGenerator, tidy_tikz_source
from .settings import (
    FRAGMENT_RENDERERS,
    TIKZ_SETTINGS,
    Category,
    SettingDescriptor,
    SettingType,
    descriptors_by_category,
    get_descriptor,
)
from .store import SettingsStore

__all__ = [
    "ExtremumKind",
    "ExtremumPoint",
    "derivative",
    "find_extrema",
    "format_number",
    "parse_domain",
    "parse_tangent_point",
    "tangent_coefficients",
    "tangent_line",
    "EvaluationError",
    "InvalidDomain",
    "InvalidExpression",
    "InvalidTangentPoint",
    "TikzPlotError",
    "UnknownSetting",
    "CompiledExpression",
    "compile_expression",
    "COLOR_OPTIONS",
    "THICKNESS_OPTIONS",
    "FunctionSpec",
    "render_functions",
    "TikzGenerator",
    "tidy_tikz_source",
    "FRAGMENT_RENDERERS",
    "TIKZ_SETTINGS",
    "Category",
    "SettingDescriptor",
    "SettingType",
    "descriptors_by_category",
    "get_descriptor",
    "SettingsStore",
]
