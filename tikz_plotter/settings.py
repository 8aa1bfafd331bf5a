"""
Setting registry: the ordered catalogue of plot options and their fragments.

The generated document is the concatenation of fragments in registry order,
so the order of ``TIKZ_SETTINGS`` is significant.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterable, Optional, Sequence

from .errors import UnknownSetting
from .functions import render_functions

FragmentRenderer = Callable[[Any], str]


class Category(str, Enum):
    BASIC = "basic"
    AXIS = "axis"
    FUNCTION = "function"
    SHAPES = "shapes"
    GRID = "grid"
    STYLE = "style"
    OTHER = "other"


class SettingType(str, Enum):
    TOGGLE = "toggle"
    TEXT = "text"
    SLIDER = "slider"
    DROPDOWN = "dropdown"
    COLOR = "color"


# Order of the collapsible sections in the host form.
SECTION_CATEGORIES: tuple[Category, ...] = (
    Category.BASIC,
    Category.AXIS,
    Category.FUNCTION,
    Category.GRID,
    Category.SHAPES,
)

# Axis range inputs shown side by side by the host; generation treats them
# independently.
AXIS_RANGE_PAIRS: dict[str, str] = {"xmin": "xmax", "ymin": "ymax"}

DOCUMENT_SETUP = "documentSetup"
DOCUMENT_CLOSE = "documentClose"
FUNCTIONS = "functions"


# ===========================================================================
# Data-classes
# ===========================================================================

@dataclass(frozen=True, slots=True)
class SettingDescriptor:
    id: str
    name: str
    description: str
    category: Category
    type: SettingType
    default: Any
    render: FragmentRenderer = field(repr=False, compare=False)
    min: Optional[float] = None
    max: Optional[float] = None
    step: Optional[float] = None
    options: Optional[tuple[str, ...]] = None
    visible_when: Optional[str] = None   # id of the toggle gating this fragment

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Setting id must be non-empty")
        if not callable(self.render):
            raise ValueError(f"{self.id}: render must be callable")
        if self.type is SettingType.SLIDER:
            if self.min is None or self.max is None or self.step is None:
                raise ValueError(f"{self.id}: sliders need min, max and step")
            if self.min >= self.max:
                raise ValueError(f"{self.id}: min ({self.min}) must be < max ({self.max})")
            if self.step <= 0:
                raise ValueError(f"{self.id}: step must be positive, got {self.step}")
            if not (self.min <= self.default <= self.max):
                raise ValueError(f"{self.id}: default {self.default} outside [{self.min}, {self.max}]")
        if self.type is SettingType.DROPDOWN:
            if not self.options:
                raise ValueError(f"{self.id}: dropdowns need options")
            if self.default not in self.options:
                raise ValueError(f"{self.id}: default {self.default!r} not among options")

    def fragment(self, value: Any) -> str:
        return self.render(value)


# ===========================================================================
# Fragment renderers
# Each takes only the setting's value.
# ===========================================================================

def _empty(value: Any) -> str:
    return ""


def _document_setup(value: Any) -> str:
    if value:
        return (
            "\n\\usepackage{pgfplots}\n\\pgfplotsset{compat=1.16}\n"
            "\\begin{document}\n\\begin{tikzpicture}\n \n\\begin{axis}["
        )
    return "\n\\begin{document}\n\\begin{tikzpicture}\n "


def _document_close(value: Any) -> str:
    return "\n\\end{axis}\\end{tikzpicture}\\end{document}" if value else ""


def _option(key: str, unit: str = "") -> FragmentRenderer:
    def render(value: Any) -> str:
        return f"\n  {key}={{{value}{unit}}},"
    return render


def _assignment(key: str) -> FragmentRenderer:
    def render(value: Any) -> str:
        return f"\n  {key}={value},"
    return render


def _show_axis_label(value: Any) -> str:
    return "\n" if value else ""


def _large_grid(value: Any) -> str:
    return "\n   grid=major," if value else "\n"


def _small_grid(value: Any) -> str:
    return "\n grid=both," if value else ""


def _axis_allaround(value: Any) -> str:
    # Closes the axis option block either way
    return "\n]" if value else " \n  axis lines = middle,\n]"


# ===========================================================================
# Registry
# ===========================================================================

def _descriptor(id: str, name: str, description: str, category: Category,
                type: SettingType, default: Any, render: FragmentRenderer,
                **extra: Any) -> SettingDescriptor:
    return SettingDescriptor(id=id, name=name, description=description, category=category,
                             type=type, default=default, render=render, **extra)


def _build_registry(descriptors: Iterable[SettingDescriptor]) -> tuple[SettingDescriptor, ...]:
    registry = tuple(descriptors)
    seen: set[str] = set()
    for descriptor in registry:
        if descriptor.id in seen:
            raise ValueError(f"Duplicate setting id {descriptor.id!r}")
        seen.add(descriptor.id)
    for descriptor in registry:
        if descriptor.visible_when is not None and descriptor.visible_when not in seen:
            raise ValueError(f"{descriptor.id}: unknown gating setting {descriptor.visible_when!r}")
    return registry


TIKZ_SETTINGS: tuple[SettingDescriptor, ...] = _build_registry((
    _descriptor("dimension", "3D", "Whether the graph is in 2D or 3D",
                Category.BASIC, SettingType.TOGGLE, False, _empty),
    _descriptor(DOCUMENT_SETUP, "Use pgfplots", "Whether to include the pgfplots package",
                Category.BASIC, SettingType.TOGGLE, True, _document_setup),
    _descriptor("title", "Title", "Name displayed above graph",
                Category.BASIC, SettingType.TEXT, "My graph: \\(\\sum\\)", _option("title")),
    _descriptor("size_x_cm", "Display size width", "The width of the final image in cm.",
                Category.BASIC, SettingType.SLIDER, 10, _option("width", "cm"),
                min=1, max=20, step=1),
    _descriptor("size_y_cm", "Display size height", "The height of the final image in cm.",
                Category.BASIC, SettingType.SLIDER, 10, _option("height", "cm"),
                min=1, max=20, step=1),
    _descriptor("show_axis_label", "Show axis labels", "Whether to show or hide axis labels",
                Category.AXIS, SettingType.TOGGLE, True, _show_axis_label),
    _descriptor("axis_label_x", "X-Axis Label", "Name displayed for x-axis",
                Category.AXIS, SettingType.TEXT, "x", _option("xlabel"),
                visible_when="show_axis_label"),
    _descriptor("axis_label_y", "Y-Axis Label", "Name displayed for y-axis",
                Category.AXIS, SettingType.TEXT, "y", _option("ylabel"),
                visible_when="show_axis_label"),
    _descriptor(DOCUMENT_CLOSE, "Document Close", "Include document closing",
                Category.BASIC, SettingType.TOGGLE, True, _document_close),
    _descriptor("showAxis", "Show Axes", "Display coordinate axes",
                Category.AXIS, SettingType.TOGGLE, True, _empty),
    _descriptor("showLargeGrid", "Show large grid", "Display large coordinate grid",
                Category.GRID, SettingType.TOGGLE, False, _large_grid),
    _descriptor("showSmallGrid", "Show small grid", "Display small coordinate grid",
                Category.GRID, SettingType.TOGGLE, False, _small_grid),
    _descriptor("gridSize", "Grid Size", "Size of the grid",
                Category.GRID, SettingType.SLIDER, 5, _assignment("minor tick num"),
                min=1, max=10, step=1, visible_when="showSmallGrid"),
    _descriptor("xmin", "X-Axis Min", "Minimum value for x-axis",
                Category.AXIS, SettingType.TEXT, "-0.5", _assignment("xmin")),
    _descriptor("xmax", "X-Axis Max", "Maximum value for x-axis",
                Category.AXIS, SettingType.TEXT, "10", _assignment("xmax")),
    _descriptor("ymin", "Y-Axis Min", "Minimum value for y-axis",
                Category.AXIS, SettingType.TEXT, "-0.5", _assignment("ymin")),
    _descriptor("ymax", "Y-Axis Max", "Maximum value for y-axis",
                Category.AXIS, SettingType.TEXT, "5", _assignment("ymax")),
    _descriptor("axis_allaround", "Axis all around", "Whether the axis goes all around the graph",
                Category.AXIS, SettingType.TOGGLE, True, _axis_allaround),
    _descriptor(FUNCTIONS, "Functions", "Add mathematical functions to plot",
                Category.FUNCTION, SettingType.TEXT, (), render_functions),
))

# Pure value -> fragment table keyed by setting id.
FRAGMENT_RENDERERS: dict[str, FragmentRenderer] = {d.id: d.render for d in TIKZ_SETTINGS}

_BY_ID: dict[str, SettingDescriptor] = {d.id: d for d in TIKZ_SETTINGS}


def get_descriptor(setting_id: str) -> SettingDescriptor:
    try:
        return _BY_ID[setting_id]
    except KeyError:
        raise UnknownSetting(f"Unknown setting {setting_id!r}") from None


def descriptors_by_category(
    registry: Sequence[SettingDescriptor] = TIKZ_SETTINGS,
) -> dict[Category, list[SettingDescriptor]]:
    """Group descriptors by category, keeping registry order inside each group."""
    groups: dict[Category, list[SettingDescriptor]] = {}
    for descriptor in registry:
        groups.setdefault(descriptor.category, []).append(descriptor)
    return groups
