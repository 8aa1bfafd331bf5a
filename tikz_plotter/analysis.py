"""
Numerical analysis of plot expressions: domains, derivatives, tangents, extrema.

All derivative estimates use a forward difference with the fixed step
``config.DERIVATIVE_STEP`` (1e-4). That is a known first-order
approximation; the step and scheme are part of the reproducible output and
are kept as they are.

Extrema come from a zero-crossing scan of the derivative over
``config.EXTREMA_SUBDIVISIONS`` uniform subdivisions. It is a heuristic:
there is no refinement step and no deduplication, so extrema narrower than
one subdivision can be missed and near-flat regions can be reported twice.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Union

import numpy as np

from . import config
from .errors import EvaluationError, InvalidDomain, InvalidTangentPoint
from .expression import CompiledExpression, FloatArray, compile_expression

logger = logging.getLogger(__name__)

ExpressionLike = Union[str, CompiledExpression]
DomainLike = Union[str, tuple[float, float]]


# ===========================================================================
# Data-classes
# ===========================================================================

class ExtremumKind(str, Enum):
    MINIMUM = "minimum"
    MAXIMUM = "maximum"


@dataclass(frozen=True, slots=True)
class ExtremumPoint:
    x: float
    y: float
    kind: ExtremumKind

    @property
    def label_anchor(self) -> str:
        return "above" if self.kind is ExtremumKind.MAXIMUM else "below"

    @property
    def label_y(self) -> float:
        """y of the label node: one unit above a maximum, below a minimum."""
        offset = config.EXTREMA_LABEL_OFFSET
        return self.y + offset if self.kind is ExtremumKind.MAXIMUM else self.y - offset


# ===========================================================================
# Parsing
# ===========================================================================

def parse_domain(domain: str) -> tuple[float, float]:
    """Parse ``"min:max"`` into a pair of floats with ``min < max``."""
    if not isinstance(domain, str):
        raise InvalidDomain(f"Domain must be a string, got {type(domain).__name__}")
    parts = domain.split(":")
    if len(parts) != 2:
        raise InvalidDomain(f"Domain {domain!r} must have the form 'min:max'")
    try:
        lo, hi = float(parts[0]), float(parts[1])
    except ValueError:
        raise InvalidDomain(f"Domain {domain!r} has a non-numeric bound") from None
    if not (np.isfinite(lo) and np.isfinite(hi)):
        raise InvalidDomain(f"Domain {domain!r} has a non-finite bound")
    if lo >= hi:
        raise InvalidDomain(f"Domain {domain!r} needs min < max")
    return lo, hi


def _as_bounds(domain: DomainLike) -> tuple[float, float]:
    if isinstance(domain, str):
        return parse_domain(domain)
    lo, hi = domain
    return float(lo), float(hi)


def parse_tangent_point(point: str, domain: DomainLike) -> float:
    """Parse *point* and check it lies in the closed domain interval."""
    lo, hi = _as_bounds(domain)
    text = point.strip() if isinstance(point, str) else point
    if text is None or text == "":
        raise InvalidTangentPoint("Tangent point is empty")
    try:
        x = float(text)
    except (TypeError, ValueError):
        raise InvalidTangentPoint(f"Tangent point {point!r} is not a number") from None
    if not np.isfinite(x):
        raise InvalidTangentPoint(f"Tangent point {point!r} is not finite")
    if x < lo or x > hi:
        raise InvalidTangentPoint(
            f"Tangent point {x:g} lies outside the domain [{lo:g}, {hi:g}]"
        )
    return x


# ===========================================================================
# Derivatives and tangents
# ===========================================================================

def derivative(expression: ExpressionLike, x: float) -> float:
    """Forward-difference estimate ``(f(x+h) - f(x)) / h`` with ``h = 1e-4``."""
    f = compile_expression(expression)
    h = config.DERIVATIVE_STEP
    slope = (f(x + h) - f(x)) / h
    if not np.isfinite(slope):
        raise EvaluationError(f"Derivative of {f.source!r} is not finite at x={x!r}", x=x)
    return slope


def _derivative_array(f: CompiledExpression, xs: FloatArray) -> FloatArray:
    h = config.DERIVATIVE_STEP
    with np.errstate(all="ignore"):
        slopes = (f.evaluate(xs + h) - f.evaluate(xs)) / h
    if not np.all(np.isfinite(slopes)):
        raise EvaluationError(f"Derivative of {f.source!r} is not finite on the scan grid")
    return slopes


def tangent_coefficients(expression: ExpressionLike, x0: float) -> tuple[float, float]:
    """Return ``(slope, intercept)`` of the tangent at *x0*."""
    f = compile_expression(expression)
    y0 = f(x0)
    slope = derivative(f, x0)
    return slope, y0 - slope * x0


def tangent_line(expression: ExpressionLike, x0: float) -> str:
    """Tangent at *x0* as the linear expression ``"<slope>*x + <intercept>"``."""
    slope, intercept = tangent_coefficients(expression, x0)
    return f"{format_number(slope)}*x + {format_number(intercept)}"


# ===========================================================================
# Extrema
# ===========================================================================

def _scan_points(lo: float, hi: float, step: float) -> FloatArray:
    # Repeated addition, not lo + i*step: the accumulated rounding is part
    # of the reproducible sample positions.
    points: list[float] = []
    x = lo + step
    while x < hi - step:
        points.append(x)
        advanced = x + step
        # step below half an ulp of x: the sum rounds back to x
        if advanced == x:
            break
        x = advanced
    return np.asarray(points, dtype=np.float64)


def find_extrema(expression: ExpressionLike, domain: DomainLike) -> list[ExtremumPoint]:
    """Scan *domain* for derivative sign changes.

    Each sample point ``x`` gets derivative estimates at ``x - step``, ``x``
    and ``x + step``; a strict sign change between the first two marks an
    extremum, classified by the sign of a second finite difference
    (positive means minimum). Coordinates are rounded to three decimals.

    Raises :class:`EvaluationError` if the expression is not finite anywhere
    the scan touches.
    """
    f = compile_expression(expression)
    lo, hi = _as_bounds(domain)
    step = (hi - lo) / config.EXTREMA_SUBDIVISIONS
    xs = _scan_points(lo, hi, step)
    if xs.size == 0:
        return []

    d_prev = _derivative_array(f, xs - step)
    d_here = _derivative_array(f, xs)
    # Only checked for finiteness; classification uses d_prev and d_here
    _derivative_array(f, xs + step)

    crossing = ((d_prev < 0) & (d_here > 0)) | ((d_prev > 0) & (d_here < 0))

    h = config.DERIVATIVE_STEP
    decimals = config.EXTREMA_DECIMALS
    extrema: list[ExtremumPoint] = []
    for sample in xs[crossing]:
        x = float(sample)
        second = (derivative(f, x + h) - derivative(f, x)) / h
        kind = ExtremumKind.MINIMUM if second > 0 else ExtremumKind.MAXIMUM
        extrema.append(ExtremumPoint(round(x, decimals), round(f(x), decimals), kind))

    logger.debug("Found %d extrema for %r over [%g, %g]", len(extrema), f.source, lo, hi)
    return extrema


# ===========================================================================
# Number formatting
# ===========================================================================

def format_number(value: float) -> str:
    """Render *value* for markup: ``4`` not ``4.0``, ``1e-7`` not ``1e-07``.

    Non-finite values raise :class:`EvaluationError`.
    """
    value = float(value)
    if not np.isfinite(value):
        raise EvaluationError(f"Cannot emit non-finite number {value!r}")
    if value == 0:
        return "0"
    if value.is_integer() and abs(value) < 1e16:
        return str(int(value))
    mantissa, sep, exponent = repr(value).partition("e")
    if not sep:
        return mantissa
    return f"{mantissa}e{int(exponent):+d}".replace("e+", "e")
