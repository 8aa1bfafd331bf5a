from __future__ import annotations


class TikzPlotError(Exception):
    """Base error for expression, analysis and settings failures."""


class InvalidExpression(TikzPlotError):
    """Expression text could not be compiled into a callable."""

    def __init__(self, message: str, *, expression: str | None = None, position: int | None = None):
        super().__init__(message)
        self.expression = expression
        self.position = position


class EvaluationError(TikzPlotError):
    """Evaluation produced a non-finite or exceptional result."""

    def __init__(self, message: str, *, x: float | None = None):
        super().__init__(message)
        self.x = x


class InvalidDomain(TikzPlotError, ValueError):
    """Domain text is not ``min:max`` with ``min < max``."""


class InvalidTangentPoint(TikzPlotError, ValueError):
    """Tangent point is not numeric or lies outside the domain."""


class UnknownSetting(TikzPlotError, KeyError):
    """Setting id is not part of the registry."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""
