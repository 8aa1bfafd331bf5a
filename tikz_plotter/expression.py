"""
Expression compiler for single-variable plot expressions.

Grammar (closed; nothing else is accepted)
------------------------------------------
    expression := term (('+' | '-') term)*
    term       := unary (('*' | '/') unary)*
    unary      := ('+' | '-') unary | power
    power      := primary (('^' | '**') unary)?
    primary    := NUMBER | NAME | NAME '(' expression ')' | '(' expression ')'

``^`` is exponentiation (``**`` is accepted as an alias), right associative
and tighter than unary minus, so ``-x^2`` is ``-(x^2)``.

Functions follow the pgfplots math engine because the same text is handed
to pgfplots for plotting: trigonometric functions take degrees, inverse
trigonometric functions return degrees, ``deg``/``rad`` convert, ``log``
is the natural logarithm.

Nesting is capped at ``config.EXPRESSION_MAX_DEPTH`` levels, counted both
while parsing and over the finished tree; deeper input is rejected as
:class:`InvalidExpression`.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Callable, Union

import numpy as np
from numpy.typing import NDArray

from . import config
from .errors import EvaluationError, InvalidExpression

# ---------------------------------------------------------------------------
# Type aliases
# ---------------------------------------------------------------------------

FloatArray = NDArray[np.floating[Any]]
Operand = Union[np.floating[Any], FloatArray]
UnaryFunction = Callable[[Operand], Operand]

VARIABLE_NAME = "x"

CONSTANTS: dict[str, float] = {
    "pi": float(np.pi),
    "e": float(np.e),
}

FUNCTIONS: dict[str, UnaryFunction] = {
    "sin": lambda v: np.sin(np.deg2rad(v)),
    "cos": lambda v: np.cos(np.deg2rad(v)),
    "tan": lambda v: np.tan(np.deg2rad(v)),
    "asin": lambda v: np.rad2deg(np.arcsin(v)),
    "acos": lambda v: np.rad2deg(np.arccos(v)),
    "atan": lambda v: np.rad2deg(np.arctan(v)),
    "deg": np.rad2deg,
    "rad": np.deg2rad,
    "sqrt": np.sqrt,
    "log": np.log,
    "ln": np.log,
    "exp": np.exp,
    "abs": np.abs,
}

_BINARY_OPS: dict[str, Callable[[Operand, Operand], Operand]] = {
    "+": np.add,
    "-": np.subtract,
    "*": np.multiply,
    "/": np.divide,
    "^": np.power,
}


# ===========================================================================
# Syntax tree
# ===========================================================================

class Node(ABC):

    @abstractmethod
    def evaluate(self, x: Operand) -> Operand:
        raise NotImplementedError

    @property
    def children(self) -> tuple[Node, ...]:
        return ()


@dataclass(frozen=True, slots=True)
class Number(Node):
    value: float

    def evaluate(self, x: Operand) -> Operand:
        return np.float64(self.value)


@dataclass(frozen=True, slots=True)
class Constant(Node):
    name: str

    def evaluate(self, x: Operand) -> Operand:
        return np.float64(CONSTANTS[self.name])


@dataclass(frozen=True, slots=True)
class Variable(Node):
    name: str = VARIABLE_NAME

    def evaluate(self, x: Operand) -> Operand:
        return x


@dataclass(frozen=True, slots=True)
class UnaryOp(Node):
    op: str
    operand: Node

    def evaluate(self, x: Operand) -> Operand:
        value = self.operand.evaluate(x)
        return np.negative(value) if self.op == "-" else value

    @property
    def children(self) -> tuple[Node, ...]:
        return (self.operand,)


@dataclass(frozen=True, slots=True)
class BinaryOp(Node):
    op: str
    left: Node
    right: Node

    def evaluate(self, x: Operand) -> Operand:
        return _BINARY_OPS[self.op](self.left.evaluate(x), self.right.evaluate(x))

    @property
    def children(self) -> tuple[Node, ...]:
        return (self.left, self.right)


@dataclass(frozen=True, slots=True)
class Call(Node):
    name: str
    argument: Node

    def evaluate(self, x: Operand) -> Operand:
        return FUNCTIONS[self.name](self.argument.evaluate(x))

    @property
    def children(self) -> tuple[Node, ...]:
        return (self.argument,)


# ===========================================================================
# Tokenizer
# ===========================================================================

@dataclass(frozen=True, slots=True)
class Token:
    kind: str      # number|name|op|lparen|rparen|end
    text: str
    position: int


_TOKEN_RE = re.compile(
    r"(?P<number>(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)"
    r"|(?P<name>[A-Za-z_][A-Za-z_0-9]*)"
    r"|(?P<op>\*\*|[-+*/^])"
    r"|(?P<lparen>\()"
    r"|(?P<rparen>\))"
)


def tokenize(text: str) -> list[Token]:
    tokens: list[Token] = []
    pos = 0
    while pos < len(text):
        if text[pos].isspace():
            pos += 1
            continue
        match = _TOKEN_RE.match(text, pos)
        if match is None:
            raise InvalidExpression(
                f"Unexpected character {text[pos]!r} at position {pos}",
                expression=text, position=pos,
            )
        kind = match.lastgroup or ""
        value = match.group()
        # '**' and '^' are the same operator
        tokens.append(Token(kind, "^" if value == "**" else value, pos))
        pos = match.end()
    tokens.append(Token("end", "", len(text)))
    return tokens


# ===========================================================================
# Parser
# ===========================================================================

def tree_depth(node: Node) -> int:
    """Number of levels in the tree under *node*, counted without recursion."""
    deepest = 0
    stack = [(node, 1)]
    while stack:
        current, depth = stack.pop()
        deepest = max(deepest, depth)
        stack.extend((child, depth + 1) for child in current.children)
    return deepest


class _Parser:

    def __init__(self, text: str) -> None:
        self._text = text
        self._tokens = tokenize(text)
        self._index = 0
        self._depth = 0

    def parse(self) -> Node:
        node = self._expression()
        token = self._peek()
        if token.kind != "end":
            raise self._error(f"Unexpected {token.text!r}", token)
        if tree_depth(node) > config.EXPRESSION_MAX_DEPTH:
            raise InvalidExpression(
                f"Expression is nested deeper than {config.EXPRESSION_MAX_DEPTH} levels",
                expression=self._text, position=0,
            )
        return node

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _peek(self) -> Token:
        return self._tokens[self._index]

    def _advance(self) -> Token:
        token = self._tokens[self._index]
        self._index += 1
        return token

    def _accept_op(self, *ops: str) -> Token | None:
        token = self._peek()
        if token.kind == "op" and token.text in ops:
            return self._advance()
        return None

    def _expect(self, kind: str, what: str) -> Token:
        token = self._peek()
        if token.kind != kind:
            found = "end of expression" if token.kind == "end" else repr(token.text)
            raise self._error(f"Expected {what}, found {found}", token)
        return self._advance()

    def _error(self, message: str, token: Token) -> InvalidExpression:
        return InvalidExpression(
            f"{message} at position {token.position}",
            expression=self._text, position=token.position,
        )

    # ------------------------------------------------------------------
    # Grammar rules
    # ------------------------------------------------------------------

    def _expression(self) -> Node:
        node = self._term()
        while (token := self._accept_op("+", "-")) is not None:
            node = BinaryOp(token.text, node, self._term())
        return node

    def _term(self) -> Node:
        node = self._unary()
        while (token := self._accept_op("*", "/")) is not None:
            node = BinaryOp(token.text, node, self._unary())
        return node

    def _unary(self) -> Node:
        # Every nested construct passes through here, so this bounds the recursion
        self._depth += 1
        if self._depth > config.EXPRESSION_MAX_DEPTH:
            raise self._error(
                f"Expression is nested deeper than {config.EXPRESSION_MAX_DEPTH} levels",
                self._peek(),
            )
        try:
            token = self._accept_op("+", "-")
            if token is not None:
                return UnaryOp(token.text, self._unary())
            return self._power()
        finally:
            self._depth -= 1

    def _power(self) -> Node:
        base = self._primary()
        if self._accept_op("^") is not None:
            return BinaryOp("^", base, self._unary())
        return base

    def _primary(self) -> Node:
        token = self._peek()
        if token.kind == "number":
            self._advance()
            return Number(float(token.text))
        if token.kind == "lparen":
            self._advance()
            node = self._expression()
            self._expect("rparen", "')'")
            return node
        if token.kind == "name":
            return self._name()
        found = "end of expression" if token.kind == "end" else repr(token.text)
        raise self._error(f"Expected a number, name or '(', found {found}", token)

    def _name(self) -> Node:
        token = self._advance()
        name = token.text
        if self._peek().kind == "lparen":
            if name not in FUNCTIONS:
                raise self._error(f"Unknown function {name!r}", token)
            self._advance()
            argument = self._expression()
            self._expect("rparen", "')'")
            return Call(name, argument)
        if name == VARIABLE_NAME:
            return Variable()
        if name in CONSTANTS:
            return Constant(name)
        if name in FUNCTIONS:
            raise self._error(f"Function {name!r} needs an argument", token)
        raise self._error(f"Unknown identifier {name!r}", token)


# ===========================================================================
# Compiled callable
# ===========================================================================

@dataclass(frozen=True, slots=True)
class CompiledExpression:
    """Callable form of an expression; evaluates scalars or numpy arrays.

    Any non-finite result raises :class:`EvaluationError` instead of
    leaking ``nan``/``inf`` into downstream coordinates.
    """

    source: str
    tree: Node

    def __call__(self, x: float) -> float:
        with np.errstate(all="ignore"):
            value = float(self.tree.evaluate(np.float64(x)))
        if not np.isfinite(value):
            raise EvaluationError(
                f"{self.source!r} is not finite at x={x!r}", x=float(x)
            )
        return value

    def evaluate(self, xs: FloatArray) -> FloatArray:
        xs = np.asarray(xs, dtype=np.float64)
        with np.errstate(all="ignore"):
            raw = np.asarray(self.tree.evaluate(xs), dtype=np.float64)
        values = np.array(np.broadcast_to(raw, xs.shape), dtype=np.float64)
        finite = np.isfinite(values)
        if not np.all(finite):
            bad_x = float(xs.flat[int(np.argmin(finite.ravel()))])
            raise EvaluationError(
                f"{self.source!r} is not finite at x={bad_x!r}", x=bad_x
            )
        return values


@lru_cache(maxsize=256)
def _compile_cached(text: str) -> CompiledExpression:
    stripped = text.strip()
    if not stripped:
        raise InvalidExpression("Expression is empty", expression=text, position=0)
    return CompiledExpression(stripped, _Parser(stripped).parse())


def compile_expression(text: Any) -> CompiledExpression:
    """Compile *text* into a :class:`CompiledExpression`.

    Raises :class:`InvalidExpression` for anything outside the grammar.
    """
    if isinstance(text, CompiledExpression):
        return text
    if not isinstance(text, str):
        raise InvalidExpression(
            f"Expression must be a string, got {type(text).__name__}"
        )
    return _compile_cached(text)
