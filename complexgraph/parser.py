"""Recursive-descent parser for complex function descriptions.

The grammar, outermost layer first::

    expression := term (("+" | "-") term)*
    term       := factor (("*" | "/") factor)*
    factor     := part ("^" part)*
    part       := [unary] atom
    atom       := "z" | literal | "(" expression ")" | part

``unary`` is one of ``exp ln sin cos tan -`` and binds tighter than ``^``,
so ``ln z^2`` is ``(ln z)^2``. All binary operators are left-associative.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Iterator, Optional, Union

import numpy as np

from .function import Function, FunctionName
from .literal import format_complex, try_parse_complex

ARGUMENT = "z"

ADD = "+"
SUB = "-"
MUL = "*"
DIV = "/"
POW = "^"
OPEN = "("
CLOSE = ")"

BinaryOperation = Callable[[complex, complex], complex]

BINARY_OPERATIONS: dict[str, BinaryOperation] = {
    ADD: np.add,
    SUB: np.subtract,
    MUL: np.multiply,
    DIV: np.true_divide,
    POW: np.power,
}

UNARY_FUNCTIONS: dict[str, Function] = {
    SUB: Function(FunctionName("-#"), np.negative),
    "exp": Function(FunctionName("exp #"), np.exp),
    "ln": Function(FunctionName("ln #"), np.log),
    "sin": Function(FunctionName("sin #"), np.sin),
    "cos": Function(FunctionName("cos #"), np.cos),
    "tan": Function(FunctionName("tan #"), np.tan),
}

# A {...} pair literal is kept whole; + and - right after a mantissa's
# exponent marker belong to the number.
_SPLIT_PATTERN = re.compile(r"(\{[^}]*\})|([*()^/]|(?<![0-9.][Ee])[+\-])")


class ExpressionError(ValueError):
    """Raised when a function description is not a valid expression."""


@dataclass(frozen=True)
class Constant:
    value: complex


@dataclass(frozen=True)
class Mapped:
    function: Function


Operand = Union[Constant, Mapped]


def tokenize(text: str) -> list[str]:
    """Split a description into operators, parentheses, names and literals."""

    tokens: list[str] = []
    for chunk in text.split():
        tokens.extend(part for part in _SPLIT_PATTERN.split(chunk) if part)
    return tokens


def _fold(operation: Callable, *values: complex) -> complex:
    with np.errstate(all="ignore"):
        return complex(operation(*values))


def apply_binary(left: Operand, operator_name: str, right: Operand) -> Operand:
    """Combine two operands of a binary operator."""

    operation = BINARY_OPERATIONS[operator_name]
    match left, right:
        case Mapped(f), Mapped(g):
            return Mapped(f.combine(operator_name, operation, g))
        case Mapped(f), Constant(c):
            name = f"(#{operator_name}{format_complex(c)})"
            return Mapped(f.right_compose(name, lambda w: operation(w, c)))
        case Constant(c), Mapped(f):
            name = f"({format_complex(c)}{operator_name}#)"
            return Mapped(f.right_compose(name, lambda w: operation(c, w)))
        case Constant(a), Constant(b):
            return Constant(_fold(operation, a, b))
    raise ExpressionError(f"Invalid operands of {operator_name!r}")


def apply_unary(operator_name: str, operand: Operand) -> Operand:
    """Apply a unary function or negation to an operand."""

    unary = UNARY_FUNCTIONS[operator_name]
    match operand:
        case Mapped(f):
            return Mapped(f.right_compose(unary))
        case Constant(c):
            return Constant(_fold(unary.mapping, c))
    raise ExpressionError(f"Invalid operand of {operator_name!r}")


class _Parser:
    """Single-use parsing state over a token stream."""

    def __init__(self, tokens: list[str]) -> None:
        self._tokens: Iterator[str] = iter(tokens)
        self.current: Optional[str] = None
        self.advance()

    def advance(self) -> None:
        self.current = next(self._tokens, None)

    def expression(self) -> Optional[Operand]:
        return self._binary(self.term, (ADD, SUB), "add/subtract")

    def term(self) -> Optional[Operand]:
        return self._binary(self.factor, (MUL, DIV), "multiply/divide")

    def factor(self) -> Optional[Operand]:
        return self._binary(self.part, (POW,), "power")

    def _binary(
        self,
        operand: Callable[[], Optional[Operand]],
        operators: tuple[str, ...],
        description: str,
    ) -> Optional[Operand]:
        accumulated = operand()
        if accumulated is None:
            return None

        while self.current in operators:
            operator_name = self.current
            self.advance()
            left, accumulated = accumulated, None
            right = operand()
            if right is None:
                raise ExpressionError(f"Expected right operand of {description} operation")
            accumulated = apply_binary(left, operator_name, right)
        return accumulated

    def part(self) -> Optional[Operand]:
        unary = None
        if self.current in UNARY_FUNCTIONS:
            unary = self.current
            self.advance()

        operand = self.atom()
        if operand is None:
            if unary is not None:
                raise ExpressionError(f"Expected operand of unary operation {unary!r}")
            return None

        if unary is not None:
            operand = apply_unary(unary, operand)
        return operand

    def atom(self) -> Optional[Operand]:
        token = self.current
        if token is None:
            return None

        if token == ARGUMENT:
            self.advance()
            return Mapped(Function.identity())

        number = try_parse_complex(token)
        if number is not None:
            self.advance()
            return Constant(number)

        if token == OPEN:
            self.advance()
            inner = self.expression()
            if inner is None:
                raise ExpressionError("Expected expression in parentheses")
            if self.current != CLOSE:
                raise ExpressionError("Expected closing parenthesis")
            self.advance()
            return inner

        if token in UNARY_FUNCTIONS:
            return self.part()

        return None


def parse_operand(text: str) -> Operand:
    """Parse ``text`` into a folded constant or a mapped function."""

    tokens = tokenize(text)
    if not tokens:
        raise ExpressionError("Empty function description")

    parser = _Parser(tokens)
    result = parser.expression()
    if result is None:
        raise ExpressionError(f"Unexpected token {parser.current!r}")
    if parser.current is not None:
        raise ExpressionError(f"Unexpected trailing input starting at {parser.current!r}")
    return result


def parse_function(text: str) -> Function:
    """Parse a function description such as ``"(sin z)^2i + cos(z * {3,0.1i})"``.

    A description that never mentions the argument is rejected.
    """

    match parse_operand(text):
        case Mapped(function):
            return function
        case Constant(value):
            raise ExpressionError(
                f"Description does not use the argument {ARGUMENT!r} "
                f"(it is the constant {format_complex(value)})"
            )
    raise ExpressionError(f"Wrong function description: {text!r}")
