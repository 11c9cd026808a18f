"""Complex-valued functions paired with their display names."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Union

VARIABLE_NAME = "z"
ARGUMENT_PLACEHOLDER = "#"

Mapping = Callable[[complex], complex]


@dataclass(frozen=True)
class FunctionName:
    """Display name template with a single argument placeholder.

    ``FunctionName("sin #").compose(FunctionName("exp #"))`` is ``sin exp #``.
    """

    pattern: str = ARGUMENT_PLACEHOLDER

    def __post_init__(self) -> None:
        if ARGUMENT_PLACEHOLDER not in self.pattern:
            raise ValueError(
                f'Name pattern should contain "{ARGUMENT_PLACEHOLDER}" '
                "that is a placeholder of argument"
            )

    @property
    def value(self) -> str:
        return self.pattern.replace(ARGUMENT_PLACEHOLDER, VARIABLE_NAME)

    def compose(self, inner: "FunctionName") -> "FunctionName":
        """Return the name of ``self(inner)``."""

        return FunctionName(self.pattern.replace(ARGUMENT_PLACEHOLDER, inner.pattern))

    def combine(self, operator_name: str, other: "FunctionName") -> "FunctionName":
        """Return the name of the infix expression ``self <op> other``."""

        return FunctionName(f"({self.pattern}{operator_name}{other.pattern})")

    def __str__(self) -> str:
        return self.value


NameLike = Union[str, FunctionName]


def _as_name(name: NameLike) -> FunctionName:
    return name if isinstance(name, FunctionName) else FunctionName(name)


@dataclass(frozen=True)
class Function:
    """A named total mapping of the complex plane.

    Calling a function evaluates it on a complex scalar, or elementwise on a
    numpy array of complex values when the mapping is built from numpy
    ufuncs (as the parser does).
    """

    name: FunctionName
    mapping: Mapping

    def __call__(self, value):
        return self.mapping(value)

    @classmethod
    def identity(cls) -> "Function":
        return IDENTITY

    def right_compose(self, name: NameLike | Function, func: Mapping | None = None) -> "Function":
        """Return ``func(self)``: apply ``func`` after the current function."""

        if isinstance(name, Function):
            name, func = name.name, name.mapping
        if func is None:
            raise TypeError("right_compose() needs a mapping or a Function")
        inner = self.mapping
        return Function(_as_name(name).compose(self.name), lambda z: func(inner(z)))

    def left_compose(self, name: NameLike | Function, func: Mapping | None = None) -> "Function":
        """Return ``self(func)``: apply the current function after ``func``."""

        if isinstance(name, Function):
            name, func = name.name, name.mapping
        if func is None:
            raise TypeError("left_compose() needs a mapping or a Function")
        outer = self.mapping
        return Function(self.name.compose(_as_name(name)), lambda z: outer(func(z)))

    def combine(
        self,
        operator_name: str,
        operation: Callable[[complex, complex], complex],
        other: "Function",
    ) -> "Function":
        """Return the pointwise ``self <op> other``."""

        left, right = self.mapping, other.mapping
        return Function(
            self.name.combine(operator_name, other.name),
            lambda z: operation(left(z), right(z)),
        )

    @property
    def display_name(self) -> str:
        return self.name.value

    def __str__(self) -> str:
        return self.display_name


IDENTITY = Function(FunctionName(), lambda z: z)
