"""Binary operators available to the search and their integer semantics.

``Operator.apply`` returns ``None`` when an operation has no whole-number result
(division by zero or a non-exact quotient). Range checks against the configured
integer width are the evaluator's job.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Sequence

DEFAULT_OPERATIONS = "+,-,*,/"


class Operator(Enum):
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"

    def __str__(self) -> str:
        return self.value

    @property
    def symbol(self) -> str:
        return self.value

    def apply(self, lhs: int, rhs: int) -> int | None:
        if self is Operator.ADD:
            return lhs + rhs
        if self is Operator.SUB:
            return lhs - rhs
        if self is Operator.MUL:
            return lhs * rhs
        if rhs == 0 or lhs % rhs != 0:
            return None
        return lhs // rhs


_BY_SYMBOL: dict[str, Operator] = {op.value: op for op in Operator}


def parse_operator(symbol: str) -> Operator:
    try:
        return _BY_SYMBOL[symbol.strip()]
    except KeyError as exc:
        allowed = ",".join(_BY_SYMBOL)
        raise ValueError(f"Unrecognised operation {symbol!r}, allowed=[{allowed}]") from exc


class OperatorSet(tuple):
    """Ordered, duplicate-free operator choices; order fixes enumeration order."""

    __slots__ = ()

    def __new__(cls, operators: Iterable[Operator]) -> "OperatorSet":
        ops = tuple(operators)
        if not ops:
            raise ValueError("Operator set must not be empty")
        seen: set[Operator] = set()
        for op in ops:
            if not isinstance(op, Operator):
                raise ValueError(f"Not an operator: {op!r}")
            if op in seen:
                raise ValueError(f"Duplicate operation: {op.symbol}")
            seen.add(op)
        return super().__new__(cls, ops)

    @classmethod
    def parse(cls, text: str | Sequence[str] | None) -> "OperatorSet":
        """Parse ``"+,*"`` (or a list of symbols); ``None`` means all four."""
        if text is None:
            text = DEFAULT_OPERATIONS
        if isinstance(text, str):
            parts = text.split(",")
        else:
            parts = list(text)
        if not parts or any(not str(p).strip() for p in parts):
            raise ValueError(f"Malformed operation list: {text!r}")
        return cls(parse_operator(str(p)) for p in parts)

    @property
    def symbols(self) -> tuple[str, ...]:
        return tuple(op.symbol for op in self)

    def __str__(self) -> str:
        return ",".join(self.symbols)

    def __repr__(self) -> str:
        return f"OperatorSet({str(self)!r})"

    def __reduce__(self):
        return (OperatorSet, (tuple(self),))
