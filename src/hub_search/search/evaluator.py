from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from hub_search.search.operators import Operator
from hub_search.search.shapes import Program, Shape, compile_shape

DEFAULT_INT_BITS = 32


class RejectReason(str, Enum):
    DIVISION_FAILURE = "division_failure"
    OVERFLOW = "overflow"
    NON_POSITIVE = "non_positive"


@dataclass(frozen=True, slots=True)
class EvalOutcome:
    value: int | None = None
    reason: RejectReason | None = None

    @property
    def accepted(self) -> bool:
        return self.reason is None

    @classmethod
    def ok(cls, value: int) -> "EvalOutcome":
        return cls(value=value)

    @classmethod
    def invalid(cls, reason: RejectReason) -> "EvalOutcome":
        return cls(reason=reason)


class Evaluator:
    """Integer evaluation of assigned shapes under the hub's rules.

    Every intermediate result must fit a signed ``int_bits`` integer, division must
    be exact, and only a positive final value is accepted.
    """

    __slots__ = ("int_bits", "min_value", "max_value")

    def __init__(self, int_bits: int = DEFAULT_INT_BITS) -> None:
        if int_bits < 2:
            raise ValueError(f"int_bits must be >= 2, got {int_bits}")
        self.int_bits = int(int_bits)
        self.max_value = (1 << (self.int_bits - 1)) - 1
        self.min_value = -(1 << (self.int_bits - 1))

    def evaluate(
        self,
        program: Program | Shape,
        leaves: Sequence[int],
        operators: Sequence[Operator],
    ) -> EvalOutcome:
        if not isinstance(program, (int, tuple)):
            program = compile_shape(program)
        result = self._eval(program, leaves, operators)
        if isinstance(result, RejectReason):
            return EvalOutcome.invalid(result)
        if result <= 0:
            return EvalOutcome.invalid(RejectReason.NON_POSITIVE)
        return EvalOutcome.ok(result)

    def _eval(self, node: Program, leaves: Sequence[int], operators: Sequence[Operator]) -> int | RejectReason:
        if type(node) is int:
            value = leaves[node]
            if value > self.max_value or value < self.min_value:
                return RejectReason.OVERFLOW
            return value
        slot, left, right = node
        lhs = self._eval(left, leaves, operators)
        if isinstance(lhs, RejectReason):
            return lhs
        rhs = self._eval(right, leaves, operators)
        if isinstance(rhs, RejectReason):
            return rhs
        out = operators[slot].apply(lhs, rhs)
        if out is None:
            return RejectReason.DIVISION_FAILURE
        if out > self.max_value or out < self.min_value:
            return RejectReason.OVERFLOW
        return out


def render(program: Program | Shape, leaves: Sequence[int], operators: Sequence[Operator]) -> str:
    """Fully parenthesised infix form, e.g. ``((2*6)-1)``."""
    if not isinstance(program, (int, tuple)):
        program = compile_shape(program)
    if type(program) is int:
        return str(leaves[program])
    slot, left, right = program
    return f"({render(left, leaves, operators)}{operators[slot].symbol}{render(right, leaves, operators)})"
