"""Lazy enumeration of leaf values and operator choices for one expression size.

The combinations form a mixed-radix number: ``size - 1`` operator digits (base
``len(operators)``) above ``size`` leaf digits (base ``max_number``). The first
leaf varies fastest, then the next leaf, and so on; the first operator slot is the
fastest of the operator digits. Index ``i`` maps to one combination, so a range of
indices can be handed to a worker without walking the prefix.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from hub_search.search.operators import Operator, OperatorSet

Assignment = tuple[tuple[int, ...], tuple[Operator, ...]]


@dataclass(frozen=True)
class AssignmentSpace:
    size: int
    max_number: int
    operators: OperatorSet

    def __post_init__(self) -> None:
        if self.size < 1:
            raise ValueError(f"size must be >= 1, got {self.size}")
        if self.max_number < 1:
            raise ValueError(f"max_number must be >= 1, got {self.max_number}")
        if not self.operators:
            raise ValueError("operators must not be empty")

    @property
    def leaf_count(self) -> int:
        return self.max_number**self.size

    @property
    def operator_count(self) -> int:
        return len(self.operators) ** (self.size - 1)

    @property
    def count(self) -> int:
        return self.leaf_count * self.operator_count

    def __len__(self) -> int:
        return self.count

    def __iter__(self) -> Iterator[Assignment]:
        return self.iter_range(0, self.count)

    def iter_range(self, start: int, stop: int) -> Iterator[Assignment]:
        """Yield combinations with linear index in ``[start, stop)``."""
        total = self.count
        start = max(0, int(start))
        stop = min(total, int(stop))
        if start >= stop:
            return
        radices = self._radices()
        digits = _decode(start, radices)
        n_ops = self.size - 1
        ops = self.operators
        for _ in range(stop - start):
            # digits are stored most significant first
            yield (
                tuple(d + 1 for d in reversed(digits[n_ops:])),
                tuple(ops[d] for d in reversed(digits[:n_ops])),
            )
            _increment(digits, radices)

    def decode(self, index: int) -> Assignment:
        if not 0 <= index < self.count:
            raise IndexError(f"assignment index out of range: {index}")
        return next(self.iter_range(index, index + 1))

    def _radices(self) -> list[int]:
        return [len(self.operators)] * (self.size - 1) + [self.max_number] * self.size


def _decode(index: int, radices: list[int]) -> list[int]:
    digits = [0] * len(radices)
    for pos in range(len(radices) - 1, -1, -1):
        index, digits[pos] = divmod(index, radices[pos])
    return digits


def _increment(digits: list[int], radices: list[int]) -> None:
    pos = len(digits) - 1
    while pos >= 0:
        digits[pos] += 1
        if digits[pos] < radices[pos]:
            return
        digits[pos] = 0
        pos -= 1


class AssignmentEnumerator:
    """Builds restartable assignment spaces for a fixed number range and operator set."""

    def __init__(self, max_number: int, operators: OperatorSet) -> None:
        if max_number < 1:
            raise ValueError(f"max_number must be >= 1, got {max_number}")
        self.max_number = int(max_number)
        self.operators = operators

    def space(self, size: int) -> AssignmentSpace:
        return AssignmentSpace(size=int(size), max_number=self.max_number, operators=self.operators)

    def count(self, size: int) -> int:
        return self.space(size).count
