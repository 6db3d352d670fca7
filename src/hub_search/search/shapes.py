"""Expression shapes: full binary trees with unlabeled leaves and operator slots.

Leaves are numbered left to right. Operator slots are numbered by infix position,
so slot ``j`` sits between leaf ``j`` and leaf ``j + 1`` once rendered. A shape is
compiled once into a nested tuple "program" that carries those indices, which the
evaluator walks for every assignment.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property, lru_cache
from typing import Union


@dataclass(frozen=True, slots=True)
class Leaf:
    @property
    def size(self) -> int:
        return 1

    def __str__(self) -> str:
        return "x"


@dataclass(frozen=True)
class Join:
    left: "Shape"
    right: "Shape"

    @cached_property
    def size(self) -> int:
        return self.left.size + self.right.size

    def __str__(self) -> str:
        return f"({self.left}o{self.right})"


Shape = Union[Leaf, Join]

# Program node: a leaf index, or (operator slot, left program, right program).
Program = Union[int, tuple]

LEAF = Leaf()


def compile_shape(shape: Shape) -> Program:
    """Bind leaf indices and operator slots onto *shape*."""

    def walk(node: Shape, offset: int) -> Program:
        if isinstance(node, Leaf):
            return offset
        split = offset + node.left.size
        return (split - 1, walk(node.left, offset), walk(node.right, split))

    return walk(shape, 0)


@lru_cache(maxsize=None)
def shapes_for_size(size: int) -> tuple[Shape, ...]:
    """All distinct shapes with *size* leaves, in split order.

    Shape ``k`` is built from every split ``1 <= i < k`` combining each left shape
    of size ``i`` with each right shape of size ``k - i``.
    """
    if size < 1:
        raise ValueError(f"Shape size must be >= 1, got {size}")
    if size == 1:
        return (LEAF,)
    out: list[Shape] = []
    for split in range(1, size):
        for left in shapes_for_size(split):
            for right in shapes_for_size(size - split):
                out.append(Join(left, right))
    return tuple(out)


@lru_cache(maxsize=None)
def programs_for_size(size: int) -> tuple[Program, ...]:
    return tuple(compile_shape(shape) for shape in shapes_for_size(size))


class ShapeEnumerator:
    """Shapes and compiled programs per size, in split order."""

    def shapes(self, size: int) -> tuple[Shape, ...]:
        return shapes_for_size(int(size))

    def programs(self, size: int) -> tuple[Program, ...]:
        return programs_for_size(int(size))

    def count(self, size: int) -> int:
        return len(shapes_for_size(int(size)))
