from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator


@dataclass(frozen=True, slots=True)
class SolutionEntry:
    size: int
    representations: tuple[str, ...]


class SolutionStore:
    """Best known expressions per value.

    A strictly smaller size replaces the recorded list, an equal size appends in
    discovery order, a larger size is dropped. Textually distinct expressions are
    never deduplicated, so ``(11+1)`` and ``(1+11)`` are both kept.
    """

    __slots__ = ("_sizes", "_reprs")

    def __init__(self) -> None:
        self._sizes: dict[int, int] = {}
        self._reprs: dict[int, list[str]] = {}

    def record(self, value: int, size: int, representation: str) -> None:
        best = self._sizes.get(value)
        if best is None or size < best:
            self._sizes[value] = size
            self._reprs[value] = [representation]
        elif size == best:
            self._reprs[value].append(representation)

    def merge(self, other: "SolutionStore") -> None:
        """Fold *other* in; on equal sizes its list goes after ours.

        Merging worker stores in worker order therefore reproduces the order a
        single sequential pass would have recorded.
        """
        for value, size in other._sizes.items():
            best = self._sizes.get(value)
            if best is None or size < best:
                self._sizes[value] = size
                self._reprs[value] = list(other._reprs[value])
            elif size == best:
                self._reprs[value].extend(other._reprs[value])

    def get(self, value: int) -> SolutionEntry | None:
        size = self._sizes.get(value)
        if size is None:
            return None
        return SolutionEntry(size=size, representations=tuple(self._reprs[value]))

    def snapshot(self) -> dict[int, SolutionEntry]:
        return {
            value: SolutionEntry(size=self._sizes[value], representations=tuple(self._reprs[value]))
            for value in sorted(self._sizes)
        }

    def __len__(self) -> int:
        return len(self._sizes)

    def __contains__(self, value: object) -> bool:
        return value in self._sizes

    def __iter__(self) -> Iterator[int]:
        return iter(self._sizes)

    def __getstate__(self) -> tuple[dict[int, int], dict[int, list[str]]]:
        return self._sizes, self._reprs

    def __setstate__(self, state: tuple[dict[int, int], dict[int, list[str]]]) -> None:
        self._sizes, self._reprs = state
