"""Search driver: runs every size from 1 to ``max_size`` and owns the solution store.

Each size is cut into work units ``(start, stop)`` over its assignment index, and
every assignment is tried against each shape in turn, the order a plain nested
loop would visit them. Units are run in-process or on a process pool, each into a
private ``SolutionStore``, and merged back in unit order, so the table is
identical for any worker count. At most ``workers * IN_FLIGHT_PER_WORKER`` units
are outstanding at once, and each unit result is dropped as soon as it is merged.
"""

from __future__ import annotations

import time
from collections import Counter, deque
from concurrent.futures import Executor, Future, ProcessPoolExecutor
from dataclasses import dataclass, field
from itertools import islice
from typing import Iterable, Iterator

from structlog import get_logger

from hub_search.observability.metrics import MetricsRegistry
from hub_search.search.assignments import AssignmentEnumerator
from hub_search.search.evaluator import DEFAULT_INT_BITS, Evaluator, render
from hub_search.search.operators import OperatorSet
from hub_search.search.shapes import ShapeEnumerator
from hub_search.search.store import SolutionEntry, SolutionStore

logger = get_logger("search.driver")

DEFAULT_CHUNK_SIZE = 50_000
IN_FLIGHT_PER_WORKER = 2

_SHAPES = ShapeEnumerator()


@dataclass(frozen=True)
class SearchSettings:
    max_number: int
    max_size: int
    operators: OperatorSet = field(default_factory=lambda: OperatorSet.parse(None))
    workers: int = 1
    int_bits: int = DEFAULT_INT_BITS
    chunk_size: int = DEFAULT_CHUNK_SIZE

    def __post_init__(self) -> None:
        if not isinstance(self.operators, OperatorSet):
            object.__setattr__(self, "operators", OperatorSet.parse(self.operators))
        if self.max_number < 1:
            raise ValueError(f"max_number must be > 0, was {self.max_number}")
        if self.max_size < 1:
            raise ValueError(f"max_size must be > 0, was {self.max_size}")
        if self.workers < 1:
            raise ValueError(f"workers must be > 0, was {self.workers}")
        if self.chunk_size < 1:
            raise ValueError(f"chunk_size must be > 0, was {self.chunk_size}")
        if self.int_bits < 2:
            raise ValueError(f"int_bits must be >= 2, was {self.int_bits}")


@dataclass(frozen=True)
class WorkUnit:
    size: int
    start: int
    stop: int
    max_number: int
    operators: OperatorSet
    int_bits: int
    # values already owned by a smaller size
    known: frozenset = frozenset()


@dataclass
class UnitResult:
    store: SolutionStore
    assignments: int = 0
    accepted: int = 0
    rejections: Counter = field(default_factory=Counter)


@dataclass
class SizeReport:
    size: int
    shapes: int
    assignments: int
    accepted: int
    new_values: int
    rejections: dict[str, int]
    duration_s: float


@dataclass
class SearchStats:
    assignments: int = 0
    accepted: int = 0
    rejections: Counter = field(default_factory=Counter)
    sizes: list[SizeReport] = field(default_factory=list)

    def add(self, report: SizeReport) -> None:
        self.assignments += report.assignments
        self.accepted += report.accepted
        self.rejections.update(report.rejections)
        self.sizes.append(report)


@dataclass(frozen=True)
class SearchResult:
    solutions: dict[int, SolutionEntry]
    stats: SearchStats


def run_unit(unit: WorkUnit) -> UnitResult:
    """Evaluate one slice of a size's assignments against every shape into a private store."""
    programs = _SHAPES.programs(unit.size)
    space = AssignmentEnumerator(unit.max_number, unit.operators).space(unit.size)
    evaluator = Evaluator(unit.int_bits)
    result = UnitResult(store=SolutionStore())
    record = result.store.record
    known = unit.known
    size = unit.size
    for leaves, ops in space.iter_range(unit.start, unit.stop):
        for program in programs:
            outcome = evaluator.evaluate(program, leaves, ops)
            result.assignments += 1
            if outcome.reason is None:
                result.accepted += 1
                if outcome.value not in known:
                    record(outcome.value, size, render(program, leaves, ops))
            else:
                result.rejections[outcome.reason.value] += 1
    return result


def plan_units(settings: SearchSettings, size: int, known: frozenset = frozenset()) -> list[WorkUnit]:
    total = AssignmentEnumerator(settings.max_number, settings.operators).count(size)
    return [
        WorkUnit(
            size=size,
            start=start,
            stop=min(total, start + settings.chunk_size),
            max_number=settings.max_number,
            operators=settings.operators,
            int_bits=settings.int_bits,
            known=known,
        )
        for start in range(0, total, settings.chunk_size)
    ]


def iter_unit_results(
    units: Iterable[WorkUnit],
    executor: Executor | None = None,
    *,
    window: int = 1,
) -> Iterator[UnitResult]:
    """Yield unit results in unit order, keeping at most *window* units submitted ahead."""
    if executor is None:
        for unit in units:
            yield run_unit(unit)
        return
    queue = iter(units)
    pending: deque[Future] = deque(executor.submit(run_unit, unit) for unit in islice(queue, max(1, window)))
    while pending:
        result = pending.popleft().result()
        for unit in islice(queue, 1):
            pending.append(executor.submit(run_unit, unit))
        yield result


class SearchDriver:
    def __init__(self, settings: SearchSettings, *, metrics: MetricsRegistry | None = None) -> None:
        self.settings = settings
        self.store = SolutionStore()
        self.stats = SearchStats()
        self._metrics = metrics if metrics is not None else MetricsRegistry.get()
        self._next_size = 1

    def iter_sizes(self) -> Iterator[SizeReport]:
        """Process remaining sizes in increasing order, yielding after each one.

        Stopping the iteration early leaves the store holding every size seen so far.
        """
        if self.settings.workers > 1:
            with ProcessPoolExecutor(max_workers=self.settings.workers) as executor:
                while self._next_size <= self.settings.max_size:
                    yield self._run_size(self._next_size, executor)
                    self._next_size += 1
        else:
            while self._next_size <= self.settings.max_size:
                yield self._run_size(self._next_size, None)
                self._next_size += 1

    def run(self) -> SearchResult:
        for _ in self.iter_sizes():
            pass
        return SearchResult(solutions=self.store.snapshot(), stats=self.stats)

    def search(self) -> dict[int, SolutionEntry]:
        return self.run().solutions

    def _run_size(self, size: int, executor: ProcessPoolExecutor | None) -> SizeReport:
        started = time.perf_counter()
        known = frozenset(self.store)
        units = plan_units(self.settings, size, known)
        logger.debug("Size started", size=size, units=len(units), workers=self.settings.workers)

        window = self.settings.workers * IN_FLIGHT_PER_WORKER
        assignments = 0
        accepted = 0
        rejections: Counter = Counter()
        for result in iter_unit_results(units, executor, window=window):
            self.store.merge(result.store)
            assignments += result.assignments
            accepted += result.accepted
            rejections.update(result.rejections)

        report = SizeReport(
            size=size,
            shapes=_SHAPES.count(size),
            assignments=assignments,
            accepted=accepted,
            new_values=len(self.store) - len(known),
            rejections=dict(rejections),
            duration_s=time.perf_counter() - started,
        )
        self.stats.add(report)
        self._metrics.observe_size(report, values_found=len(self.store))
        logger.info(
            "Size complete",
            size=size,
            shapes=report.shapes,
            assignments=assignments,
            accepted=accepted,
            new_values=report.new_values,
            values_found=len(self.store),
            duration_s=round(report.duration_s, 3),
        )
        return report


def search(
    max_number: int,
    max_size: int,
    operations: str | OperatorSet | None = None,
    **kwargs,
) -> dict[int, SolutionEntry]:
    """Run a full search and return the snapshot, ascending by value."""
    operators = operations if isinstance(operations, OperatorSet) else OperatorSet.parse(operations)
    settings = SearchSettings(max_number=max_number, max_size=max_size, operators=operators, **kwargs)
    return SearchDriver(settings).search()
