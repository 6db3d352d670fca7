from hub_search.search.assignments import AssignmentEnumerator, AssignmentSpace
from hub_search.search.driver import SearchDriver, SearchResult, SearchSettings, search
from hub_search.search.evaluator import EvalOutcome, Evaluator, RejectReason, render
from hub_search.search.operators import Operator, OperatorSet
from hub_search.search.shapes import ShapeEnumerator, shapes_for_size
from hub_search.search.store import SolutionEntry, SolutionStore

__all__ = [
    "AssignmentEnumerator",
    "AssignmentSpace",
    "EvalOutcome",
    "Evaluator",
    "Operator",
    "OperatorSet",
    "RejectReason",
    "SearchDriver",
    "SearchResult",
    "SearchSettings",
    "ShapeEnumerator",
    "SolutionEntry",
    "SolutionStore",
    "render",
    "search",
    "shapes_for_size",
]
