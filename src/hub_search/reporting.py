import json
from typing import Any, Iterator, Mapping

from hub_search.search.store import SolutionEntry


def format_line(value: int, entry: SolutionEntry | None) -> str:
    if entry is None:
        return f"{value} -> None"
    quoted = ", ".join('"' + rep + '"' for rep in entry.representations)
    return f"{value} -> ({entry.size}) [{quoted}]"


def iter_text_lines(solutions: Mapping[int, SolutionEntry], *, show_missing: bool = False) -> Iterator[str]:
    """One line per value, ascending. ``show_missing`` also lists gaps as ``None``."""
    if not solutions:
        return
    if show_missing:
        for value in range(1, max(solutions) + 1):
            yield format_line(value, solutions.get(value))
        return
    for value in sorted(solutions):
        yield format_line(value, solutions[value])


def render_text(solutions: Mapping[int, SolutionEntry], *, show_missing: bool = False) -> str:
    lines = list(iter_text_lines(solutions, show_missing=show_missing))
    return "\n".join(lines) + ("\n" if lines else "")


def to_records(solutions: Mapping[int, SolutionEntry]) -> list[dict[str, Any]]:
    return [
        {
            "value": value,
            "size": solutions[value].size,
            "representations": list(solutions[value].representations),
        }
        for value in sorted(solutions)
    ]


def render_json(solutions: Mapping[int, SolutionEntry]) -> str:
    return json.dumps(to_records(solutions), indent=2) + "\n"
