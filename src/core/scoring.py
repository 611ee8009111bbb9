"""
Scoring helpers used by the stats tool.

Aggregates evaluation scores and filters tasks by language without
touching the store; callers pass already-loaded rows.
"""

from __future__ import annotations

from typing import Iterable, List

from core.models import Evaluation, Task


def _as_number(value: object) -> float:
    if isinstance(value, bool):
        return 0.0
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0


def average_score(evaluations: Iterable[Evaluation]) -> float:
    """Mean score rounded to 2 decimals; 0.0 when there are no evaluations.

    Scores that are not numeric count as 0 but still count toward the total.
    """
    rows = list(evaluations or ())
    if not rows:
        return 0.0
    total = sum(_as_number(getattr(e, "score", 0)) for e in rows)
    return round(total / len(rows), 2)


def filter_by_language(tasks: Iterable[Task], language: str) -> List[Task]:
    """Return tasks whose language equals `language` (trimmed, case-insensitive)."""
    wanted = (language or "").strip().lower()
    if not wanted:
        return []
    return [t for t in (tasks or ()) if t is not None and (t.language or "").strip().lower() == wanted]
