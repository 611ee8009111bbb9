"""Immutable dataclasses shared by the service, clients and tools.

Includes the task/evaluation records read from and written to the task
store (plus NewTask for uploads), the parsed LLM verdict (EvaluationDraft) and the limits used to
build the evaluation cache and single-flight tracker.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class EvaluationLimits:
    """Sizing and timing for the evaluation cache and tracker.

    - max_size: entries kept before the oldest is evicted
    - ttl_seconds: lifetime of a cached evaluation
    - timeout_seconds: max duration of a single evaluation attempt
    """

    max_size: int = 100
    ttl_seconds: float = 300.0
    timeout_seconds: float = 30.0


@dataclass(frozen=True)
class NewTask:
    """An upload that has not been stored yet (no id)."""

    user_id: str
    title: str
    language: str
    code: str
    description: str = ""


@dataclass(frozen=True)
class Task:
    id: str
    user_id: str
    language: str
    code: str
    description: Optional[str] = None
    title: str = ""
    created_at: Optional[str] = None


@dataclass(frozen=True)
class EvaluationDraft:
    """Verdict returned by the code evaluator, before it is persisted."""

    score: int
    strengths: Tuple[str, ...]
    improvements: Tuple[str, ...]
    full_report: str
    fixed_code: str


@dataclass(frozen=True)
class Evaluation:
    task_id: str
    user_id: str
    score: int
    strengths: Tuple[str, ...] = ()
    improvements: Tuple[str, ...] = ()
    full_report: str = ""
    fixed_code: str = ""
    is_paid: bool = False

    id: Optional[str] = None
    created_at: Optional[str] = None

    def to_dict(self, *, include_report: bool = True) -> Dict[str, Any]:
        data = asdict(self)
        data["strengths"] = list(self.strengths)
        data["improvements"] = list(self.improvements)
        if not include_report:
            data.pop("full_report")
            data.pop("fixed_code")
        return data
