"""MCP tool that scores an uploaded task with the LLM reviewer.

Registers 'evaluate_task'. Duplicate, timed-out and cancelled attempts
come back as a normal status payload so the client can simply try again.
"""

from __future__ import annotations

from typing import Any, Dict

from mcp.server.fastmcp import FastMCP

from core.errors import AlreadyInProgressError, ProcessingCancelledError, ProcessingTimeoutError
from services.evaluation_service import EvaluationService


def register(mcp: FastMCP, *, service: EvaluationService) -> None:
    @mcp.tool(name="evaluate_task")
    async def evaluate_task(task_id: str) -> Dict[str, Any]:
        """Evaluate a task's code and return score, strengths and improvements.

        Params:
          - task_id: UUID of the uploaded task (required).

        Returns:
          {"status": "ok", "evaluation": {...}}. The full report and fixed
          code are only included once the evaluation is paid. When the task
          is already being evaluated, or the attempt timed out or was
          cancelled, returns {"status": "in_progress" | "timeout" |
          "cancelled", "message": ...} instead.

        Raises:
          ValidationError for a malformed id or incomplete task; NotFoundError
          if the task does not exist; ExternalServiceError on LLM/store errors.
        """
        try:
            evaluation = await service.evaluate(task_id)
        except AlreadyInProgressError:
            return {"status": "in_progress", "message": "This task is already being evaluated. Try again shortly."}
        except ProcessingTimeoutError as e:
            return {
                "status": "timeout",
                "message": f"Evaluation took longer than {e.timeout_seconds:g}s. Please try again.",
            }
        except ProcessingCancelledError:
            return {"status": "cancelled", "message": "Evaluation was cancelled. Please try again."}

        return {
            "status": "ok",
            "evaluation": evaluation.to_dict(include_report=evaluation.is_paid),
        }
