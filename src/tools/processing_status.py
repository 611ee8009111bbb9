"""MCP tool reporting in-flight evaluations (display only)."""

from __future__ import annotations

from typing import Any, Dict, Optional

from mcp.server.fastmcp import FastMCP

from services.evaluation_service import EvaluationService


def register(mcp: FastMCP, *, service: EvaluationService) -> None:
    @mcp.tool(name="processing_status")
    async def processing_status(task_id: Optional[str] = None) -> Dict[str, Any]:
        """Report how many evaluations are running, and optionally whether one task is.

        Params:
          - task_id: optional task UUID to check.

        Returns:
          {"in_flight": int} plus "task_id", "in_progress" and "cached" when
          task_id is given. The answer is a point-in-time snapshot.
        """
        return service.processing_status(task_id)
