"""MCP tool that summarizes a user's evaluations.

Registers 'user_stats' which counts evaluations and paid reports and
averages the scores for one user.
"""

from __future__ import annotations

from typing import Any, Dict

from mcp.server.fastmcp import FastMCP

from services.evaluation_service import EvaluationService


def register(mcp: FastMCP, *, service: EvaluationService) -> None:
    @mcp.tool(name="user_stats")
    async def user_stats(user_id: str) -> Dict[str, Any]:
        """Return evaluation totals and the average score for a user.

        Params:
          - user_id: id of the task owner (required).

        Returns:
          {"user_id", "total_evaluations", "paid_reports", "average_score"}.

        Raises:
          ValidationError if user_id is empty; ExternalServiceError on store errors.
        """
        return await service.user_stats(user_id)
