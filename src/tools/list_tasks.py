"""MCP tool that lists a user's tasks with their evaluation status."""

from __future__ import annotations

from typing import Any, Dict, Optional

from mcp.server.fastmcp import FastMCP

from services.evaluation_service import EvaluationService


def register(mcp: FastMCP, *, service: EvaluationService) -> None:
    @mcp.tool(name="list_tasks")
    async def list_tasks(user_id: str, language: Optional[str] = None) -> Dict[str, Any]:
        """List a user's tasks (newest first) with score and paid flag.

        Params:
          - user_id: owner of the tasks (required).
          - language: optional exact language filter (case-insensitive).

        Returns:
          {"tasks": [{"id", "title", "language", "created_at", "evaluation"}],
           "total", "evaluated", "paid"}; "evaluation" is null until scored.
        """
        return await service.list_tasks(user_id, language=language)
