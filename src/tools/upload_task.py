"""MCP tool that stores a new code task for later evaluation.

Registers 'upload_task' which validates the title and code and inserts
the task into the store.
"""

from __future__ import annotations

from typing import Any, Dict

from mcp.server.fastmcp import FastMCP

from services.evaluation_service import EvaluationService


def register(mcp: FastMCP, *, service: EvaluationService) -> None:
    @mcp.tool(name="upload_task")
    async def upload_task(
        user_id: str,
        title: str,
        code: str,
        language: str = "javascript",
        description: str = "",
    ) -> Dict[str, Any]:
        """Upload a code snippet as a task and return its id.

        Params:
          - user_id: owner of the task (required).
          - title: short task title (required, trimmed).
          - code: source code to evaluate (required, trimmed).
          - language: language of the code (default: "javascript").
          - description: optional context passed to the reviewer.

        Returns:
          {"id", "title", "language", "created_at"} of the stored task.

        Raises:
          ValidationError for blank fields; ExternalServiceError on store errors.
        """
        task = await service.upload_task(
            user_id=user_id,
            title=title,
            code=code,
            language=language,
            description=description,
        )
        return {"id": task.id, "title": task.title, "language": task.language, "created_at": task.created_at}
