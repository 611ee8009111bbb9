"""Server bootstrap for the task evaluation MCP service.

Creates the FastMCP instance, builds the store/LLM clients, the
evaluation cache and the single-flight tracker once, injects them into
the tools and starts the MCP server (stdio transport).
"""

import logging

from mcp.server.fastmcp import FastMCP

from clients.groq_client import GroqClient
from clients.supabase_client import SupabaseClient
from config import (
    EVAL_CACHE_MAX_SIZE,
    EVAL_CACHE_TTL_SECONDS,
    EVAL_TIMEOUT_SECONDS,
    GROQ_API_KEY,
    GROQ_BASE_URL,
    GROQ_MODEL,
    GROQ_TIMEOUT,
    HTTP_VERIFY,
    LOG_LEVEL,
    SUPABASE_SERVICE_ROLE_KEY,
    SUPABASE_TIMEOUT,
    SUPABASE_URL,
)
from core.models import EvaluationLimits
from services.service_factory import build_evaluation_service

from tools.evaluate_task import register as register_evaluate_task
from tools.list_tasks import register as register_list_tasks
from tools.processing_status import register as register_processing_status
from tools.upload_task import register as register_upload_task
from tools.user_stats import register as register_user_stats

mcp = FastMCP("task-evaluation-mcp")


def register_tools() -> None:
    store = SupabaseClient(
        url=SUPABASE_URL,
        service_key=SUPABASE_SERVICE_ROLE_KEY,
        timeout=SUPABASE_TIMEOUT,
        verify=HTTP_VERIFY,
    )
    evaluator = GroqClient(
        api_key=GROQ_API_KEY,
        base_url=GROQ_BASE_URL,
        model=GROQ_MODEL,
        timeout=GROQ_TIMEOUT,
        verify=HTTP_VERIFY,
    )
    limits = EvaluationLimits(
        max_size=EVAL_CACHE_MAX_SIZE,
        ttl_seconds=EVAL_CACHE_TTL_SECONDS,
        timeout_seconds=EVAL_TIMEOUT_SECONDS,
    )

    # One service (and so one cache + tracker) for the whole process
    service = build_evaluation_service(store=store, evaluator=evaluator, limits=limits)

    register_upload_task(mcp, service=service)
    register_list_tasks(mcp, service=service)
    register_evaluate_task(mcp, service=service)
    register_processing_status(mcp, service=service)
    register_user_stats(mcp, service=service)


register_tools()


def configure_logging() -> None:
    # basicConfig writes to stderr; stdout belongs to the stdio transport
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main() -> None:
    configure_logging()
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
