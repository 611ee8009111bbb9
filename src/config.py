"""Environment-driven settings for the evaluation server.

Everything is read once at import: the evaluation cache size and TTL,
the per-evaluation timeout, Groq and Supabase credentials/endpoints with
their HTTP timeouts, TLS verification and the log level. Unparseable
numbers fall back to the defaults below.
"""

from __future__ import annotations

import os


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


# Evaluation cache / single-flight tracker
EVAL_CACHE_MAX_SIZE = _env_int("EVAL_CACHE_MAX_SIZE", 100)
EVAL_CACHE_TTL_SECONDS = _env_float("EVAL_CACHE_TTL_SECONDS", 5 * 60.0)
EVAL_TIMEOUT_SECONDS = _env_float("EVAL_TIMEOUT_SECONDS", 30.0)

# Network / HTTP
HTTP_VERIFY = _env_bool("HTTP_VERIFY", True)

# Groq (OpenAI-compatible chat completions)
GROQ_API_KEY = os.environ.get("GROQ_API_KEY", "").strip()
GROQ_BASE_URL = os.environ.get("GROQ_BASE_URL", "https://api.groq.com/openai/v1").strip()
GROQ_MODEL = os.environ.get("GROQ_MODEL", "llama-3.3-70b-versatile").strip()
GROQ_TIMEOUT = _env_float("GROQ_TIMEOUT", 25.0)

# Supabase (PostgREST)
SUPABASE_URL = os.environ.get("SUPABASE_URL", "").strip()
SUPABASE_SERVICE_ROLE_KEY = os.environ.get("SUPABASE_SERVICE_ROLE_KEY", "").strip()
SUPABASE_TIMEOUT = _env_float("SUPABASE_TIMEOUT", 10.0)

# Logging (stderr; stdout carries the MCP stdio transport)
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").strip().upper() or "INFO"
