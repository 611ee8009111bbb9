"""Groq chat-completions client that reviews a task's code.

Sends the task to an OpenAI-compatible `/chat/completions` endpoint,
pulls the first JSON object out of the model reply and validates it into
an EvaluationDraft.
"""

from __future__ import annotations

import json
import logging
import math
import re
from typing import Any, Mapping, Optional

import httpx

from core.errors import ConfigurationError, ExternalServiceError
from core.models import EvaluationDraft, Task

logger = logging.getLogger(__name__)

_JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")

_REVIEW_INSTRUCTIONS = """\
You are an expert code reviewer. Evaluate the following {language} code for
bugs, refactoring opportunities and performance problems, and provide a
complete rewritten version with all improvements applied.

```{language}
{code}
```
{context}
Respond with JSON only:
{{"score": <number 0-100>, "strengths": [<string>...], "improvements": [<string>...],
"fullReport": "<detailed analysis>", "fixedCode": "<rewritten code>"}}"""


def build_review_prompt(task: Task) -> str:
    context = f"\nContext: {task.description}\n" if task.description else ""
    return _REVIEW_INSTRUCTIONS.format(language=task.language, code=task.code, context=context)


def _clamp_score(raw: float) -> int:
    # Half-up rounding, then clamp to 0..100
    return max(0, min(100, int(math.floor(raw + 0.5))))


def parse_evaluation(content: str) -> EvaluationDraft:
    match = _JSON_OBJECT_RE.search(content or "")
    if not match:
        raise ExternalServiceError("LLM response does not contain a JSON object")

    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise ExternalServiceError(f"Failed to parse LLM evaluation: {e}") from e

    if not isinstance(data, dict):
        raise ExternalServiceError("Invalid evaluation format from LLM")

    score = data.get("score")
    strengths = data.get("strengths")
    improvements = data.get("improvements")
    full_report = data.get("fullReport")
    fixed_code = data.get("fixedCode")

    if (
        isinstance(score, bool)
        or not isinstance(score, (int, float))
        or not isinstance(strengths, list)
        or not isinstance(improvements, list)
        or not isinstance(full_report, str)
        or not isinstance(fixed_code, str)
    ):
        raise ExternalServiceError("Invalid evaluation format from LLM")

    return EvaluationDraft(
        score=_clamp_score(float(score)),
        strengths=tuple(str(s) for s in strengths),
        improvements=tuple(str(s) for s in improvements),
        full_report=full_report,
        fixed_code=fixed_code,
    )


def _upstream_message(response: httpx.Response) -> Optional[str]:
    try:
        payload = response.json()
    except ValueError:
        return None
    if isinstance(payload, Mapping):
        err = payload.get("error")
        if isinstance(err, Mapping) and err.get("message"):
            return str(err["message"])
    return None


class GroqClient:
    def __init__(
        self,
        *,
        api_key: str,
        base_url: str,
        model: str,
        timeout: float,
        verify: bool = True,
        temperature: float = 0.7,
        max_tokens: int = 2000,
    ) -> None:
        self._api_key = (api_key or "").strip()
        self._base_url = (base_url or "").rstrip("/")
        self._model = model
        self._timeout = timeout
        self._verify = verify
        self._temperature = temperature
        self._max_tokens = max_tokens

    async def evaluate(self, task: Task) -> EvaluationDraft:
        if not self._api_key:
            raise ConfigurationError("GROQ_API_KEY is not configured")

        payload: dict[str, Any] = {
            "model": self._model,
            "messages": [{"role": "user", "content": build_review_prompt(task)}],
            "temperature": self._temperature,
            "max_tokens": self._max_tokens,
        }

        try:
            async with httpx.AsyncClient(timeout=self._timeout, verify=self._verify) as c:
                r = await c.post(
                    f"{self._base_url}/chat/completions",
                    json=payload,
                    headers={"Authorization": f"Bearer {self._api_key}"},
                )
                r.raise_for_status()
                body = r.json()
        except httpx.HTTPStatusError as e:
            detail = _upstream_message(e.response) or "AI evaluation service error"
            logger.warning("Groq returned %s for task %s: %s", e.response.status_code, task.id, detail)
            raise ExternalServiceError(f"Groq returned an error ({e.response.status_code}): {detail}") from e
        except httpx.HTTPError as e:
            logger.warning("Failed to call Groq for task %s: %s", task.id, e)
            raise ExternalServiceError(f"Failed to call Groq: {e}") from e
        except ValueError as e:
            raise ExternalServiceError("Groq returned a non-JSON body") from e

        try:
            content = body["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise ExternalServiceError("Invalid AI response structure") from e

        return parse_evaluation(content)
