from __future__ import annotations

from typing import Hashable


class TaskEvaluationError(Exception):
    """Base error for the task evaluation server."""


class ValidationError(TaskEvaluationError):
    """Raised when user input is invalid."""


class ConfigurationError(TaskEvaluationError):
    """Raised when a required setting (API key, store URL) is missing."""


class ExternalServiceError(TaskEvaluationError):
    """Raised when an external service (LLM API/task store) fails."""


class NotFoundError(TaskEvaluationError):
    """Raised when a requested resource is not found."""


class ProcessingError(TaskEvaluationError):
    """Base for single-flight processing outcomes that are not fatal."""

    def __init__(self, key: Hashable, message: str) -> None:
        super().__init__(message)
        self.key = key


class AlreadyInProgressError(ProcessingError):
    """Raised when work for a key is started while another attempt is in flight."""

    def __init__(self, key: Hashable) -> None:
        super().__init__(key, f"Processing of {key!r} is already in progress")


class ProcessingTimeoutError(ProcessingError):
    """Raised when tracked work does not settle before its deadline. Retryable."""

    def __init__(self, key: Hashable, timeout_seconds: float) -> None:
        super().__init__(key, f"Processing of {key!r} timed out after {timeout_seconds:g}s")
        self.timeout_seconds = timeout_seconds


class ProcessingCancelledError(ProcessingError):
    """Raised when the caller signals cancellation before the work settles."""

    def __init__(self, key: Hashable) -> None:
        super().__init__(key, f"Processing of {key!r} was cancelled")
