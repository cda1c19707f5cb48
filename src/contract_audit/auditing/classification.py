"""
Inference failure classification.

Maps SDK/network exceptions onto the analysis error taxonomy so the
orchestrator can decide between retrying and stopping:
- connection errors, timeouts, 429 and 5xx are transient (retried)
- 401/403, unknown model and other 4xx are configuration problems (not retried)
"""

import asyncio
from typing import Optional

import openai

from ..errors import (
    AnalysisError,
    InvalidModelError,
    MalformedResponseError,
    RequestRejectedError,
    TransientAnalysisError,
    UnauthorizedError,
)


def _error_text(error: Exception) -> str:
    message = getattr(error, "message", None)
    return str(message if message else error)


def classify_analysis_error(error: Exception) -> Optional[AnalysisError]:
    """
    Classify an exception raised while requesting a completion.

    Args:
        error: Exception from the inference call

    Returns:
        Matching AnalysisError, or None for exceptions that are not inference
        failures (callers re-raise those)
    """
    if isinstance(error, AnalysisError):
        return error

    # APITimeoutError is a subclass of APIConnectionError
    if isinstance(error, openai.APIConnectionError):
        return TransientAnalysisError(f"Inference endpoint unreachable: {_error_text(error)}")

    if isinstance(error, openai.APIResponseValidationError):
        return MalformedResponseError(f"Unexpected response format: {_error_text(error)}")

    status_code = getattr(error, "status_code", None)
    if isinstance(status_code, int):
        text = _error_text(error)
        if status_code == 429 or 500 <= status_code < 600:
            return TransientAnalysisError(f"Inference request failed ({status_code}): {text}", status_code)
        if status_code in (401, 403):
            return UnauthorizedError(f"Inference API key rejected ({status_code}): {text}", status_code)
        if status_code == 404 or (status_code in (400, 422) and "model" in text.lower()):
            return InvalidModelError(f"Model rejected by inference endpoint ({status_code}): {text}", status_code)
        if 400 <= status_code < 500:
            return RequestRejectedError(f"Inference request rejected ({status_code}): {text}", status_code)

    if isinstance(error, (asyncio.TimeoutError, TimeoutError, ConnectionError)):
        return TransientAnalysisError(f"Inference request failed: {error}")

    return None
