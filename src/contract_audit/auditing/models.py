"""Request/result types for one AI analysis call."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..errors import (
    CATEGORY_CANCELLED,
    CATEGORY_CONFIGURATION,
    CATEGORY_MALFORMED,
    AnalysisError,
)
from .cancellation import CancelToken


class AnalysisState(Enum):
    IDLE = "idle"
    BUILDING = "building"
    REQUESTING = "requesting"
    RETRYING = "retrying"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass
class AnalysisRequest:
    """
    Holds everything needed for the inference call, built once per analysis.
    """
    prompt: str
    model: str
    language: str
    super_prompt: bool
    cancel_token: CancelToken


@dataclass
class AnalysisResult:
    """
    Holds the outcome of one analysis: Markdown on success, a classified error otherwise.
    """
    state: AnalysisState
    model: str
    markdown: str = ""
    error: Optional[AnalysisError] = None
    attempts: int = 0

    @property
    def succeeded(self) -> bool:
        return self.state == AnalysisState.SUCCEEDED

    @property
    def cancelled(self) -> bool:
        return self.state == AnalysisState.CANCELLED

    @property
    def user_message(self) -> str:
        """Short message for the user, by failure category."""
        if self.succeeded:
            return "Analysis complete."
        if self.cancelled or (self.error is not None and self.error.category == CATEGORY_CANCELLED):
            return "Analysis cancelled."
        if self.error is None:
            return "Analysis failed."
        if self.error.category == CATEGORY_CONFIGURATION:
            return f"Configuration problem, check your API key and model: {self.error}"
        if self.error.category == CATEGORY_MALFORMED:
            return f"The model returned an unusable response: {self.error}"
        return f"Temporary failure, please retry later: {self.error}"
