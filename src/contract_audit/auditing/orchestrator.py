"""
AI analysis orchestration.

One analysis runs through Idle -> Building -> Requesting and ends in
Succeeded, Failed or Cancelled. Transient failures move through Retrying with
exponential backoff; every other failure is terminal on first occurrence.
Both the in-flight request and the backoff sleep are raced against the
caller's CancelToken.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Union

from openai import AsyncOpenAI

from ..config import INFERENCE_BASE_URL, AIConfig, ConfigStore, get_model_by_id
from ..errors import (
    AnalysisCancelledError,
    AnalysisError,
    InvalidModelError,
    MalformedResponseError,
    UnauthorizedError,
)
from ..models import ContractBundle
from ..reporting.markdown import normalize_report
from .cancellation import CancelToken
from .classification import classify_analysis_error
from .models import AnalysisRequest, AnalysisResult, AnalysisState
from .prompt import MAX_PROMPT_SOURCE_CHARS, build_prompt
from .rules import get_system_prompt

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 3
DEFAULT_BACKOFF_BASE = 1.0
DEFAULT_MAX_BACKOFF = 30.0
TEMPERATURE = 0.5

ClientFactory = Callable[[str], Any]


def default_client_factory(api_key: str) -> AsyncOpenAI:
    # Retries are handled here, not by the SDK
    return AsyncOpenAI(api_key=api_key, base_url=INFERENCE_BASE_URL, max_retries=0)


def backoff_delay(attempt: int, base: float = DEFAULT_BACKOFF_BASE, maximum: float = DEFAULT_MAX_BACKOFF) -> float:
    """Delay before retry number `attempt + 1` (attempt is 0-based)."""
    return min(base * (2 ** attempt), maximum)


async def _race(awaitable: Awaitable[Any], cancel_token: CancelToken) -> Any:
    """
    Await `awaitable` unless the token fires first.

    Raises:
        AnalysisCancelledError: The token fired before `awaitable` finished
    """
    work = asyncio.ensure_future(awaitable)
    cancelled = asyncio.ensure_future(cancel_token.wait())
    try:
        done, _ = await asyncio.wait({work, cancelled}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        pending = [task for task in (work, cancelled) if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    if work in done:
        return work.result()
    raise AnalysisCancelledError("Analysis cancelled by caller")


def _completion_text(response: Any) -> str:
    """Extract the first choice's content, rejecting empty completions."""
    try:
        content = response.choices[0].message.content
    except (AttributeError, IndexError, TypeError) as e:
        raise MalformedResponseError(f"Completion has no choices: {e}")
    if not isinstance(content, str) or not content.strip():
        raise MalformedResponseError("Completion content is empty")
    return content


class _AnalysisRun:
    """State of one analyze() call; never shared between calls."""

    def __init__(self, model: str):
        self.model = model
        self.state = AnalysisState.IDLE
        self.attempts = 0

    def transition(self, state: AnalysisState) -> None:
        logger.info(f"[ANALYSIS] {self.state.value} -> {state.value}")
        self.state = state

    def finish(self, state: AnalysisState, markdown: str = "",
               error: Optional[AnalysisError] = None) -> AnalysisResult:
        self.transition(state)
        return AnalysisResult(state=state, model=self.model, markdown=markdown, error=error, attempts=self.attempts)

    def cancelled(self) -> AnalysisResult:
        logger.warning(f"[ANALYSIS] ⚠️  Cancelled after {self.attempts} attempt(s)")
        return self.finish(AnalysisState.CANCELLED, error=AnalysisCancelledError("Analysis cancelled by caller"))


class AnalysisOrchestrator:
    """
    Runs contract audits against the OpenAI-compatible inference endpoint.

    Holds only settings, so one instance can serve concurrent analyze() calls.

    Args:
        client_factory: Builds an async client from an API key; the client must
            support `async with` and `chat.completions.create`
        max_retries: Retries after the first attempt for transient failures
        backoff_base: First backoff delay in seconds
        max_backoff: Backoff ceiling in seconds
        max_prompt_chars: Source budget for the prompt
    """

    def __init__(
        self,
        client_factory: Optional[ClientFactory] = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
        backoff_base: float = DEFAULT_BACKOFF_BASE,
        max_backoff: float = DEFAULT_MAX_BACKOFF,
        max_prompt_chars: int = MAX_PROMPT_SOURCE_CHARS,
    ):
        self.client_factory = client_factory or default_client_factory
        self.max_retries = max(0, max_retries)
        self.backoff_base = backoff_base
        self.max_backoff = max_backoff
        self.max_prompt_chars = max_prompt_chars

    async def _request(self, client: Any, request: AnalysisRequest) -> str:
        response = await client.chat.completions.create(
            model=request.model,
            messages=[
                {"role": "system", "content": get_system_prompt()},
                {"role": "user", "content": request.prompt},
            ],
            temperature=TEMPERATURE,
        )
        return _completion_text(response)

    async def analyze(
        self,
        bundle: ContractBundle,
        config: Union[AIConfig, ConfigStore],
        cancel_token: Optional[CancelToken] = None,
    ) -> AnalysisResult:
        """
        Audit a resolved contract bundle.

        Args:
            bundle: Contract bundle from resolve_contract()
            config: AI configuration, or a store read once at the start
            cancel_token: Optional caller-owned cancellation signal

        Returns:
            AnalysisResult in a terminal state; classified failures are
            returned, not raised
        """
        if not isinstance(config, AIConfig):
            config = config.read()
        cancel_token = cancel_token or CancelToken()
        model = config.selected_model

        run = _AnalysisRun(model)
        run.transition(AnalysisState.BUILDING)

        if not config.api_key.strip():
            logger.error("[ANALYSIS] ❌ No inference API key configured")
            return run.finish(
                AnalysisState.FAILED,
                error=UnauthorizedError("No inference API key configured (set NEVERSIGHT_API_KEY)"),
            )
        if get_model_by_id(model) is None:
            logger.error(f"[ANALYSIS] ❌ Unsupported model: {model}")
            return run.finish(AnalysisState.FAILED, error=InvalidModelError(f"Unsupported model: {model}"))
        if cancel_token.cancelled:
            return run.cancelled()

        request = AnalysisRequest(
            prompt=build_prompt(bundle, config, self.max_prompt_chars),
            model=model,
            language=config.language,
            super_prompt=config.super_prompt,
            cancel_token=cancel_token,
        )

        last_error: Optional[AnalysisError] = None

        async with self.client_factory(config.api_key) as client:
            for attempt in range(self.max_retries + 1):
                if cancel_token.cancelled:
                    return run.cancelled()

                run.transition(AnalysisState.REQUESTING)
                run.attempts += 1
                if attempt == 0:
                    logger.info(f"[ANALYSIS] Requesting audit of {bundle.contract_name or bundle.address} from {model}")
                else:
                    logger.warning(f"[ANALYSIS] Retry {attempt}/{self.max_retries} with {model}")

                try:
                    content = await _race(self._request(client, request), cancel_token)
                except AnalysisCancelledError:
                    return run.cancelled()
                except Exception as e:
                    error = classify_analysis_error(e)
                    if error is None:
                        raise
                    last_error = error
                    logger.error(f"[ANALYSIS] Attempt {attempt + 1} failed: {type(e).__name__}: {error}")

                    if not error.retryable:
                        logger.error(f"[ANALYSIS] ❌ Not retrying {error.category} failure")
                        return run.finish(AnalysisState.FAILED, error=error)

                    if attempt < self.max_retries:
                        run.transition(AnalysisState.RETRYING)
                        wait_time = backoff_delay(attempt, self.backoff_base, self.max_backoff)
                        logger.info(f"[ANALYSIS] Waiting {wait_time}s before retry...")
                        try:
                            await _race(asyncio.sleep(wait_time), cancel_token)
                        except AnalysisCancelledError:
                            return run.cancelled()
                    continue

                logger.info(f"[ANALYSIS] ✓ Received {len(content):,} chars from {model}")
                return run.finish(AnalysisState.SUCCEEDED, markdown=normalize_report(content, model))

        logger.error(f"[ANALYSIS] ❌ All {run.attempts} attempts failed")
        return run.finish(AnalysisState.FAILED, error=last_error)


async def analyze_contract(
    bundle: ContractBundle,
    config: Union[AIConfig, ConfigStore],
    cancel_token: Optional[CancelToken] = None,
    max_retries: int = DEFAULT_MAX_RETRIES,
) -> AnalysisResult:
    """Run one analysis with the default client."""
    orchestrator = AnalysisOrchestrator(max_retries=max_retries)
    return await orchestrator.analyze(bundle, config, cancel_token)
