"""
Error taxonomy for contract resolution and AI analysis.

Resolution errors carry the explorer's own status/message so callers can show
the diagnostic verbatim. Analysis errors carry a category used to tell the user
whether to fix their configuration, retry later, or nothing at all (cancelled).
"""

from typing import Any, Dict, Optional


class ContractAuditError(Exception):
    """Base class for all errors raised by this package."""


# --- Resolution -------------------------------------------------------------

class ResolutionError(ContractAuditError):
    """
    Source resolution failed: unreachable explorer, malformed response,
    unverified source or missing chain configuration.
    """

    def __init__(
        self,
        message: str,
        status: Optional[str] = None,
        explorer_message: Optional[str] = None,
        result: Any = None,
    ):
        super().__init__(message)
        self.status = status
        self.explorer_message = explorer_message
        self.result = result

    def diagnostics(self) -> Dict[str, Any]:
        """Explorer-facing details for display and logging."""
        return {
            "error": str(self),
            "status": self.status,
            "message": self.explorer_message,
            "result": self.result,
        }


class ChainNotConfiguredError(ResolutionError):
    """The chain identifier is not known to the chain registry."""


class ExplorerTransportError(ResolutionError):
    """The explorer could not be reached (network failure, timeout)."""


class ExplorerResponseError(ResolutionError):
    """The explorer answered with a failure status or an unusable payload."""


class SourceNotVerifiedError(ResolutionError):
    """The explorer knows the address but has no verified source for it."""


class ProxyPartialError(ContractAuditError):
    """
    Implementation source could not be resolved while the proxy source was.

    Advisory only: it is attached to the bundle, never raised out of
    resolve_contract().
    """

    def __init__(self, implementation_address: str, reason: str):
        super().__init__(f"Implementation {implementation_address} could not be resolved: {reason}")
        self.implementation_address = implementation_address
        self.reason = reason


# --- Analysis ---------------------------------------------------------------

CATEGORY_CONFIGURATION = "configuration"
CATEGORY_TEMPORARY = "temporary"
CATEGORY_CANCELLED = "cancelled"
CATEGORY_MALFORMED = "malformed"


class AnalysisError(ContractAuditError):
    """Base class for inference failures."""

    category = CATEGORY_CONFIGURATION
    retryable = False

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class UnauthorizedError(AnalysisError):
    """Missing or rejected inference API key."""


class InvalidModelError(AnalysisError):
    """The selected model is unknown locally or rejected by the endpoint."""


class RequestRejectedError(AnalysisError):
    """Any other 4xx answer: the request itself is invalid."""


class MalformedResponseError(AnalysisError):
    """The endpoint answered but without a usable completion."""

    category = CATEGORY_MALFORMED


class TransientAnalysisError(AnalysisError):
    """Network failure, timeout, rate limit or 5xx: worth retrying."""

    category = CATEGORY_TEMPORARY
    retryable = True


class AnalysisCancelledError(AnalysisError):
    """The caller signalled cancellation."""

    category = CATEGORY_CANCELLED
