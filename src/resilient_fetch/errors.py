"""
Error types for resilient_fetch.

Only ConfigurationError reaches callers. The other failures are raised
inside the request pipeline and converted to a FailureOutcome.
"""
import json
from typing import Dict, Optional

from .types import FailureOutcome, FailureReason


class FetchError(Exception):
    """Base client error."""

    reason: FailureReason = "transport"
    retryable: bool = True

    def to_outcome(self) -> FailureOutcome:
        return FailureOutcome(result="nok", message=str(self), reason=self.reason)


class ConfigurationError(FetchError, ValueError):
    """Invalid client configuration, raised at construction time."""

    retryable = False


class TransportFailure(FetchError):
    """Network level error (DNS, refused connection, reset, ...)."""


class HttpStatusFailure(FetchError):
    """Response received with a status outside the 2xx range."""

    reason: FailureReason = "http_status"

    def __init__(
        self,
        status: int,
        status_text: str,
        headers: Optional[Dict[str, str]] = None,
        body: str = "",
    ):
        self.status = status
        self.status_text = status_text
        self.headers = dict(headers or {})
        self.body = body
        details = {
            "status": status,
            "status_text": status_text,
            "headers": self.headers,
            "body": body,
        }
        super().__init__(f"Request failed: {json.dumps(details, ensure_ascii=False)}")

    def to_outcome(self) -> FailureOutcome:
        outcome = super().to_outcome()
        outcome["status"] = self.status
        return outcome


class DecodeFailure(FetchError):
    """Successful response whose body does not match its content-type."""

    reason: FailureReason = "decode"


class EncodeFailure(FetchError):
    """Payload that cannot be turned into a request body."""

    reason: FailureReason = "encode"
    retryable = False


class CancellationFailure(FetchError):
    """Request aborted by timeout, supersession or abort_all."""

    retryable = False

    def __init__(self, trigger: str, message: Optional[str] = None):
        self.trigger = trigger
        self.reason = "timeout" if trigger == "timeout" else "cancelled"
        super().__init__(message or f"Request aborted: {trigger}")
