"""
Resilient asynchronous HTTP client for Python.

Provides get/post/put/patch/delete with per-endpoint supersession of stale
requests, timeouts, retries and content-type negotiation. Runtime failures
settle as ``{"result": "nok", "message": ...}`` instead of raising.
"""
from .types import (
    Blob,
    FailureOutcome,
    FormData,
    HttpMethod,
    LogSink,
    RequestOptions,
    RequestOutcome,
    is_failure,
)
from .errors import (
    CancellationFailure,
    ConfigurationError,
    DecodeFailure,
    EncodeFailure,
    FetchError,
    HttpStatusFailure,
    TransportFailure,
)
from .config import ClientConfig, ResolvedConfig, resolve_config
from .retry import BackoffStrategy, RetryPolicy, calculate_delay
from .diagnostics import LoggerSink, RichConsoleSink, format_log_line
from .core.cancellation import CancellationHandle, PendingRequestRegistry
from .core.client import RequestClient
from .factory import create_client

__all__ = [
    # Types
    "Blob",
    "FailureOutcome",
    "FormData",
    "HttpMethod",
    "LogSink",
    "RequestOptions",
    "RequestOutcome",
    "is_failure",
    # Errors
    "CancellationFailure",
    "ConfigurationError",
    "DecodeFailure",
    "EncodeFailure",
    "FetchError",
    "HttpStatusFailure",
    "TransportFailure",
    # Config
    "ClientConfig",
    "ResolvedConfig",
    "resolve_config",
    "BackoffStrategy",
    "RetryPolicy",
    "calculate_delay",
    # Diagnostics
    "LoggerSink",
    "RichConsoleSink",
    "format_log_line",
    # Client
    "CancellationHandle",
    "PendingRequestRegistry",
    "RequestClient",
    "create_client",
]

__version__ = "0.1.0"
