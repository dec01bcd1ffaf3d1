"""
Core modules for resilient_fetch.
"""
from .cancellation import CancellationHandle, PendingRequestRegistry
from .client import RequestClient
from .request_builder import (
    RequestBody,
    build_body,
    build_headers,
    build_url,
    request_key,
)
from .response_decoder import decode_response, ensure_success

__all__ = [
    "CancellationHandle",
    "PendingRequestRegistry",
    "RequestClient",
    "RequestBody",
    "build_body",
    "build_headers",
    "build_url",
    "request_key",
    "decode_response",
    "ensure_success",
]
