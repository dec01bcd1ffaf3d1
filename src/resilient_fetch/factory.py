"""
Factory functions for creating request clients.
"""
from typing import Optional

import httpx

from .config import ClientConfig
from .core.client import RequestClient
from .retry import RetryPolicy
from .types import LogSink


def create_client(
    base_url: str,
    *,
    token: Optional[str] = None,
    log_requests: bool = False,
    timeout_ms: int = 0,
    retries: int = 0,
    retry_policy: Optional[RetryPolicy] = None,
    httpx_client: Optional[httpx.AsyncClient] = None,
    log_sink: Optional[LogSink] = None,
) -> RequestClient:
    """
    Create a RequestClient from keyword arguments.

    Example:
        api = create_client("https://api.example.com", token="abc", timeout_ms=5000, retries=2)
        user = await api.get("/users/1")
    """
    config = ClientConfig(
        token=token,
        log_requests=log_requests,
        timeout_ms=timeout_ms,
        retries=retries,
        retry_policy=retry_policy or RetryPolicy(),
    )
    return RequestClient(
        base_url,
        config,
        httpx_client=httpx_client,
        log_sink=log_sink,
    )
