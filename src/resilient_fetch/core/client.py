"""
Request client with per-endpoint cancellation, timeouts and retries.
"""
import asyncio
import logging
import os
import time
from typing import Any, List, Optional, Tuple, Union

import httpx

from ..config import ClientConfig, ResolvedConfig, resolve_config
from ..diagnostics import LoggerSink, mask_headers_for_logging
from ..errors import CancellationFailure, FetchError, TransportFailure
from ..retry import calculate_delay
from ..types import (
    HttpMethod,
    LogSink,
    LogTag,
    Payload,
    QueryParams,
    RequestOptions,
    RequestOutcome,
)
from .cancellation import CancellationHandle, PendingRequestRegistry
from .request_builder import RequestBody, build_body, build_headers, build_url, request_key
from .response_decoder import decode_response, ensure_success

logger = logging.getLogger("resilient_fetch.client")


def _is_ssl_verify_disabled_by_env() -> bool:
    """
    Check if SSL verification is disabled via environment variables.

    Returns True if any of these are set:
    - NODE_TLS_REJECT_UNAUTHORIZED=0
    - SSL_CERT_VERIFY=0
    """
    node_tls = os.environ.get("NODE_TLS_REJECT_UNAUTHORIZED", "")
    ssl_cert_verify = os.environ.get("SSL_CERT_VERIFY", "")
    return node_tls == "0" or ssl_cert_verify == "0"


class RequestClient:
    """Asynchronous HTTP client.

    Each call is identified by ``METHOD::url``. A new call under a key that is
    still in flight aborts the older one, which then settles with a
    cancellation outcome. Runtime failures are returned as
    ``{"result": "nok", "message": ...}``; only bad construction arguments
    raise.

    Example:
        async with RequestClient("https://api.example.com", ClientConfig(timeout_ms=5000)) as api:
            users = await api.get("/users", {"id": [1, 2]})
    """

    def __init__(
        self,
        base_url: str,
        config: Optional[ClientConfig] = None,
        *,
        httpx_client: Optional[httpx.AsyncClient] = None,
        log_sink: Optional[LogSink] = None,
    ):
        self._config = resolve_config(base_url, config)
        self._token = self._config.token
        self._log_sink = log_sink or LoggerSink()
        self._pending = PendingRequestRegistry()
        if httpx_client is not None:
            self._client = httpx_client
        else:
            # Check environment variables for SSL verification override
            # NODE_TLS_REJECT_UNAUTHORIZED=0 or SSL_CERT_VERIFY=0 will disable SSL verification
            verify_ssl = not _is_ssl_verify_disabled_by_env()
            # timeouts are enforced by the client, not the transport
            self._client = httpx.AsyncClient(
                timeout=None, verify=verify_ssl, follow_redirects=True
            )
        self._closed = False

    @property
    def token(self) -> Optional[str]:
        """Bearer token sent with requests issued from now on."""
        return self._token

    @token.setter
    def token(self, value: Optional[str]) -> None:
        self._token = value

    @property
    def base_url(self) -> str:
        return self._config.base_url

    @property
    def config(self) -> ResolvedConfig:
        return self._config

    def pending_keys(self) -> List[str]:
        """Keys of the requests currently in flight."""
        return self._pending.keys()

    async def request(
        self,
        method: HttpMethod,
        path: str,
        data: Payload = None,
        opts: Optional[RequestOptions] = None,
    ) -> RequestOutcome:
        """Run one logical request, retrying and cancelling as configured."""
        if self._closed:
            raise RuntimeError("Client has been closed")

        method = method.upper()
        opts = opts or {}
        url = build_url(self._config.base_url, path, data if method == "GET" else None)
        key = request_key(method, url)

        timeout_ms = opts.get("timeout_ms")
        if timeout_ms is None:
            timeout_ms = self._config.timeout_ms
        retries = opts.get("retries")
        if retries is None:
            retries = self._config.retries
        attempts = 1 + max(0, retries)
        force_log = bool(opts.get("log"))

        handle = self._pending.acquire(key)
        try:
            try:
                body = build_body(method, data)
            except FetchError as e:
                self._log(method, path, "ERROR", 0, force_log, time.monotonic())
                return e.to_outcome()

            headers = build_headers(
                self._token,
                opts.get("token"),
                opts.get("headers"),
                body.content_type,
            )
            logger.debug(
                f"RequestClient.request: {method} {url}, attempts={attempts}, "
                f"timeout_ms={timeout_ms}, headers={mask_headers_for_logging(headers)}"
            )

            return await self._run_attempts(
                handle, method, path, url, body, headers, attempts, timeout_ms, force_log
            )
        finally:
            self._pending.release(key, handle)

    async def _run_attempts(
        self,
        handle: CancellationHandle,
        method: str,
        path: str,
        url: str,
        body: RequestBody,
        headers: httpx.Headers,
        attempts: int,
        timeout_ms: int,
        force_log: bool,
    ) -> RequestOutcome:
        loop = asyncio.get_running_loop()

        for attempt in range(attempts):
            if attempt > 0:
                # No delay between attempts unless a retry policy sets one.
                delay = calculate_delay(attempt - 1, self._config.retry_policy)
                try:
                    await handle.sleep(delay)
                except CancellationFailure as e:
                    self._log(method, path, "ABORT", attempt, force_log, time.monotonic())
                    return e.to_outcome()

            start_time = time.monotonic()
            timer: Optional[asyncio.TimerHandle] = None
            try:
                if timeout_ms > 0:
                    timer = loop.call_later(
                        timeout_ms / 1000,
                        handle.abort,
                        "timeout",
                        f"Request timed out after {timeout_ms}ms",
                    )

                status, payload = await handle.run(self._dispatch(method, url, body, headers))

                self._log(method, path, status, attempt, force_log, start_time)
                return payload

            except CancellationFailure as e:
                self._log(method, path, "ABORT", attempt, force_log, start_time)
                return e.to_outcome()

            except FetchError as e:
                if e.retryable and attempt < attempts - 1:
                    logger.debug(f"RequestClient: attempt {attempt + 1} failed, retrying: {e}")
                    self._log(method, path, "RETRY", attempt, force_log, start_time)
                    continue

                self._log(method, path, "ERROR", attempt, force_log, start_time)
                return e.to_outcome()

            finally:
                if timer is not None:
                    timer.cancel()

        # Should not reach here, the last attempt always returns
        raise RuntimeError("Retry failed")

    async def _dispatch(
        self,
        method: str,
        url: str,
        body: RequestBody,
        headers: httpx.Headers,
    ) -> Tuple[int, Any]:
        """Send one attempt. Returns ``(status_code, decoded_body)``."""
        try:
            response = await self._client.request(
                method,
                url,
                headers=headers,
                content=body.content,
                files=body.files,
            )
        except (httpx.HTTPError, httpx.InvalidURL, OSError) as e:
            raise TransportFailure(str(e) or type(e).__name__) from e

        ensure_success(response)
        return response.status_code, decode_response(response)

    def _log(
        self,
        method: str,
        path: str,
        status: Union[int, LogTag],
        attempt: int,
        force_log: bool,
        start_time: float,
    ) -> None:
        if not self._config.log_requests and not force_log:
            return
        duration_ms = (time.monotonic() - start_time) * 1000
        self._log_sink(method, path, status, attempt, duration_ms)

    async def get(
        self,
        path: str,
        params: Optional[QueryParams] = None,
        opts: Optional[RequestOptions] = None,
    ) -> RequestOutcome:
        """GET request. ``params`` become query parameters."""
        return await self.request("GET", path, params, opts)

    async def post(
        self, path: str, data: Payload = None, opts: Optional[RequestOptions] = None
    ) -> RequestOutcome:
        """POST request."""
        return await self.request("POST", path, data, opts)

    async def put(
        self, path: str, data: Payload = None, opts: Optional[RequestOptions] = None
    ) -> RequestOutcome:
        """PUT request."""
        return await self.request("PUT", path, data, opts)

    async def patch(
        self, path: str, data: Payload = None, opts: Optional[RequestOptions] = None
    ) -> RequestOutcome:
        """PATCH request."""
        return await self.request("PATCH", path, data, opts)

    async def delete(self, path: str, opts: Optional[RequestOptions] = None) -> RequestOutcome:
        """DELETE request."""
        return await self.request("DELETE", path, None, opts)

    def abort_all(self) -> int:
        """Abort every in-flight request. Returns how many were aborted."""
        return self._pending.abort_all()

    async def close(self) -> None:
        """Abort pending requests and close the client."""
        self._closed = True
        self._pending.abort_all("closed")
        await self._client.aclose()

    async def __aenter__(self) -> "RequestClient":
        """Enter async context manager."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context manager."""
        await self.close()
