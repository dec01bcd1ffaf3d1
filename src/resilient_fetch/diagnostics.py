"""
Diagnostic output for request attempts.

A log sink receives ``(method, path, status, attempt, duration_ms)`` once per
attempt. ``LoggerSink`` writes through the standard logging module and
``RichConsoleSink`` prints a coloured line with rich.
"""
import logging
from typing import Dict, Mapping, Optional, Union

from rich.console import Console
from rich.markup import escape

REQUEST_LOGGER_NAME = "resilient_fetch.requests"

_SENSITIVE_HEADERS = ("authorization", "x-api-key")


def format_log_line(
    method: str,
    path: str,
    status: Union[int, str],
    attempt: int,
    duration_ms: float,
) -> str:
    """Format one attempt record. ``attempt`` is 0-indexed."""
    return (
        f"{method} {path} | Status: {status} | Attempt: {attempt + 1} "
        f"| Duration: {round(duration_ms)}ms"
    )


def mask_auth_header(value: str, visible_chars: int = 15) -> str:
    """Mask an auth header value, keeping its first characters."""
    if len(value) <= visible_chars:
        return "*" * len(value)
    return value[:visible_chars] + "*" * (len(value) - visible_chars)


def mask_headers_for_logging(headers: Mapping[str, str]) -> Dict[str, str]:
    """Copy of ``headers`` with credentials masked."""
    masked = dict(headers)
    for key in masked:
        if key.lower() in _SENSITIVE_HEADERS:
            masked[key] = mask_auth_header(masked[key])
    return masked


class LoggerSink:
    """Write attempt records to a ``logging.Logger`` at INFO level."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger(REQUEST_LOGGER_NAME)

    def __call__(
        self,
        method: str,
        path: str,
        status: Union[int, str],
        attempt: int,
        duration_ms: float,
    ) -> None:
        self._logger.info(format_log_line(method, path, status, attempt, duration_ms))


class RichConsoleSink:
    """Print attempt records to a rich console, coloured by outcome."""

    def __init__(self, console: Optional[Console] = None):
        self._console = console or Console(stderr=True)

    @staticmethod
    def _color(status: Union[int, str]) -> str:
        if isinstance(status, int):
            return "green" if 200 <= status < 300 else "red"
        if status in ("ABORT", "RETRY"):
            return "yellow"
        return "red"

    def __call__(
        self,
        method: str,
        path: str,
        status: Union[int, str],
        attempt: int,
        duration_ms: float,
    ) -> None:
        color = self._color(status)
        self._console.print(
            f"[bold cyan]{method}[/bold cyan] {escape(path)} "
            f"| Status: [bold {color}]{status}[/bold {color}] "
            f"| Attempt: {attempt + 1} | Duration: {round(duration_ms)}ms",
            highlight=False,
        )
