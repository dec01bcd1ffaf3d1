"""
Configuration for resilient_fetch.
"""
import logging
import re
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import urlparse

from .errors import ConfigurationError
from .retry import RetryPolicy

logger = logging.getLogger("resilient_fetch.config")

_ABSOLUTE_HTTP_URL = re.compile(r"^https?://")


@dataclass(frozen=True)
class ClientConfig:
    """Client-wide defaults.

    ``timeout_ms`` of 0 disables the timeout. ``token`` is only the initial
    value; the client exposes a settable ``token`` property afterwards.
    """

    token: Optional[str] = None
    log_requests: bool = False
    timeout_ms: int = 0
    retries: int = 0
    retry_policy: RetryPolicy = field(default_factory=RetryPolicy)


@dataclass(frozen=True)
class ResolvedConfig:
    """Validated configuration with the base URL attached."""

    base_url: str
    token: Optional[str]
    log_requests: bool
    timeout_ms: int
    retries: int
    retry_policy: RetryPolicy


def validate_base_url(base_url: object) -> str:
    """Return ``base_url`` if it is an absolute http(s) URL."""
    if not base_url or not isinstance(base_url, str):
        raise ConfigurationError("Invalid base_url: a non-empty string is required")

    if not _ABSOLUTE_HTTP_URL.match(base_url):
        raise ConfigurationError(f"Invalid base_url: {base_url!r}")

    try:
        parsed = urlparse(base_url)
    except ValueError as e:
        raise ConfigurationError(f"Invalid base_url: {base_url!r}") from e
    if not parsed.netloc:
        raise ConfigurationError(f"Invalid base_url: {base_url!r}")

    return base_url


def _validate_non_negative_int(name: str, value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigurationError(f"{name} must be a non-negative integer, got {value!r}")
    return value


def validate_config(config: ClientConfig) -> None:
    """Validate client configuration."""
    _validate_non_negative_int("timeout_ms", config.timeout_ms)
    _validate_non_negative_int("retries", config.retries)

    policy = config.retry_policy
    if policy.delay_ms < 0 or policy.max_delay_ms < 0:
        raise ConfigurationError("retry_policy delays must be non-negative")
    if not 0 <= policy.jitter_factor <= 1:
        raise ConfigurationError("retry_policy.jitter_factor must be between 0 and 1")


def resolve_config(base_url: str, config: Optional[ClientConfig] = None) -> ResolvedConfig:
    """Resolve client configuration with defaults."""
    config = config or ClientConfig()
    validate_base_url(base_url)
    validate_config(config)

    logger.debug(
        f"resolve_config: base_url={base_url}, timeout_ms={config.timeout_ms}, "
        f"retries={config.retries}, log_requests={config.log_requests}"
    )

    return ResolvedConfig(
        base_url=base_url,
        token=config.token,
        log_requests=bool(config.log_requests),
        timeout_ms=config.timeout_ms,
        retries=config.retries,
        retry_policy=config.retry_policy,
    )
