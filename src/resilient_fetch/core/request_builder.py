"""
Request builder utilities for resilient_fetch.
"""
import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Union
from urllib.parse import urlencode, urljoin, urlsplit, urlunsplit

import httpx

from ..errors import EncodeFailure
from ..types import BODYLESS_METHODS, Blob, FormData, QueryParams

logger = logging.getLogger("resilient_fetch.request_builder")

OCTET_STREAM = "application/octet-stream"
MULTIPART_FORM_DATA = "multipart/form-data"


@dataclass
class RequestBody:
    """Encoded body ready to hand to httpx.

    ``content_type`` is None when no header should be computed, which is the
    case for multipart bodies where httpx adds the boundary itself.
    """

    content: Optional[Union[str, bytes]] = None
    files: Optional[List[Tuple[str, Tuple[Optional[str], Any, Optional[str]]]]] = None
    content_type: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.content is None and self.files is None


EMPTY_BODY = RequestBody()


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_url(
    base_url: str,
    path: str,
    params: Optional[QueryParams] = None,
) -> str:
    """Resolve ``path`` against ``base_url`` and append query parameters.

    Sequence values are emitted as repeated parameters
    (``id=1&id=2``); ``None`` values are skipped. ``params`` that are not a
    mapping are ignored.
    """
    url = urljoin(base_url, path) if path else base_url

    # bare origin resolves to its root path
    parts = urlsplit(url)
    if not parts.path:
        url = urlunsplit(parts._replace(path="/"))

    if params is not None and not isinstance(params, Mapping):
        logger.debug(f"build_url: ignoring non-mapping params of type {type(params).__name__}")
        params = None

    if params:
        pairs: List[Tuple[str, str]] = []
        for key, value in params.items():
            if isinstance(value, (list, tuple)):
                pairs.extend((key, _query_value(v)) for v in value if v is not None)
            elif value is not None:
                pairs.append((key, _query_value(value)))
        if pairs:
            separator = "&" if "?" in url else "?"
            url = f"{url}{separator}{urlencode(pairs)}"

    return url


def request_key(method: str, url: str) -> str:
    """Registry key identifying a logical request."""
    return f"{method.upper()}::{url}"


def build_body(method: str, data: Any = None) -> RequestBody:
    """Select body encoding and content-type from the payload type."""
    if data is None or method.upper() in BODYLESS_METHODS:
        return EMPTY_BODY

    if isinstance(data, FormData):
        files = [(name, (None, value, None)) for name, value in data.fields]
        files.extend(
            (name, (filename, content, content_type))
            for name, filename, content, content_type in data.files
        )
        return RequestBody(files=files)

    if isinstance(data, Blob):
        return RequestBody(content=data.data, content_type=data.content_type or OCTET_STREAM)

    if isinstance(data, (bytes, bytearray, memoryview)):
        return RequestBody(content=bytes(data), content_type=OCTET_STREAM)

    if isinstance(data, str):
        return RequestBody(content=data, content_type="text/plain")

    if isinstance(data, (Mapping, list, tuple)):
        try:
            return RequestBody(content=json.dumps(data), content_type="application/json")
        except (TypeError, ValueError) as e:
            raise EncodeFailure(f"Payload is not JSON serializable: {e}") from e

    raise EncodeFailure(f"Unsupported payload type: {type(data).__name__}")


def build_headers(
    default_token: Optional[str] = None,
    token: Optional[str] = None,
    headers: Optional[Dict[str, str]] = None,
    content_type: Optional[str] = None,
) -> httpx.Headers:
    """Merge request headers.

    Later sources win: instance token, per-call token, per-call headers. The
    computed content-type only applies when no per-call header sets it.
    """
    result = httpx.Headers()

    if default_token:
        result["Authorization"] = f"Bearer {default_token}"
    if token:
        result["Authorization"] = f"Bearer {token}"
    if headers:
        result.update(headers)

    if content_type and "content-type" not in result:
        result["Content-Type"] = content_type

    return result
