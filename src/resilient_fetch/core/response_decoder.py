"""
Response decoding by declared content-type.
"""
import json
from typing import Any

import httpx

from ..errors import DecodeFailure, HttpStatusFailure
from ..types import Blob


def ensure_success(response: httpx.Response) -> None:
    """Raise HttpStatusFailure for responses outside the 2xx range."""
    if response.is_success:
        return
    raise HttpStatusFailure(
        status=response.status_code,
        status_text=response.reason_phrase or "",
        headers=dict(response.headers),
        body=response.text,
    )


def decode_response(response: httpx.Response) -> Any:
    """Decode the body of a successful response.

    - ``application/json``: parsed JSON
    - ``text/plain``: str
    - ``application/octet-stream``: Blob
    - anything else: raw bytes
    """
    content_type = response.headers.get("content-type", "")

    if "application/json" in content_type:
        try:
            return json.loads(response.content)
        except ValueError as e:
            raise DecodeFailure(f"Invalid JSON response body: {e}") from e

    if "text/plain" in content_type:
        return response.text

    if "application/octet-stream" in content_type:
        return Blob(data=response.content, content_type=content_type)

    return response.content
