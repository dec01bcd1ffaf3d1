"""
Type definitions for resilient_fetch.
"""
from dataclasses import dataclass, field
from typing import (
    Any,
    Dict,
    List,
    Literal,
    Mapping,
    Optional,
    Protocol,
    Sequence,
    Tuple,
    TypedDict,
    Union,
)


# HTTP methods exposed by the client
HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE"]

# Methods whose data argument never becomes a request body
BODYLESS_METHODS = ("GET", "DELETE")

# Tags written to the log sink instead of a status code
LogTag = Literal["ABORT", "RETRY", "ERROR"]

# Why a request settled with a failure outcome
FailureReason = Literal[
    "cancelled",
    "timeout",
    "transport",
    "http_status",
    "decode",
    "encode",
]

QueryValue = Union[str, int, float, bool, None]
QueryParams = Mapping[str, Union[QueryValue, Sequence[QueryValue]]]


@dataclass
class Blob:
    """Binary payload with an optional MIME type."""

    data: bytes
    content_type: Optional[str] = None

    def __len__(self) -> int:
        return len(self.data)


@dataclass
class FormData:
    """Multipart form payload.

    Fields are plain name/value pairs; files are
    ``(name, filename, content, content_type)`` tuples. Order is preserved.
    """

    fields: List[Tuple[str, str]] = field(default_factory=list)
    files: List[Tuple[str, str, bytes, Optional[str]]] = field(default_factory=list)

    def append(self, name: str, value: str) -> "FormData":
        self.fields.append((name, value))
        return self

    def append_file(
        self,
        name: str,
        filename: str,
        content: bytes,
        content_type: Optional[str] = None,
    ) -> "FormData":
        self.files.append((name, filename, content, content_type))
        return self


Payload = Union[Blob, FormData, bytes, str, Mapping[str, Any], List[Any], Tuple[Any, ...], None]


class RequestOptions(TypedDict, total=False):
    """Per-call overrides of the client defaults."""

    token: Optional[str]
    timeout_ms: int
    retries: int
    log: bool
    headers: Dict[str, str]


class _FailureOutcomeRequired(TypedDict):
    result: Literal["nok"]
    message: str


class FailureOutcome(_FailureOutcomeRequired, total=False):
    """Settled value returned instead of raising on runtime failures."""

    reason: FailureReason
    status: int


# Success values are the decoded body: dict/list, str, Blob or bytes
RequestOutcome = Union[Dict[str, Any], List[Any], str, Blob, bytes, FailureOutcome, None]


def is_failure(outcome: Any) -> bool:
    """Return True when ``outcome`` is a failure outcome."""
    return isinstance(outcome, dict) and outcome.get("result") == "nok"


class LogSink(Protocol):
    """Receives one record per request attempt."""

    def __call__(
        self,
        method: str,
        path: str,
        status: Union[int, LogTag],
        attempt: int,
        duration_ms: float,
    ) -> None:
        ...
