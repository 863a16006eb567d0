"""
Error taxonomy and failure translation for ollama-client.

Every failure surfaced to a caller is an OllamaClientError tagged with an
ErrorKind, so callers can switch on `err.kind` instead of inspecting types.
Low-level failures are tagged once by classify_failure() and translated by
translate_failure(), which always raises.
"""

from enum import Enum
from typing import NoReturn, Optional

import httpx


class ErrorKind(str, Enum):
    REQUEST = "request"              # network / IO level, caller may retry
    RESPONSE = "response"            # server answered non-2xx with a message
    CLIENT = "client"                # interrupted, malformed stream, no result
    CONFIGURATION = "configuration"  # bad host or argument, no I/O attempted


class OllamaClientError(Exception):
    """Generic client failure. Base class for all ollama-client errors."""

    kind: ErrorKind = ErrorKind.CLIENT

    def __init__(
        self,
        message: str,
        method: Optional[str] = None,
        url: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.method = method
        self.url = url

    def __str__(self) -> str:
        if self.method and self.url:
            return f"{self.message} [{self.method} {self.url}]"
        return self.message


class OllamaClientRequestError(OllamaClientError):
    """The HTTP exchange itself failed (connection refused, timeout, protocol)."""

    kind = ErrorKind.REQUEST

    def __init__(self, message: str, method: str, url: str):
        super().__init__(message, method=method, url=url)


class OllamaClientResponseError(OllamaClientError):
    """The server returned a non-success status with an error message."""

    kind = ErrorKind.RESPONSE

    def __init__(
        self,
        message: str,
        status_code: int,
        method: Optional[str] = None,
        url: Optional[str] = None,
    ):
        super().__init__(message, method=method, url=url)
        self.status_code = status_code

    def __str__(self) -> str:
        return f"HTTP {self.status_code}: {super().__str__()}"


class OllamaConfigurationError(OllamaClientError, ValueError):
    """Invalid host or argument supplied by the caller."""

    kind = ErrorKind.CONFIGURATION


def require(value, name: str):
    """Return value, or raise OllamaConfigurationError if it is None."""
    if value is None:
        raise OllamaConfigurationError(f"{name} must not be None")
    return value


# ─────────────────────────────────────────────────────────────────────
# FAILURE TRANSLATION
# ─────────────────────────────────────────────────────────────────────

class FailureKind(str, Enum):
    TRANSLATED = "translated"    # already an OllamaClientError
    INTERRUPTED = "interrupted"
    IO = "io"
    UNKNOWN = "unknown"


def classify_failure(exc: BaseException) -> FailureKind:
    """Tag a raw failure caught around an HTTP exchange or stream read."""
    if isinstance(exc, OllamaClientError):
        return FailureKind.TRANSLATED
    # InterruptedError is an OSError, so it must be checked before IO
    if isinstance(exc, (InterruptedError, httpx.StreamClosed)):
        return FailureKind.INTERRUPTED
    if isinstance(exc, (httpx.TransportError, OSError)):
        return FailureKind.IO
    return FailureKind.UNKNOWN


def translate_failure(request: httpx.Request, exc: BaseException) -> NoReturn:
    """
    Raise the typed error for a failure of `request`.

    Errors that are already translated (e.g. a response error decoded from a
    non-2xx body) are re-raised unchanged. Everything else is wrapped with the
    request's method and URL, keeping the original as __cause__.
    """
    kind = classify_failure(exc)
    if kind is FailureKind.TRANSLATED:
        raise exc

    method = request.method
    url = str(request.url)
    detail = str(exc) or type(exc).__name__

    if kind is FailureKind.IO:
        raise OllamaClientRequestError(detail, method, url) from exc
    if kind is FailureKind.INTERRUPTED:
        raise OllamaClientError(f"Operation interrupted: {detail}", method, url) from exc
    raise OllamaClientError(detail, method, url) from exc
