"""
Lazy NDJSON decoding of an open response body.

A DecodedStream owns one httpx.Response that is still being received.
Each next() reads one more line and validates it as a single record, so a
caller can stop at any point without the rest of the body being buffered.
Closing the stream (explicitly or by leaving its `with` block) releases the
connection; that is the only way to cancel.
"""

import logging
from typing import Generic, Iterator, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from ollama_client.errors import OllamaClientError, translate_failure

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=BaseModel)


class DecodedStream(Generic[R]):
    """
    Forward-only, single-pass sequence of records from one response.

    Not restartable: once exhausted or closed, iteration just ends.
    Reissue the request to read the records again.
    """

    def __init__(self, response: httpx.Response, record_type: Type[R], request: httpx.Request):
        self._response = response
        self._record_type = record_type
        self._request = request
        self._lines: Optional[Iterator[str]] = None
        self._closed = False
        self.records_read = 0

    @property
    def status_code(self) -> int:
        return self._response.status_code

    @property
    def closed(self) -> bool:
        return self._closed

    def __iter__(self) -> "DecodedStream[R]":
        return self

    def __next__(self) -> R:
        if self._closed:
            raise StopIteration
        if self._lines is None:
            self._lines = self._response.iter_lines()

        try:
            for line in self._lines:
                if not line.strip():
                    continue
                try:
                    record = self._record_type.model_validate_json(line)
                except ValidationError as e:
                    raise OllamaClientError(
                        f"Malformed {self._record_type.__name__} record: {line[:200]!r}",
                        self._request.method,
                        str(self._request.url),
                    ) from e
                self.records_read += 1
                return record
        except Exception as e:
            self.close()
            translate_failure(self._request, e)

        logger.debug("Stream exhausted after %d records: %s", self.records_read, self._request.url)
        self.close()
        raise StopIteration

    def first(self) -> R:
        """
        Return the first record and release the stream.

        Raises:
            OllamaClientError: If the body contained no records
        """
        try:
            return next(self)
        except StopIteration:
            raise OllamaClientError(
                "No result returned", self._request.method, str(self._request.url)
            ) from None
        finally:
            self.close()

    def close(self) -> None:
        """Release the response body. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        if self._lines is not None and hasattr(self._lines, "close"):
            self._lines.close()
        self._response.close()

    def __enter__(self) -> "DecodedStream[R]":
        return self

    def __exit__(self, *exc_info) -> None:
        if not self._closed:
            logger.debug("Stream closed after %d records: %s", self.records_read, self._request.url)
        self.close()
