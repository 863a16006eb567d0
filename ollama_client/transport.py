"""
Transport - one HTTP exchange per call, shared by every operation.

All requests go through Transport.exchange(). It builds the request, checks
the status before decoding, and routes every failure through
translate_failure() so callers always see an OllamaClientError carrying the
request's method and URL.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Type, Union

import httpx
from pydantic import BaseModel, ValidationError

from ollama_client.errors import (
    OllamaClientResponseError,
    OllamaConfigurationError,
    translate_failure,
)
from ollama_client.schema import ErrorMessage, Payload
from ollama_client.streaming import DecodedStream

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"
BINARY_CONTENT_TYPE = "application/octet-stream"


class Decode(str, Enum):
    """How to treat the body of a successful response."""
    STATUS = "status"  # discard body, return status code only
    JSON = "json"      # whole body is one record
    STREAM = "stream"  # one record per line, read lazily


@dataclass(frozen=True)
class ExchangeResult:
    status_code: int
    body: Any = None  # record for JSON, DecodedStream for STREAM, None for STATUS


def parse_error_message(response: httpx.Response) -> str:
    """Extract the server's error message from a non-2xx response."""
    try:
        return ErrorMessage.model_validate_json(response.content).error
    except ValidationError:
        logger.warning(
            "Unparseable error body from %s (HTTP %d)",
            response.request.url, response.status_code,
        )
        text = response.text[:200]
        return text or f"HTTP {response.status_code}"


class Transport:
    """
    Issues requests against a fixed host using one shared httpx.Client.

    Connection reuse is left entirely to httpx.
    """

    def __init__(self, host: str, client: httpx.Client):
        self._host = host
        self._client = client

    @property
    def host(self) -> str:
        return self._host

    def url(self, path: str) -> str:
        return f"{self._host}{path}"

    def build_request(
        self,
        method: str,
        path: str,
        body: Union[Payload, bytes, None] = None,
    ) -> httpx.Request:
        headers = {"Accept": JSON_CONTENT_TYPE}
        content = None
        if isinstance(body, Payload):
            headers["Content-Type"] = JSON_CONTENT_TYPE
            content = body.to_json()
        elif body is not None:
            headers["Content-Type"] = BINARY_CONTENT_TYPE
            content = body
        return self._client.build_request(method, self.url(path), headers=headers, content=content)

    def exchange(
        self,
        method: str,
        path: str,
        body: Union[Payload, bytes, None] = None,
        decode: Decode = Decode.JSON,
        record_type: Optional[Type[BaseModel]] = None,
    ) -> ExchangeResult:
        """
        Perform one HTTP exchange.

        For Decode.STREAM the call returns as soon as status and headers are
        in; the open body is handed to the returned DecodedStream.
        For Decode.STATUS the status code is returned as-is, including
        non-2xx codes, and the body is discarded.

        Raises:
            OllamaClientResponseError: Non-2xx status on a JSON/STREAM exchange
            OllamaClientRequestError: Connection, timeout or protocol failure
            OllamaConfigurationError: The request could not be built (e.g. invalid URL)
            OllamaClientError: Anything else (undecodable body, interruption)
        """
        request = None
        response = None
        handed_off = False
        try:
            request = self.build_request(method, path, body)
            response = self._client.send(request, stream=True)
            logger.debug("%s %s -> %d", method, request.url, response.status_code)

            if decode is Decode.STATUS:
                return ExchangeResult(response.status_code)

            if not response.is_success:
                response.read()
                raise OllamaClientResponseError(
                    parse_error_message(response),
                    response.status_code,
                    method,
                    str(request.url),
                )

            if decode is Decode.STREAM:
                stream = DecodedStream(response, record_type, request)
                handed_off = True
                return ExchangeResult(response.status_code, stream)

            response.read()
            return ExchangeResult(
                response.status_code,
                record_type.model_validate_json(response.content),
            )
        except Exception as e:
            if request is None:
                raise OllamaConfigurationError(
                    f"Cannot build request: {e}", method, self.url(path)
                ) from e
            translate_failure(request, e)
        finally:
            if response is not None and not handed_off:
                response.close()
