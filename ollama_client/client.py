"""
OllamaClient - entry point for talking to an Ollama server.

Simple operations (list, show, copy, ...) execute immediately. Operations
with optional parameters return a spec from ollama_client.specs that is
configured by chaining and then submitted with stream()/batch()/get().

Usage:
    with OllamaClient("http://localhost:11434") as client:
        for chunk in client.generate("llama2", "Why is the sky blue?").stream():
            print(chunk.response, end="")

        reply = client.chat("llama2", Message.user("hi")).options(temperature=0).batch()
"""

import logging
from pathlib import Path
from typing import Optional, Type, Union

import httpx
from pydantic import BaseModel

from ollama_client.config import (
    COPY_PATH,
    DELETE_PATH,
    LIST_PATH,
    LOAD_DONE_REASON,
    PING_PATH,
    PS_PATH,
    SHOW_PATH,
    Redirect,
    get_default_host,
    get_timeout_seconds,
    normalize_host,
)
from ollama_client.errors import (
    OllamaClientError,
    OllamaClientRequestError,
    OllamaConfigurationError,
    require,
)
from ollama_client.schema import (
    CopyRequest,
    DeleteRequest,
    ListModel,
    ListModels,
    Message,
    Payload,
    ProcessModel,
    ProcessModels,
    ShowRequest,
    ShowResponse,
)
from ollama_client.specs import (
    BlobsSpec,
    ChatSpec,
    CreateSpec,
    EmbeddingsSpec,
    GenerateSpec,
    PullSpec,
)
from ollama_client.streaming import DecodedStream
from ollama_client.transport import Decode, ExchangeResult, Transport

logger = logging.getLogger(__name__)


def _refuse_https_downgrade(response: httpx.Response) -> None:
    """Response hook for Redirect.NORMAL: never follow HTTPS -> HTTP."""
    if not response.has_redirect_location:
        return
    source = response.request.url
    target = source.join(response.headers["Location"])
    if source.scheme == "https" and target.scheme == "http":
        raise OllamaClientRequestError(
            f"Refusing redirect from HTTPS to HTTP: {target}",
            response.request.method,
            str(source),
        )


class OllamaClient:
    """
    Synchronous client for the Ollama HTTP API.

    Holds one httpx.Client shared by all calls and no other mutable
    state, so a single instance can serve several threads. Specs and
    streams it hands out are single-owner and must not be shared.
    """

    def __init__(
        self,
        host: Optional[str] = None,
        timeout: Optional[float] = None,
        connect_timeout: Optional[float] = None,
        redirect: Redirect = Redirect.NEVER,
        http_client: Optional[httpx.Client] = None,
    ):
        """
        Args:
            host: Base URL. Defaults to OLLAMA_HOST or http://localhost:11434
            timeout: Read/write timeout in seconds. Defaults to OLLAMA_TIMEOUT_SECONDS
            connect_timeout: Connect timeout in seconds. Defaults to timeout
            redirect: Redirect policy
            http_client: Pre-built httpx.Client; timeout and redirect are ignored

        Raises:
            OllamaConfigurationError: If host is not an http(s) URL
        """
        self._host = normalize_host(host) if host is not None else get_default_host()

        if http_client is None:
            timeout = timeout if timeout is not None else get_timeout_seconds()
            event_hooks = {"response": [_refuse_https_downgrade]} if redirect is Redirect.NORMAL else {}
            if connect_timeout is None:
                timeouts = httpx.Timeout(timeout)
            else:
                timeouts = httpx.Timeout(timeout, connect=connect_timeout)
            http_client = httpx.Client(
                timeout=timeouts,
                follow_redirects=redirect is not Redirect.NEVER,
                event_hooks=event_hooks,
            )
        self._transport = Transport(self._host, http_client)
        self._http = http_client

    @staticmethod
    def builder(host: Optional[str] = None) -> "ClientBuilder":
        return ClientBuilder(host)

    @property
    def host(self) -> str:
        return self._host

    # ─────────────────────────────────────────────────────────────────
    # INTERNAL DISPATCH (used by specs)
    # ─────────────────────────────────────────────────────────────────

    def _exchange(
        self,
        method: str,
        path: str,
        body: Union[Payload, bytes, None] = None,
        decode: Decode = Decode.JSON,
        record_type: Optional[Type[BaseModel]] = None,
    ) -> ExchangeResult:
        return self._transport.exchange(method, path, body, decode=decode, record_type=record_type)

    def _stream(self, path: str, payload: Payload, record_type: Type[BaseModel]) -> DecodedStream:
        return self._exchange("POST", path, payload, decode=Decode.STREAM, record_type=record_type).body

    # ─────────────────────────────────────────────────────────────────
    # OPERATIONS
    # ─────────────────────────────────────────────────────────────────

    def ping(self) -> bool:
        """
        Return True if the server answers GET / with HTTP 200.

        Never raises: unreachable hosts and error statuses both count as down.
        """
        try:
            return self._exchange("GET", PING_PATH, decode=Decode.STATUS).status_code == 200
        except OllamaClientError as e:
            logger.debug("Ping failed for %s: %s", self._host, e)
            return False

    def list(self) -> ListModels:
        """Models available locally."""
        return self._exchange("GET", LIST_PATH, record_type=ListModels).body

    def find_model(self, name: str) -> Optional[ListModel]:
        require(name, "name")
        return next((m for m in self.list().models if m.name == name), None)

    def ps(self) -> ProcessModels:
        """Models currently loaded into memory."""
        return self._exchange("GET", PS_PATH, record_type=ProcessModels).body

    def find_running(self, name: str) -> Optional[ProcessModel]:
        require(name, "name")
        return next((m for m in self.ps().models if m.name == name), None)

    def show(self, name: str) -> ShowResponse:
        require(name, "name")
        return self._exchange("POST", SHOW_PATH, ShowRequest(name=name), record_type=ShowResponse).body

    def load(self, model: str) -> bool:
        """
        Ask the server to load `model` into memory.

        Sends an empty-prompt generate; the server reports done_reason
        "load" when it only loaded the model. That is a server convention,
        not something the client can verify independently.
        """
        return self.generate(model, "").batch().done_reason == LOAD_DONE_REASON

    def generate(self, model: str, prompt: str) -> GenerateSpec:
        return GenerateSpec(self, model, prompt)

    def chat(self, model: str, message: Union[Message, str], *messages: Message) -> ChatSpec:
        if isinstance(message, str):
            message = Message.user(message)
        return ChatSpec(self, model, message, *messages)

    def embeddings(self, model: str, prompt: str) -> EmbeddingsSpec:
        return EmbeddingsSpec(self, model, prompt)

    def pull(self, name: str) -> PullSpec:
        return PullSpec(self, name)

    def create(self, name: str, modelfile: str) -> CreateSpec:
        return CreateSpec(self, name, modelfile)

    def create_from_path(self, name: str, path: Union[str, Path]) -> CreateSpec:
        """Create a model from a modelfile on disk."""
        require(path, "path")
        path = Path(path)
        return CreateSpec(self, name, path.read_text(encoding="utf-8"), path=path)

    def copy(self, source: str, destination: str) -> int:
        """Copy a model. Returns the HTTP status code."""
        request = CopyRequest(source=require(source, "source"), destination=require(destination, "destination"))
        return self._exchange("POST", COPY_PATH, request, decode=Decode.STATUS).status_code

    def delete(self, name: str) -> int:
        """Delete a model. Returns the HTTP status code."""
        request = DeleteRequest(name=require(name, "name"))
        return self._exchange("DELETE", DELETE_PATH, request, decode=Decode.STATUS).status_code

    def blobs(self, digest: str) -> BlobsSpec:
        return BlobsSpec(self, digest)

    # ─────────────────────────────────────────────────────────────────
    # LIFECYCLE
    # ─────────────────────────────────────────────────────────────────

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "OllamaClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class ClientBuilder:
    """
    Fluent configuration for OllamaClient.

    Usage:
        client = OllamaClient.builder("http://gpu-box:11434") \\
            .follow_redirects() \\
            .connect_timeout(5) \\
            .build()
    """

    def __init__(self, host: Optional[str] = None):
        self._host = normalize_host(host) if host is not None else get_default_host()
        self._redirect = Redirect.NEVER
        self._timeout: Optional[float] = None
        self._connect_timeout: Optional[float] = None

    def follow_redirects(self, redirect: Redirect = Redirect.NORMAL) -> "ClientBuilder":
        self._redirect = Redirect(require(redirect, "redirect"))
        return self

    def connect_timeout(self, seconds: float) -> "ClientBuilder":
        self._connect_timeout = self._positive(seconds, "connect_timeout")
        return self

    def timeout(self, seconds: float) -> "ClientBuilder":
        self._timeout = self._positive(seconds, "timeout")
        return self

    @staticmethod
    def _positive(seconds: float, name: str) -> float:
        require(seconds, name)
        if seconds <= 0:
            raise OllamaConfigurationError(f"{name} must be positive, got {seconds}")
        return float(seconds)

    def build(self) -> OllamaClient:
        return OllamaClient(
            self._host,
            timeout=self._timeout,
            connect_timeout=self._connect_timeout,
            redirect=self._redirect,
        )
