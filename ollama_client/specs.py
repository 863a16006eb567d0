"""
Request specs - staged builders for each operation family.

A spec is created by an OllamaClient factory method, configured through
chained setters, and consumed once by a terminal call (stream(), batch() or
get()). The terminal freezes the staged fields into an immutable request
payload before anything is sent, so changing the spec afterwards has no
effect on the dispatched request. Calling a terminal twice on the same spec
is a caller error and is not guarded against.
"""

from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

from ollama_client.config import (
    BLOBS_PATH,
    CHAT_PATH,
    CREATE_PATH,
    EMBEDDINGS_PATH,
    GENERATE_PATH,
    PULL_PATH,
)
from ollama_client.errors import OllamaConfigurationError, require
from ollama_client.schema import (
    ChatRequest,
    ChatResponse,
    CreateRequest,
    CreateResponse,
    EmbeddingsRequest,
    EmbeddingsResponse,
    Format,
    GenerateRequest,
    GenerateResponse,
    Message,
    Options,
    PullRequest,
    PullResponse,
)
from ollama_client.streaming import DecodedStream
from ollama_client.transport import Decode

if TYPE_CHECKING:
    from ollama_client.client import OllamaClient


def _build_options(options: Optional[Options], params: dict) -> Options:
    """Combine an Options instance and keyword overrides into one Options."""
    if options is None and not params:
        raise OllamaConfigurationError("options must not be None")
    if options is None:
        return Options(**params)
    if params:
        return Options(**{**options.model_dump(exclude_none=True), **params})
    return options


def _to_format(format: Union[Format, str]) -> Format:
    require(format, "format")
    try:
        return Format(format)
    except ValueError:
        raise OllamaConfigurationError(
            f"Unsupported format {format!r}, expected one of {[f.value for f in Format]}"
        ) from None


def _tuple_or_none(values: list) -> Optional[tuple]:
    return tuple(values) if values else None


# ─────────────────────────────────────────────────────────────────────
# GENERATE
# ─────────────────────────────────────────────────────────────────────

class GenerateSpec:
    """Builder for POST /api/generate."""

    def __init__(self, client: "OllamaClient", model: str, prompt: str):
        self._client = client
        self._model = require(model, "model")
        self._prompt = require(prompt, "prompt")
        self._images: list[str] = []
        self._format: Optional[Format] = None
        self._options: Optional[Options] = None
        self._system: Optional[str] = None
        self._template: Optional[str] = None
        self._context: list[int] = []
        self._raw: Optional[bool] = None
        self._keep_alive: Optional[str] = None

    def image(self, image: str) -> "GenerateSpec":
        """Attach one base64-encoded image."""
        self._images.append(require(image, "image"))
        return self

    def images(self, image: str, *images: str) -> "GenerateSpec":
        self._images.append(require(image, "image"))
        self._images.extend(require(i, "image") for i in images)
        return self

    def format(self, format: Format) -> "GenerateSpec":
        self._format = _to_format(format)
        return self

    def json(self) -> "GenerateSpec":
        return self.format(Format.JSON)

    def options(self, options: Optional[Options] = None, **params) -> "GenerateSpec":
        """Set runtime options, e.g. `.options(temperature=0.0, seed=42)`."""
        self._options = _build_options(options, params)
        return self

    def system(self, system: str) -> "GenerateSpec":
        self._system = require(system, "system")
        return self

    def template(self, template: str) -> "GenerateSpec":
        self._template = require(template, "template")
        return self

    def context(self, context: int, *contexts: int) -> "GenerateSpec":
        """Append context tokens returned by a previous generate call."""
        self._context.append(require(context, "context"))
        self._context.extend(require(c, "context") for c in contexts)
        return self

    def raw(self, raw: bool = True) -> "GenerateSpec":
        self._raw = require(raw, "raw")
        return self

    def keep_alive(self, keep_alive: str) -> "GenerateSpec":
        self._keep_alive = require(keep_alive, "keep_alive")
        return self

    def _freeze(self, stream: bool) -> GenerateRequest:
        return GenerateRequest(
            model=self._model,
            prompt=self._prompt,
            images=_tuple_or_none(self._images),
            format=self._format,
            options=self._options,
            system=self._system,
            template=self._template,
            context=_tuple_or_none(self._context),
            stream=stream,
            raw=self._raw,
            keep_alive=self._keep_alive,
        )

    def stream(self) -> DecodedStream[GenerateResponse]:
        """Stream response records as the model produces them."""
        return self._client._stream(GENERATE_PATH, self._freeze(True), GenerateResponse)

    def batch(self) -> GenerateResponse:
        """Return the complete response as a single record."""
        return self._client._stream(GENERATE_PATH, self._freeze(False), GenerateResponse).first()


# ─────────────────────────────────────────────────────────────────────
# CHAT
# ─────────────────────────────────────────────────────────────────────

class ChatSpec:
    """Builder for POST /api/chat."""

    def __init__(self, client: "OllamaClient", model: str, message: Message, *messages: Message):
        self._client = client
        self._model = require(model, "model")
        self._messages: list[Message] = [require(message, "message")]
        self._messages.extend(require(m, "message") for m in messages)
        self._format: Optional[Format] = None
        self._options: Optional[Options] = None
        self._keep_alive: Optional[str] = None

    def message(self, message: Union[Message, str]) -> "ChatSpec":
        """Append a message. Plain strings are sent as user messages."""
        require(message, "message")
        if isinstance(message, str):
            message = Message.user(message)
        self._messages.append(message)
        return self

    def format(self, format: Format) -> "ChatSpec":
        self._format = _to_format(format)
        return self

    def json(self) -> "ChatSpec":
        return self.format(Format.JSON)

    def options(self, options: Optional[Options] = None, **params) -> "ChatSpec":
        self._options = _build_options(options, params)
        return self

    def keep_alive(self, keep_alive: str) -> "ChatSpec":
        self._keep_alive = require(keep_alive, "keep_alive")
        return self

    def _freeze(self, stream: bool) -> ChatRequest:
        return ChatRequest(
            model=self._model,
            messages=tuple(self._messages),
            format=self._format,
            options=self._options,
            stream=stream,
            keep_alive=self._keep_alive,
        )

    def stream(self) -> DecodedStream[ChatResponse]:
        return self._client._stream(CHAT_PATH, self._freeze(True), ChatResponse)

    def batch(self) -> ChatResponse:
        return self._client._stream(CHAT_PATH, self._freeze(False), ChatResponse).first()


# ─────────────────────────────────────────────────────────────────────
# EMBEDDINGS
# ─────────────────────────────────────────────────────────────────────

class EmbeddingsSpec:
    """Builder for POST /api/embeddings."""

    def __init__(self, client: "OllamaClient", model: str, prompt: str):
        self._client = client
        self._model = require(model, "model")
        self._prompt = require(prompt, "prompt")
        self._options: Optional[Options] = None
        self._keep_alive: Optional[str] = None

    def options(self, options: Optional[Options] = None, **params) -> "EmbeddingsSpec":
        self._options = _build_options(options, params)
        return self

    def keep_alive(self, keep_alive: str) -> "EmbeddingsSpec":
        self._keep_alive = require(keep_alive, "keep_alive")
        return self

    def _freeze(self) -> EmbeddingsRequest:
        return EmbeddingsRequest(
            model=self._model,
            prompt=self._prompt,
            options=self._options,
            keep_alive=self._keep_alive,
        )

    def get(self) -> EmbeddingsResponse:
        return self._client._stream(EMBEDDINGS_PATH, self._freeze(), EmbeddingsResponse).first()


# ─────────────────────────────────────────────────────────────────────
# PULL / CREATE
# ─────────────────────────────────────────────────────────────────────

class PullSpec:
    """Builder for POST /api/pull."""

    def __init__(self, client: "OllamaClient", name: str):
        self._client = client
        self._name = require(name, "name")
        self._insecure: Optional[bool] = None

    def insecure(self, insecure: bool = True) -> "PullSpec":
        """Allow pulling from a registry without TLS verification."""
        self._insecure = require(insecure, "insecure")
        return self

    def _freeze(self, stream: bool) -> PullRequest:
        return PullRequest(name=self._name, insecure=self._insecure, stream=stream)

    def stream(self) -> DecodedStream[PullResponse]:
        """Stream download progress records."""
        return self._client._stream(PULL_PATH, self._freeze(True), PullResponse)

    def batch(self) -> PullResponse:
        """Block until the pull finishes and return the final status."""
        return self._client._stream(PULL_PATH, self._freeze(False), PullResponse).first()


class CreateSpec:
    """Builder for POST /api/create. The modelfile is sent verbatim."""

    def __init__(self, client: "OllamaClient", name: str, modelfile: str, path: Optional[Path] = None):
        self._client = client
        self._name = require(name, "name")
        self._modelfile = require(modelfile, "modelfile")
        self._path = str(path) if path is not None else None

    def _freeze(self, stream: bool) -> CreateRequest:
        return CreateRequest(name=self._name, modelfile=self._modelfile, stream=stream, path=self._path)

    def stream(self) -> DecodedStream[CreateResponse]:
        return self._client._stream(CREATE_PATH, self._freeze(True), CreateResponse)

    def batch(self) -> CreateResponse:
        return self._client._stream(CREATE_PATH, self._freeze(False), CreateResponse).first()


# ─────────────────────────────────────────────────────────────────────
# BLOBS
# ─────────────────────────────────────────────────────────────────────

class BlobsSpec:
    """Operations on one blob, addressed by digest (e.g. "sha256:...")."""

    def __init__(self, client: "OllamaClient", digest: str):
        self._client = client
        self._digest = require(digest, "digest")

    @property
    def path(self) -> str:
        return f"{BLOBS_PATH}/{self._digest}"

    def exists(self) -> bool:
        """HEAD the blob. True only for HTTP 200."""
        return self._client._exchange("HEAD", self.path, decode=Decode.STATUS).status_code == 200

    def push(self, data: bytes) -> int:
        """Upload the blob's bytes. Returns the HTTP status code."""
        require(data, "data")
        return self._client._exchange("POST", self.path, data, decode=Decode.STATUS).status_code
