"""
Wire schema for the Ollama HTTP API.

Request payloads are frozen: a Spec builds one at submission time and nothing
can change it afterwards. Optional fields left as None are dropped from the
serialized body so the server's own defaults apply.

Response records tolerate unknown fields; the server adds new ones over time.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class Format(str, Enum):
    JSON = "json"


class Role(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


# ─────────────────────────────────────────────────────────────────────
# SHARED
# ─────────────────────────────────────────────────────────────────────

class Payload(BaseModel):
    """Base for request bodies."""
    model_config = ConfigDict(frozen=True)

    def to_json(self) -> bytes:
        return self.model_dump_json(exclude_none=True).encode("utf-8")


class Record(BaseModel):
    """Base for decoded response records."""
    model_config = ConfigDict(extra="allow")


class Options(BaseModel):
    """
    Model runtime parameters.

    Only the parameters that are set are sent. Parameters not listed here
    can still be passed as keyword arguments and are forwarded as-is.
    """
    model_config = ConfigDict(frozen=True, extra="allow")

    num_keep: Optional[int] = None
    seed: Optional[int] = None
    num_predict: Optional[int] = None
    top_k: Optional[int] = None
    top_p: Optional[float] = None
    min_p: Optional[float] = None
    tfs_z: Optional[float] = None
    typical_p: Optional[float] = None
    repeat_last_n: Optional[int] = None
    temperature: Optional[float] = None
    repeat_penalty: Optional[float] = None
    presence_penalty: Optional[float] = None
    frequency_penalty: Optional[float] = None
    mirostat: Optional[int] = None
    mirostat_tau: Optional[float] = None
    mirostat_eta: Optional[float] = None
    penalize_newline: Optional[bool] = None
    stop: Optional[Tuple[str, ...]] = None
    numa: Optional[bool] = None
    num_ctx: Optional[int] = None
    num_batch: Optional[int] = None
    num_gpu: Optional[int] = None
    main_gpu: Optional[int] = None
    low_vram: Optional[bool] = None
    vocab_only: Optional[bool] = None
    use_mmap: Optional[bool] = None
    use_mlock: Optional[bool] = None
    num_thread: Optional[int] = None


class Message(BaseModel):
    """A single chat message. Images are base64-encoded strings."""
    model_config = ConfigDict(frozen=True, extra="allow")

    role: Role
    content: str = ""
    images: Optional[Tuple[str, ...]] = None

    @classmethod
    def system(cls, content: str, *images: str) -> "Message":
        return cls(role=Role.SYSTEM, content=content, images=images or None)

    @classmethod
    def user(cls, content: str, *images: str) -> "Message":
        return cls(role=Role.USER, content=content, images=images or None)

    @classmethod
    def assistant(cls, content: str, *images: str) -> "Message":
        return cls(role=Role.ASSISTANT, content=content, images=images or None)


class ErrorMessage(Record):
    """Body of a non-2xx response."""
    error: str


# ─────────────────────────────────────────────────────────────────────
# REQUESTS
# ─────────────────────────────────────────────────────────────────────

class GenerateRequest(Payload):
    model: str
    prompt: str
    images: Optional[Tuple[str, ...]] = None
    format: Optional[Format] = None
    options: Optional[Options] = None
    system: Optional[str] = None
    template: Optional[str] = None
    context: Optional[Tuple[int, ...]] = None
    stream: Optional[bool] = None
    raw: Optional[bool] = None
    keep_alive: Optional[str] = None


class ChatRequest(Payload):
    model: str
    messages: Tuple[Message, ...]
    format: Optional[Format] = None
    options: Optional[Options] = None
    stream: Optional[bool] = None
    keep_alive: Optional[str] = None


class EmbeddingsRequest(Payload):
    model: str
    prompt: str
    options: Optional[Options] = None
    keep_alive: Optional[str] = None


class PullRequest(Payload):
    name: str
    insecure: Optional[bool] = None
    stream: Optional[bool] = None


class CreateRequest(Payload):
    name: str
    modelfile: str
    stream: Optional[bool] = None
    path: Optional[str] = None


class ShowRequest(Payload):
    name: str


class CopyRequest(Payload):
    source: str
    destination: str


class DeleteRequest(Payload):
    name: str


# ─────────────────────────────────────────────────────────────────────
# RESPONSES
# ─────────────────────────────────────────────────────────────────────

class GenerateResponse(Record):
    model: str = ""
    created_at: Optional[str] = None
    response: str = ""
    done: bool = False
    done_reason: Optional[str] = None
    context: Optional[List[int]] = None
    total_duration: Optional[int] = None
    load_duration: Optional[int] = None
    prompt_eval_count: Optional[int] = None
    prompt_eval_duration: Optional[int] = None
    eval_count: Optional[int] = None
    eval_duration: Optional[int] = None


class ChatResponse(Record):
    model: str = ""
    created_at: Optional[str] = None
    message: Optional[Message] = None
    done: bool = False
    done_reason: Optional[str] = None
    total_duration: Optional[int] = None
    load_duration: Optional[int] = None
    prompt_eval_count: Optional[int] = None
    prompt_eval_duration: Optional[int] = None
    eval_count: Optional[int] = None
    eval_duration: Optional[int] = None


class EmbeddingsResponse(Record):
    embedding: List[float] = Field(default_factory=list)


class ProgressResponse(Record):
    """Progress record emitted while pulling or creating a model."""
    status: str = ""
    digest: Optional[str] = None
    total: Optional[int] = None
    completed: Optional[int] = None


class PullResponse(ProgressResponse):
    pass


class CreateResponse(ProgressResponse):
    pass


class ModelDetails(Record):
    parent_model: Optional[str] = None
    format: Optional[str] = None
    family: Optional[str] = None
    families: Optional[List[str]] = None
    parameter_size: Optional[str] = None
    quantization_level: Optional[str] = None


class ShowResponse(Record):
    modelfile: Optional[str] = None
    parameters: Optional[str] = None
    template: Optional[str] = None
    system: Optional[str] = None
    license: Optional[str] = None
    details: Optional[ModelDetails] = None
    model_info: Optional[Dict[str, Any]] = None
    modified_at: Optional[str] = None


class ListModel(Record):
    name: str
    model: Optional[str] = None
    modified_at: Optional[str] = None
    size: Optional[int] = None
    digest: Optional[str] = None
    details: Optional[ModelDetails] = None


class ListModels(Record):
    models: List[ListModel] = Field(default_factory=list)


class ProcessModel(Record):
    name: str
    model: Optional[str] = None
    size: Optional[int] = None
    digest: Optional[str] = None
    details: Optional[ModelDetails] = None
    expires_at: Optional[str] = None
    size_vram: Optional[int] = None


class ProcessModels(Record):
    models: List[ProcessModel] = Field(default_factory=list)
