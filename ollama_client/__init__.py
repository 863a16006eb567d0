"""
ollama-client: typed, synchronous client for the Ollama HTTP API.
"""

from .client import ClientBuilder, OllamaClient
from .config import DEFAULT_OLLAMA_HOST, Redirect
from .errors import (
    ErrorKind,
    OllamaClientError,
    OllamaClientRequestError,
    OllamaClientResponseError,
    OllamaConfigurationError,
)
from .schema import Format, Message, Options, Role
from .streaming import DecodedStream

__all__ = [
    "ClientBuilder",
    "DEFAULT_OLLAMA_HOST",
    "DecodedStream",
    "ErrorKind",
    "Format",
    "Message",
    "OllamaClient",
    "OllamaClientError",
    "OllamaClientRequestError",
    "OllamaClientResponseError",
    "OllamaConfigurationError",
    "Options",
    "Redirect",
    "Role",
]
