"""
Configuration constants and environment loading for ollama-client.
"""

import os
from enum import Enum

import httpx

from ollama_client.errors import OllamaConfigurationError


# ─────────────────────────────────────────────────────────────────────
# DEFAULTS
# ─────────────────────────────────────────────────────────────────────

DEFAULT_OLLAMA_PORT: int = 11434
DEFAULT_OLLAMA_HOST: str = f"http://localhost:{DEFAULT_OLLAMA_PORT}"
DEFAULT_TIMEOUT_SECONDS: float = 300.0  # generation can take minutes


# ─────────────────────────────────────────────────────────────────────
# ENDPOINTS
# ─────────────────────────────────────────────────────────────────────

PING_PATH: str = "/"
LIST_PATH: str = "/api/tags"
PS_PATH: str = "/api/ps"
SHOW_PATH: str = "/api/show"
GENERATE_PATH: str = "/api/generate"
CHAT_PATH: str = "/api/chat"
EMBEDDINGS_PATH: str = "/api/embeddings"
CREATE_PATH: str = "/api/create"
PULL_PATH: str = "/api/pull"
COPY_PATH: str = "/api/copy"
DELETE_PATH: str = "/api/delete"
BLOBS_PATH: str = "/api/blobs"

# Completion reason reported by the server when an empty-prompt generate
# only loaded the model into memory.
LOAD_DONE_REASON: str = "load"


class Redirect(str, Enum):
    """Redirect policy for the underlying HTTP client."""
    NEVER = "never"
    ALWAYS = "always"
    NORMAL = "normal"  # follow, except HTTPS -> HTTP


# ─────────────────────────────────────────────────────────────────────
# ENVIRONMENT LOADING
# ─────────────────────────────────────────────────────────────────────

def normalize_host(host: str) -> str:
    """
    Validate a base URL and strip any trailing slash.

    Raises:
        OllamaConfigurationError: If host is empty or not an http(s) URL
    """
    if host is None:
        raise OllamaConfigurationError("host must not be None")
    value = host.strip().rstrip("/")
    if not value:
        raise OllamaConfigurationError("host must not be empty")
    if not value.startswith(("http://", "https://")):
        raise OllamaConfigurationError(
            f"host must be an http:// or https:// URL, got {host!r}"
        )
    if not _parse_url(value, host).host:
        raise OllamaConfigurationError(f"host has no hostname: {host!r}")
    return value


def _parse_url(value: str, original: str) -> httpx.URL:
    try:
        return httpx.URL(value)
    except httpx.InvalidURL as e:
        raise OllamaConfigurationError(f"Invalid host {original!r}: {e}") from e


def get_default_host() -> str:
    """
    Get the server host from environment or default.

    Reads OLLAMA_HOST. A bare value without a scheme is treated as plain
    HTTP and gets port 11434 when it names none, matching how the server
    itself interprets the variable.
    """
    value = os.environ.get("OLLAMA_HOST", "").strip()
    if not value:
        return DEFAULT_OLLAMA_HOST
    if not value.startswith(("http://", "https://")):
        url = _parse_url(f"http://{value}", value)
        if url.port is None:
            url = url.copy_with(port=DEFAULT_OLLAMA_PORT)
        value = str(url)
    return normalize_host(value)


def get_timeout_seconds() -> float:
    """
    Get request timeout from environment or default.

    Set OLLAMA_TIMEOUT_SECONDS in .env (default: 300). Unparseable or
    non-positive values fall back to the default.
    """
    try:
        seconds = float(os.environ.get("OLLAMA_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS))
    except ValueError:
        return DEFAULT_TIMEOUT_SECONDS
    return seconds if seconds > 0 else DEFAULT_TIMEOUT_SECONDS
