"""Shared test fixtures for ollama-client tests."""

import json

import httpx
import pytest


# ─────────────────────────────────────────────────────────────────────
# MOCK DATA
# ─────────────────────────────────────────────────────────────────────

MOCK_HOST = "http://ollama.test:11434"

MOCK_MODEL = "llama2"
MOCK_MODEL_2 = "mistral:7b"

MOCK_TAGS_RESPONSE = {
    "models": [
        {
            "name": MOCK_MODEL,
            "model": MOCK_MODEL,
            "modified_at": "2024-05-01T10:00:00.123456789Z",
            "size": 3826793677,
            "digest": "sha256:78e26419b446",
            "details": {"family": "llama", "parameter_size": "7B", "quantization_level": "Q4_0"},
        },
        {
            "name": MOCK_MODEL_2,
            "model": MOCK_MODEL_2,
            "size": 4109865159,
            "digest": "sha256:61e88e884507",
        },
    ]
}

MOCK_PS_RESPONSE = {
    "models": [
        {
            "name": MOCK_MODEL,
            "model": MOCK_MODEL,
            "size": 5137025024,
            "size_vram": 5137025024,
            "expires_at": "2024-06-04T14:38:31.83753-07:00",
        }
    ]
}

MOCK_GENERATE_LINES = [
    {"model": MOCK_MODEL, "created_at": "2024-05-01T10:00:00Z", "response": "Hel", "done": False},
    {"model": MOCK_MODEL, "created_at": "2024-05-01T10:00:01Z", "response": "lo", "done": False},
    {
        "model": MOCK_MODEL,
        "created_at": "2024-05-01T10:00:02Z",
        "response": "",
        "done": True,
        "done_reason": "stop",
        "context": [1, 2, 3],
        "eval_count": 2,
    },
]

MOCK_CHAT_LINES = [
    {"model": MOCK_MODEL, "message": {"role": "assistant", "content": "Bon"}, "done": False},
    {"model": MOCK_MODEL, "message": {"role": "assistant", "content": "jour"}, "done": False},
    {"model": MOCK_MODEL, "message": {"role": "assistant", "content": ""}, "done": True, "done_reason": "stop"},
]

MOCK_PULL_LINES = [
    {"status": "pulling manifest"},
    {"status": "downloading sha256:78e26419b446", "digest": "sha256:78e26419b446", "total": 100, "completed": 50},
    {"status": "success"},
]


def ndjson(records: list[dict]) -> bytes:
    """Build an NDJSON body, one object per line."""
    return "".join(json.dumps(r) + "\n" for r in records).encode()


def url(path: str) -> str:
    return f"{MOCK_HOST}{path}"


def sent_json(route) -> dict:
    """Decode the JSON body of the last request a respx route received."""
    return json.loads(route.calls.last.request.content)


# ─────────────────────────────────────────────────────────────────────
# FIXTURES
# ─────────────────────────────────────────────────────────────────────

@pytest.fixture
def client():
    """OllamaClient pointed at the mock host."""
    from ollama_client.client import OllamaClient
    client = OllamaClient(MOCK_HOST, timeout=5.0)
    yield client
    client.close()


@pytest.fixture
def http_client():
    """Bare httpx.Client for transport-level tests."""
    with httpx.Client(timeout=5.0) as c:
        yield c


@pytest.fixture
def clean_env(monkeypatch):
    """Remove client-related environment variables."""
    monkeypatch.delenv("OLLAMA_HOST", raising=False)
    monkeypatch.delenv("OLLAMA_TIMEOUT_SECONDS", raising=False)
    return monkeypatch
