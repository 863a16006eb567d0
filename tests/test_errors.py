"""Tests for ollama_client.errors - taxonomy, classification, translation."""

import httpx
import pytest

from ollama_client.errors import (
    ErrorKind,
    FailureKind,
    OllamaClientError,
    OllamaClientRequestError,
    OllamaClientResponseError,
    OllamaConfigurationError,
    classify_failure,
    require,
    translate_failure,
)


@pytest.fixture
def request_():
    return httpx.Request("POST", "http://ollama.test:11434/api/generate")


# ─────────────────────────────────────────────────────────────────────
# TAXONOMY
# ─────────────────────────────────────────────────────────────────────

class TestTaxonomy:
    """Every error is an OllamaClientError tagged with its kind."""

    def test_kinds(self):
        assert OllamaClientError("x").kind is ErrorKind.CLIENT
        assert OllamaClientRequestError("x", "GET", "http://h/").kind is ErrorKind.REQUEST
        assert OllamaClientResponseError("x", 404).kind is ErrorKind.RESPONSE
        assert OllamaConfigurationError("x").kind is ErrorKind.CONFIGURATION

    def test_all_derive_from_base(self):
        for cls in (OllamaClientRequestError, OllamaClientResponseError, OllamaConfigurationError):
            assert issubclass(cls, OllamaClientError)

    def test_configuration_error_is_value_error(self):
        assert issubclass(OllamaConfigurationError, ValueError)

    def test_str_includes_request_context(self):
        err = OllamaClientRequestError("Connection refused", "POST", "http://h/api/chat")
        assert str(err) == "Connection refused [POST http://h/api/chat]"

    def test_response_error_str_includes_status(self):
        err = OllamaClientResponseError("model not found", 404)
        assert str(err) == "HTTP 404: model not found"
        assert err.message == "model not found"

    def test_require_passes_value_through(self):
        assert require("llama2", "model") == "llama2"
        assert require("", "prompt") == ""

    def test_require_rejects_none(self):
        with pytest.raises(OllamaConfigurationError, match="model must not be None"):
            require(None, "model")


# ─────────────────────────────────────────────────────────────────────
# CLASSIFICATION
# ─────────────────────────────────────────────────────────────────────

class TestClassifyFailure:

    @pytest.mark.parametrize("exc", [
        OllamaClientResponseError("bad", 400),
        OllamaClientError("no result"),
    ])
    def test_already_translated(self, exc):
        assert classify_failure(exc) is FailureKind.TRANSLATED

    @pytest.mark.parametrize("exc", [
        httpx.ConnectError("Connection refused"),
        httpx.ReadTimeout("timed out"),
        httpx.RemoteProtocolError("bad chunk"),
        ConnectionResetError("reset"),
    ])
    def test_io(self, exc):
        assert classify_failure(exc) is FailureKind.IO

    def test_interrupted_error_is_not_io(self):
        """InterruptedError subclasses OSError but is classified as interruption."""
        assert classify_failure(InterruptedError()) is FailureKind.INTERRUPTED

    def test_stream_closed_is_interruption(self):
        assert classify_failure(httpx.StreamClosed()) is FailureKind.INTERRUPTED

    def test_unknown(self):
        assert classify_failure(KeyError("x")) is FailureKind.UNKNOWN


# ─────────────────────────────────────────────────────────────────────
# TRANSLATION
# ─────────────────────────────────────────────────────────────────────

class TestTranslateFailure:

    def test_reraises_response_error_unchanged(self, request_):
        original = OllamaClientResponseError("model not found", 404, "POST", "http://h/")
        with pytest.raises(OllamaClientResponseError) as exc_info:
            translate_failure(request_, original)
        assert exc_info.value is original

    def test_io_becomes_request_error_with_context(self, request_):
        cause = httpx.ConnectError("Connection refused")
        with pytest.raises(OllamaClientRequestError) as exc_info:
            translate_failure(request_, cause)
        err = exc_info.value
        assert err.method == "POST"
        assert err.url == "http://ollama.test:11434/api/generate"
        assert err.message == "Connection refused"
        assert err.__cause__ is cause

    def test_interruption_becomes_client_error(self, request_):
        with pytest.raises(OllamaClientError, match="interrupted") as exc_info:
            translate_failure(request_, InterruptedError("signal"))
        assert exc_info.value.kind is ErrorKind.CLIENT
        assert not isinstance(exc_info.value, OllamaClientRequestError)

    def test_unknown_becomes_client_error_with_cause(self, request_):
        cause = KeyError("choices")
        with pytest.raises(OllamaClientError) as exc_info:
            translate_failure(request_, cause)
        assert exc_info.value.kind is ErrorKind.CLIENT
        assert exc_info.value.__cause__ is cause
        assert exc_info.value.method == "POST"

    def test_empty_message_falls_back_to_type_name(self, request_):
        with pytest.raises(OllamaClientRequestError) as exc_info:
            translate_failure(request_, httpx.ReadTimeout(""))
        assert exc_info.value.message == "ReadTimeout"
