"""Tests for DecodedStream - laziness, ordering, cancellation, decode errors.

Uses httpx.MockTransport with generator bodies so tests can observe exactly
how much of a response has been pulled off the wire.
"""

import json

import httpx
import pytest

from ollama_client.errors import ErrorKind, OllamaClientError, OllamaClientRequestError
from ollama_client.schema import GenerateResponse, PullResponse
from ollama_client.streaming import DecodedStream

from tests.conftest import MOCK_GENERATE_LINES, MOCK_PULL_LINES, url


# ─────────────────────────────────────────────────────────────────────
# HELPERS
# ─────────────────────────────────────────────────────────────────────

def open_stream(body, record_type=GenerateResponse) -> DecodedStream:
    """Send a request to a MockTransport returning `body` and wrap the open response."""
    transport = httpx.MockTransport(lambda request: httpx.Response(200, content=body))
    client = httpx.Client(transport=transport)
    request = client.build_request("POST", url("/api/generate"))
    response = client.send(request, stream=True)
    return DecodedStream(response, record_type, request)


def counting_body(records: list[dict], produced: list):
    """Yield one NDJSON line per chunk, recording each line as it is produced."""
    for record in records:
        produced.append(record)
        yield (json.dumps(record) + "\n").encode()


# ─────────────────────────────────────────────────────────────────────
# ORDERING
# ─────────────────────────────────────────────────────────────────────

class TestOrdering:

    def test_yields_one_record_per_line_in_order(self):
        produced = []
        stream = open_stream(counting_body(MOCK_PULL_LINES, produced), PullResponse)

        statuses = [r.status for r in stream]

        assert statuses == ["pulling manifest", "downloading sha256:78e26419b446", "success"]
        assert stream.records_read == 3
        assert stream.closed

    def test_records_are_typed(self):
        stream = open_stream(counting_body(MOCK_GENERATE_LINES, []))

        records = list(stream)

        assert all(isinstance(r, GenerateResponse) for r in records)
        assert records[-1].done is True
        assert records[-1].context == [1, 2, 3]

    def test_blank_lines_skipped(self):
        body = b'\n{"response": "a"}\n\n   \n{"response": "b"}\n\n'
        stream = open_stream(body)

        assert [r.response for r in stream] == ["a", "b"]

    def test_last_line_without_newline(self):
        stream = open_stream(b'{"response": "a"}\n{"response": "b"}')

        assert [r.response for r in stream] == ["a", "b"]

    def test_empty_body_yields_nothing(self):
        stream = open_stream(b"")

        assert list(stream) == []
        assert stream.closed


# ─────────────────────────────────────────────────────────────────────
# LAZINESS & CANCELLATION
# ─────────────────────────────────────────────────────────────────────

class TestLaziness:

    def test_nothing_read_before_first_next(self):
        produced = []
        open_stream(counting_body(MOCK_GENERATE_LINES, produced))

        assert produced == []

    def test_each_next_reads_one_line(self):
        produced = []
        stream = open_stream(counting_body(MOCK_GENERATE_LINES, produced))

        next(stream)
        assert len(produced) == 1
        next(stream)
        assert len(produced) == 2

    def test_close_after_k_records_leaves_rest_unread(self):
        lines = [{"response": str(i)} for i in range(5)]
        produced = []
        stream = open_stream(counting_body(lines, produced))

        assert next(stream).response == "0"
        stream.close()

        assert len(produced) == 1
        assert stream.closed
        assert list(stream) == []

    def test_with_block_releases_on_early_exit(self):
        lines = [{"response": str(i)} for i in range(5)]
        produced = []

        with open_stream(counting_body(lines, produced)) as stream:
            for record in stream:
                if record.response == "1":
                    break

        assert stream.closed
        assert len(produced) == 2

    def test_not_restartable(self):
        stream = open_stream(counting_body(MOCK_GENERATE_LINES, []))

        assert len(list(stream)) == 3
        assert list(stream) == []

    def test_close_twice_is_noop(self):
        stream = open_stream(b'{"response": "a"}\n')
        stream.close()
        stream.close()
        assert stream.closed


# ─────────────────────────────────────────────────────────────────────
# first()
# ─────────────────────────────────────────────────────────────────────

class TestFirst:

    def test_returns_first_record_and_closes(self):
        produced = []
        stream = open_stream(counting_body(MOCK_GENERATE_LINES, produced))

        record = stream.first()

        assert record.response == "Hel"
        assert stream.closed
        assert len(produced) == 1

    def test_empty_body_raises_no_result(self):
        stream = open_stream(b"\n\n")

        with pytest.raises(OllamaClientError, match="No result") as exc_info:
            stream.first()

        assert exc_info.value.kind is ErrorKind.CLIENT
        assert exc_info.value.url == url("/api/generate")
        assert stream.closed


# ─────────────────────────────────────────────────────────────────────
# ERRORS
# ─────────────────────────────────────────────────────────────────────

class TestStreamErrors:

    def test_malformed_line_raises_and_terminates(self):
        stream = open_stream(b'{"response": "ok"}\nnot json\n{"response": "never"}\n')

        assert next(stream).response == "ok"
        with pytest.raises(OllamaClientError, match="Malformed GenerateResponse") as exc_info:
            next(stream)

        assert exc_info.value.kind is ErrorKind.CLIENT
        assert exc_info.value.method == "POST"
        assert stream.closed
        assert list(stream) == []

    def test_wrong_shape_is_malformed(self):
        stream = open_stream(b'{"response": ["not", "a", "string"]}\n')

        with pytest.raises(OllamaClientError, match="Malformed"):
            next(stream)

    def test_read_failure_mid_stream_is_request_error(self):
        def broken_body():
            yield b'{"response": "a"}\n'
            raise httpx.ReadError("connection reset by peer")

        stream = open_stream(broken_body())

        assert next(stream).response == "a"
        with pytest.raises(OllamaClientRequestError, match="connection reset") as exc_info:
            next(stream)

        assert exc_info.value.url == url("/api/generate")
        assert stream.closed
