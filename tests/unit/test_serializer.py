"""Unit tests validating response serialization."""

import io
import socket
from unittest.mock import MagicMock

from microserve.domain.http_types import HttpResponse
from microserve.domain.response_builders import text_response
from microserve.pipeline.serializer import (
    SocketSink,
    reason_phrase,
    serialize_response,
    write_response,
)


class RecordingSink:
    """Sink accepting at most max_chunk bytes per write call."""

    def __init__(self, max_chunk=None, stall_after=None):
        self.writes = []
        self.max_chunk = max_chunk
        self.stall_after = stall_after

    def write(self, data):
        if self.stall_after is not None and len(self.writes) >= self.stall_after:
            return 0
        accepted = data if self.max_chunk is None else data[: self.max_chunk]
        self.writes.append(accepted)
        return len(accepted)

    @property
    def data(self):
        return b"".join(self.writes)


def test_response_without_body_has_no_content_length():
    """No body means no Content-Length header at all."""
    response = HttpResponse(404)
    response.add_header("Content-Type", "text/plain")
    assert serialize_response(response) == (
        b"HTTP/1.1 404 Not Found\r\nContent-Type: text/plain\r\n\r\n"
    )


def test_empty_body_also_omits_content_length():
    """A zero-length body is treated like no body."""
    response = HttpResponse()
    response.body = b""
    assert serialize_response(response) == b"HTTP/1.1 200 OK\r\n\r\n"


def test_body_gets_exact_content_length():
    """Content-Length equals the byte count of the written body."""
    response = text_response(200, "héllo")
    wire = serialize_response(response)
    head, body = wire.split(b"\r\n\r\n", 1)
    assert body == "héllo".encode()
    assert b"Content-Length: 6" in head.split(b"\r\n")


def test_headers_keep_stored_order_and_duplicates():
    """Headers are written in stored order, before Content-Length."""
    response = HttpResponse(200)
    response.add_header("Set-Cookie", "a=1")
    response.add_header("X-Trace", "t")
    response.add_header("Set-Cookie", "b=2")
    response.set_body(b"ok")
    assert serialize_response(response) == (
        b"HTTP/1.1 200 OK\r\n"
        b"Set-Cookie: a=1\r\n"
        b"X-Trace: t\r\n"
        b"Set-Cookie: b=2\r\n"
        b"Content-Length: 2\r\n"
        b"\r\n"
        b"ok"
    )


def test_stored_content_length_is_not_duplicated():
    """A Content-Length smuggled into the header list is dropped."""
    response = HttpResponse(200)
    response.headers.add("Content-Length", "999")
    response.set_body(b"abc")
    wire = serialize_response(response)
    assert wire.count(b"Content-Length") == 1
    assert b"Content-Length: 3\r\n" in wire


def test_reason_phrases():
    """Known codes get their phrase and unknown ones a generic phrase."""
    assert reason_phrase(200) == "OK"
    assert reason_phrase(400) == "Bad Request"
    assert reason_phrase(404) == "Not Found"
    assert reason_phrase(405) == "Method Not Allowed"
    assert reason_phrase(500) == "Internal Server Error"
    assert reason_phrase(299) == "Unknown"
    assert serialize_response(HttpResponse(299)).startswith(b"HTTP/1.1 299 Unknown\r\n")


def test_version_is_configurable():
    """The status line carries the requested protocol version."""
    assert serialize_response(HttpResponse(), version="1.0") == b"HTTP/1.0 200 OK\r\n\r\n"


def test_short_writes_are_retried_until_complete():
    """Partial writes continue with the remainder."""
    response = text_response(200, "x" * 50)
    sink = RecordingSink(max_chunk=7)
    total = write_response(response, sink)
    assert sink.data == serialize_response(response)
    assert total == len(sink.data)


def test_stalled_sink_is_not_fatal():
    """A sink that stops accepting bytes ends the write without raising."""
    response = text_response(200, "body")
    sink = RecordingSink(stall_after=1)
    total = write_response(response, sink)
    assert total == len(sink.data)
    assert sink.data == b"HTTP/1.1 200 OK\r\n"


def test_pieces_are_written_in_order():
    """Status line, headers, Content-Length, blank line, then body."""
    response = text_response(200, "hi")
    sink = RecordingSink()
    write_response(response, sink)
    assert sink.writes == [
        b"HTTP/1.1 200 OK\r\n",
        b"Content-Type: text/plain\r\n",
        b"Content-Length: 2\r\n",
        b"\r\n",
        b"hi",
    ]


def test_file_like_sinks_are_supported():
    """Buffered writers returning the byte count work as sinks."""
    buffer = io.BytesIO()
    write_response(text_response(200, "ok"), buffer)
    assert buffer.getvalue().endswith(b"\r\n\r\nok")


def test_socket_sink_uses_send():
    """SocketSink forwards to socket.send and reports its count."""
    client = MagicMock(spec=socket.socket)
    client.send.side_effect = lambda data: len(data)
    write_response(HttpResponse(404), SocketSink(client))
    sent = b"".join(call.args[0] for call in client.send.call_args_list)
    assert sent == b"HTTP/1.1 404 Not Found\r\n\r\n"


def test_latin1_header_values_reach_the_wire_unchanged():
    """Characters in ISO-8859-1 are sent byte for byte."""
    response = HttpResponse()
    response.add_header("X-Name", "café")
    assert serialize_response(response) == b"HTTP/1.1 200 OK\r\nX-Name: caf\xe9\r\n\r\n"


def test_sink_without_count_after_partial_write_reports_full_length():
    """A sink returning None accepts the remainder of the current piece."""

    class PartialThenSilentSink:
        def __init__(self):
            self.writes = []

        def write(self, data):
            self.writes.append(data)
            return 3 if len(self.writes) == 1 else None

    sink = PartialThenSilentSink()
    total = write_response(HttpResponse(), sink)
    expected = serialize_response(HttpResponse())
    assert total == len(expected)
    assert sink.writes[:2] == [b"HTTP/1.1 200 OK\r\n", b"P/1.1 200 OK\r\n"]
