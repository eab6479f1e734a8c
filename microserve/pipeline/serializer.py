"""Serialization of HttpResponse objects onto an output sink."""

import io
import logging
import socket
from typing import Optional, Protocol

from microserve.domain.correlation_id import CorrelationLoggerAdapter
from microserve.domain.http_types import HEADER_ENCODING, HttpResponse

SERIALIZER_LOGGER = CorrelationLoggerAdapter(
    logging.getLogger("microserve.pipeline.serializer"), {}
)

CRLF = b"\r\n"
DEFAULT_VERSION = "1.1"
UNKNOWN_REASON = "Unknown"

REASON_PHRASES = {
    200: "OK",
    400: "Bad Request",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    413: "Payload Too Large",
    500: "Internal Server Error",
    503: "Service Unavailable",
}


class Sink(Protocol):
    """Byte destination; write returns the count written or None for all."""

    def write(self, data: bytes) -> Optional[int]: ...


class SocketSink:
    """Sink writing to a connected socket with send()."""

    def __init__(self, client_socket: socket.socket) -> None:
        self._socket = client_socket

    def write(self, data: bytes) -> Optional[int]:
        return self._socket.send(data)


def reason_phrase(status_code: int) -> str:
    return REASON_PHRASES.get(status_code, UNKNOWN_REASON)


def status_line(status_code: int, version: str = DEFAULT_VERSION) -> bytes:
    line = f"HTTP/{version} {status_code} {reason_phrase(status_code)}"
    return line.encode(HEADER_ENCODING) + CRLF


def _header_line(key: str, value: str) -> bytes:
    return f"{key}: {value}".encode(HEADER_ENCODING) + CRLF


def _write_fully(sink: Sink, data: bytes) -> int:
    """Write data, retrying short writes until done or the sink stalls."""
    view = memoryview(data)
    written = 0
    while written < len(view):
        count = sink.write(bytes(view[written:]))
        if count is None:
            count = len(view) - written
        if count <= 0:
            SERIALIZER_LOGGER.warning(
                "Sink stopped accepting data",
                extra={
                    "event": "short_write",
                    "bytes_out": written,
                    "bytes_expected": len(view),
                },
            )
            break
        written += count
    return written


def write_response(
    response: HttpResponse, sink: Sink, version: str = DEFAULT_VERSION
) -> int:
    """Write status line, headers, Content-Length, blank line and body.

    Content-Length is emitted only for a present, non-empty body. Returns
    the number of bytes the sink accepted.
    """
    total = _write_fully(sink, status_line(response.status_code, version))

    header_block = bytearray()
    for key, value in response.headers:
        if key.lower() == "content-length":
            SERIALIZER_LOGGER.warning(
                "Dropping stored Content-Length header",
                extra={"event": "content_length_dropped"},
            )
            continue
        header_block += _header_line(key, value)
    if header_block:
        total += _write_fully(sink, bytes(header_block))

    if response.body:
        total += _write_fully(
            sink, _header_line("Content-Length", str(len(response.body)))
        )
    total += _write_fully(sink, CRLF)

    if response.body:
        total += _write_fully(sink, response.body)

    if SERIALIZER_LOGGER.logger.isEnabledFor(logging.DEBUG):
        SERIALIZER_LOGGER.debug(
            "Sent response",
            extra={
                "event": "response_written",
                "status_code": response.status_code,
                "bytes_out": total,
            },
        )
    return total


def serialize_response(response: HttpResponse, version: str = DEFAULT_VERSION) -> bytes:
    """Return the full wire representation of response."""
    buffer = io.BytesIO()
    write_response(response, buffer, version)
    return buffer.getvalue()
