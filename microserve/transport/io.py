"""Bounded reads of a single request from a client socket."""

import logging
import socket
from typing import Optional, Tuple

from microserve.domain.correlation_id import CorrelationLoggerAdapter
from microserve.domain.http_types import HEADER_ENCODING
from microserve.pipeline.parser import find_header_boundary

IO_LOGGER = CorrelationLoggerAdapter(logging.getLogger("microserve.transport.io"), {})

RECV_SIZE = 4096


class RequestTooLarge(Exception):
    """Raised when the declared body exceeds the configured limit."""


class HeadTooLarge(Exception):
    """Raised when no header boundary arrives within the configured limit."""


class IncompleteRequest(Exception):
    """Raised when the client stops sending before the request is complete."""


def declared_body_length(head: bytes, max_body_bytes: int) -> Optional[int]:
    """Return the Content-Length of the header block, if any.

    Only used to bound the socket read; the header block itself is parsed
    later by the request parser.
    """
    for line in head.decode(HEADER_ENCODING).split("\n")[1:]:
        name, separator, value = line.rstrip("\r").partition(":")
        if not separator or name.lower() != "content-length":
            continue
        digits = value.strip()
        if not (digits.isascii() and digits.isdigit()):
            raise ValueError(f"Invalid Content-Length {digits[:32]!r}")
        length = int(digits)
        if length > max_body_bytes:
            raise RequestTooLarge(f"Body of {length} bytes exceeds {max_body_bytes}")
        return length
    return None


def receive_request(
    client_socket: socket.socket, max_request_bytes: int, max_body_bytes: int
) -> Tuple[bytes, Optional[int]]:
    """Read one request and return its bytes with the body length to parse.

    Reading stops once the header block is complete and, when the head
    declares a Content-Length, that many body bytes have arrived. If the
    peer closes before the header block ends, whatever arrived is returned
    unchanged for the parser to reject.
    """
    buffer = b""
    boundary = None
    while boundary is None:
        if len(buffer) >= max_request_bytes:
            raise HeadTooLarge(f"Header block exceeds {max_request_bytes} bytes")
        chunk = client_socket.recv(RECV_SIZE)
        if not chunk:
            return buffer, None
        buffer += chunk
        boundary = find_header_boundary(buffer)

    boundary_index, delimiter_length = boundary
    if boundary_index > max_request_bytes:
        raise HeadTooLarge(f"Header block exceeds {max_request_bytes} bytes")
    body_length = declared_body_length(buffer[:boundary_index], max_body_bytes)

    if body_length is not None:
        expected = boundary_index + delimiter_length + body_length
        while len(buffer) < expected:
            chunk = client_socket.recv(RECV_SIZE)
            if not chunk:
                raise IncompleteRequest("Connection closed before end of body")
            buffer += chunk
        buffer = buffer[:expected]

    if IO_LOGGER.logger.isEnabledFor(logging.DEBUG):
        IO_LOGGER.debug(
            "Request received",
            extra={"event": "request_received", "bytes_in": len(buffer)},
        )
    return buffer, body_length
