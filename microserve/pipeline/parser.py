"""Parsing of raw HTTP/1.x request bytes into HttpRequest objects."""

import logging
from typing import Optional, Tuple

from microserve.domain.correlation_id import CorrelationLoggerAdapter
from microserve.domain.http_types import (
    HEADER_ENCODING,
    MAX_METHOD_SIZE,
    MAX_URI_SIZE,
    MAX_VERSION_SIZE,
    CapacityExceeded,
    HeaderList,
    HttpRequest,
    field_size,
)

PARSER_LOGGER = CorrelationLoggerAdapter(
    logging.getLogger("microserve.pipeline.parser"), {}
)

CRLF_BOUNDARY = b"\r\n\r\n"
LF_BOUNDARY = b"\n\n"


class MalformedRequest(ValueError):
    """Raised when the request line or header block violates the grammar."""


def find_header_boundary(raw: bytes) -> Optional[Tuple[int, int]]:
    """Return (offset, delimiter length) of the end of the header block."""
    index = raw.find(CRLF_BOUNDARY)
    if index != -1:
        return index, len(CRLF_BOUNDARY)
    index = raw.find(LF_BOUNDARY)
    if index != -1:
        return index, len(LF_BOUNDARY)
    return None


def _strip_cr(line: str) -> str:
    return line[:-1] if line.endswith("\r") else line


def parse_request_line(line: str) -> Tuple[str, str, str]:
    """Split the request line into method, URI and version."""
    tokens = [token for token in _strip_cr(line).split(" ") if token]
    if len(tokens) < 3:
        raise MalformedRequest("Request line needs method, URI and version")
    method, uri, version = tokens[:3]

    for name, value, limit in (
        ("method", method, MAX_METHOD_SIZE),
        ("URI", uri, MAX_URI_SIZE),
        ("version", version, MAX_VERSION_SIZE),
    ):
        if field_size(value) > limit:
            raise MalformedRequest(f"Request {name} longer than {limit} bytes")
    if not uri.startswith("/"):
        raise MalformedRequest("Request URI must start with '/'")
    return method, uri, version


def parse_header_line(line: str, headers: HeaderList) -> None:
    """Split a "Key: value" line on its first colon and append it."""
    key, separator, value = line.partition(":")
    if not separator:
        raise MalformedRequest(f"Header line without ':' ({line[:32]!r})")
    try:
        headers.add(key, value.lstrip(" \t"))
    except (CapacityExceeded, ValueError) as exc:
        raise MalformedRequest(str(exc)) from exc


def parse_request(raw: bytes, body_length: Optional[int] = None) -> HttpRequest:
    """Parse one request from raw bytes.

    The header block ends at the first CRLFCRLF, or LFLF when no CRLFCRLF is
    present. The body is never located by scanning: when ``body_length`` is
    given it is taken from the bytes following the header block, otherwise
    the request has no body.
    """
    boundary = find_header_boundary(raw)
    if boundary is None:
        raise MalformedRequest("Header block is not terminated by a blank line")
    boundary_index, delimiter_length = boundary

    line_end = raw.find(b"\n")
    if line_end == -1:
        raise MalformedRequest("Request line is not terminated")

    method, uri, version = parse_request_line(
        raw[:line_end].decode(HEADER_ENCODING)
    )
    request = HttpRequest(method=method, uri=uri, version=version)

    if line_end < boundary_index:
        header_block = raw[line_end + 1 : boundary_index].decode(HEADER_ENCODING)
        for line in header_block.split("\n"):
            line = _strip_cr(line)
            if not line:
                break
            parse_header_line(line, request.headers)

    if body_length is not None:
        if body_length < 0:
            raise MalformedRequest("Negative body length")
        body_start = boundary_index + delimiter_length
        body = raw[body_start : body_start + body_length]
        if len(body) != body_length:
            raise MalformedRequest("Body shorter than the declared length")
        request.body = body

    if PARSER_LOGGER.logger.isEnabledFor(logging.DEBUG):
        PARSER_LOGGER.debug(
            "Parsed request",
            extra={
                "event": "request_parsed",
                "method": request.method,
                "route": request.uri,
                "header_count": len(request.headers),
                "bytes_in": len(raw),
            },
        )
    return request
