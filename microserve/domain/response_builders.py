"""Pure HTTP response builders."""

from typing import Iterable

from microserve.domain.http_types import HttpResponse


def text_response(
    status_code: int, message: str, content_type: str = "text/plain"
) -> HttpResponse:
    """Return a response carrying message as its body."""
    response = HttpResponse(status_code)
    response.add_header("Content-Type", content_type)
    response.set_body(message)
    return response


def not_found_response() -> HttpResponse:
    """Return the canonical 404 for unrouted paths."""
    return text_response(404, "Page not found")


def file_not_found_response() -> HttpResponse:
    return text_response(404, "File not found")


def bad_request_response() -> HttpResponse:
    """Produce a 400 response for requests that failed to parse."""
    return text_response(400, "Bad request")


def method_not_allowed_response(allowed_methods: Iterable[str]) -> HttpResponse:
    """Produce a 405 response enumerating the supported HTTP methods."""
    response = text_response(405, "Method not allowed")
    response.add_header("Allow", ", ".join(sorted(allowed_methods)))
    return response


def internal_error_response() -> HttpResponse:
    return text_response(500, "Internal server error")


def entity_too_large_response() -> HttpResponse:
    """Produce a 413 response for bodies over the configured limit."""
    return text_response(413, "Payload too large")


def draining_response() -> HttpResponse:
    """Produce a 503 response indicating the server is draining."""
    return text_response(503, "draining")
