"""Turns raw request bytes into a response through parse, validate, route."""

import logging
from typing import Iterable, Optional

from microserve.domain.correlation_id import CorrelationLoggerAdapter
from microserve.domain.http_types import HttpResponse
from microserve.domain.response_builders import (
    bad_request_response,
    internal_error_response,
)
from microserve.pipeline.parser import MalformedRequest, parse_request
from microserve.pipeline.router import Router
from microserve.pipeline.serializer import Sink, write_response
from microserve.pipeline.validation import ALLOWED_METHODS, enforce_allowed_method

PROCESSING_LOGGER = CorrelationLoggerAdapter(
    logging.getLogger("microserve.pipeline.processing"), {}
)


def build_response(
    raw: bytes,
    router: Router,
    body_length: Optional[int] = None,
    allowed_methods: Iterable[str] = ALLOWED_METHODS,
) -> HttpResponse:
    """Produce the response for one raw request; never raises."""
    try:
        request = parse_request(raw, body_length)
    except MalformedRequest as exc:
        PROCESSING_LOGGER.warning(
            "Malformed request received",
            extra={"event": "malformed_request", "error": str(exc)},
        )
        return bad_request_response()

    try:
        method_error = enforce_allowed_method(request, allowed_methods)
        if method_error is not None:
            PROCESSING_LOGGER.info(
                "Method not allowed",
                extra={
                    "event": "method_not_allowed",
                    "method": request.method,
                    "route": request.uri,
                },
            )
            return method_error

        return router.dispatch(request)
    except Exception as error:  # pylint: disable=broad-except
        PROCESSING_LOGGER.error(
            "Handler failed",
            extra={
                "event": "handler_error",
                "route": request.uri,
                "error_type": type(error).__name__,
            },
            exc_info=True,
        )
        return internal_error_response()
    finally:
        request.release()


def handle_raw_request(
    raw: bytes,
    router: Router,
    sink: Sink,
    body_length: Optional[int] = None,
) -> int:
    """Build, write and release the response; return its status code."""
    response = build_response(raw, router, body_length)
    status_code = response.status_code
    try:
        bytes_out = write_response(response, sink)
    finally:
        response.release()
    PROCESSING_LOGGER.info(
        "Request handled",
        extra={
            "event": "request_handled",
            "status_code": status_code,
            "bytes_out": bytes_out,
        },
    )
    return status_code
