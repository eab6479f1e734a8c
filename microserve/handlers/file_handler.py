"""Static file serving handler."""

import logging

from microserve.domain.correlation_id import CorrelationLoggerAdapter
from microserve.domain.http_types import HttpRequest, HttpResponse
from microserve.domain.response_builders import (
    file_not_found_response,
    internal_error_response,
)
from microserve.domain.static_files import (
    NotFound,
    ReadError,
    StaticResourceResolver,
    UnsafePath,
)

FILE_LOGGER = CorrelationLoggerAdapter(
    logging.getLogger("microserve.handlers.file"), {}
)

CACHE_CONTROL = "public, max-age=3600"


class StaticFileHandler:
    """Serves files from the document root behind a resolver."""

    def __init__(self, resolver: StaticResourceResolver) -> None:
        self.resolver = resolver

    def handle(self, request: HttpRequest) -> HttpResponse:
        try:
            resource = self.resolver.resolve(request.uri)
        except UnsafePath:
            FILE_LOGGER.warning(
                "Forbidden path access blocked",
                extra={"event": "forbidden_path", "route": request.uri},
            )
            return file_not_found_response()
        except NotFound as exc:
            FILE_LOGGER.info(
                "File not found",
                extra={"event": "file_not_found", "route": request.uri, "path": str(exc)},
            )
            return file_not_found_response()
        except ReadError as exc:
            FILE_LOGGER.error(
                "File read failed",
                extra={
                    "event": "file_read_failed",
                    "route": request.uri,
                    "error": str(exc),
                },
            )
            return internal_error_response()

        response = HttpResponse(200)
        response.add_header("Content-Type", resource.mime_type)
        response.add_header("Cache-Control", CACHE_CONTROL)
        response.body = resource.content
        FILE_LOGGER.info(
            "File read operation complete",
            extra={
                "event": "static_file_served",
                "route": request.uri,
                "path": resource.path,
                "bytes_out": len(resource.content),
            },
        )
        return response
