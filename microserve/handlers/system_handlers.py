"""Built-in handlers for the home, hello, echo and not-found endpoints."""

import logging

from microserve.domain.correlation_id import CorrelationLoggerAdapter
from microserve.domain.http_types import HttpRequest, HttpResponse
from microserve.domain.response_builders import not_found_response, text_response

SYSTEM_LOGGER = CorrelationLoggerAdapter(
    logging.getLogger("microserve.handlers.system"), {}
)

HOME_PAGE = "<html><body><h1>Welcome to our HTTP Server!</h1></body></html>"
HELLO_TEXT = "Hello, World!"


class HomePageHandler:
    """Serves the fixed welcome page."""

    def handle(self, request: HttpRequest) -> HttpResponse:
        return text_response(200, HOME_PAGE, content_type="text/html")


class HelloHandler:
    def handle(self, request: HttpRequest) -> HttpResponse:
        return text_response(200, HELLO_TEXT)


class EchoHandler:
    """Replies with the request line as it was parsed."""

    def handle(self, request: HttpRequest) -> HttpResponse:
        if SYSTEM_LOGGER.logger.isEnabledFor(logging.DEBUG):
            SYSTEM_LOGGER.debug(
                "Echo request processed",
                extra={"event": "echo_request", "route": request.uri},
            )
        return text_response(
            200, f"{request.method} {request.uri} {request.version}"
        )


class NotFoundHandler:
    """Fallback used when no route matches."""

    def handle(self, request: HttpRequest) -> HttpResponse:
        SYSTEM_LOGGER.info(
            "No matching route found",
            extra={
                "event": "route_not_found",
                "route": request.uri,
                "method": request.method,
            },
        )
        return not_found_response()
