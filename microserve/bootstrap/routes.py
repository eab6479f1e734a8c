"""Default route table."""

import logging

from microserve.domain.correlation_id import CorrelationLoggerAdapter
from microserve.domain.static_files import StaticResourceResolver
from microserve.handlers.file_handler import StaticFileHandler
from microserve.handlers.system_handlers import EchoHandler, HelloHandler, HomePageHandler
from microserve.pipeline.router import Router

ROUTES_LOGGER = CorrelationLoggerAdapter(
    logging.getLogger("microserve.bootstrap.routes"), {}
)


def build_router(document_root: str, static_fallback: bool = True) -> Router:
    """Register the built-in routes and freeze the table.

    With static_fallback, paths without a route are looked up under
    document_root before answering 404.
    """
    fallback = (
        StaticFileHandler(StaticResourceResolver(document_root))
        if static_fallback
        else None
    )
    router = Router(not_found=fallback)
    router.register("/", HomePageHandler())
    router.register("/hello", HelloHandler())
    router.register("/echo", EchoHandler())
    router.freeze()

    ROUTES_LOGGER.info(
        "Routes registered",
        extra={
            "event": "routes_registered",
            "route_count": len(router),
            "document_root": document_root,
            "static_fallback": static_fallback,
        },
    )
    return router
