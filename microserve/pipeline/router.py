"""Exact-path request routing."""

import logging
from typing import NamedTuple, Optional

from microserve.domain.correlation_id import CorrelationLoggerAdapter
from microserve.domain.http_types import CapacityExceeded, HttpRequest, HttpResponse
from microserve.handlers.base import Handler, as_handler
from microserve.handlers.system_handlers import NotFoundHandler

ROUTER_LOGGER = CorrelationLoggerAdapter(
    logging.getLogger("microserve.pipeline.router"), {}
)

MAX_ROUTES = 50


class Route(NamedTuple):
    path: str
    handler: Handler


class Router:
    """Ordered table of exact-match routes.

    Lookup scans routes in registration order and the first entry whose
    path equals the request URI wins, so a later registration of the same
    path never takes effect. The table is populated at startup and
    frozen before it is shared with connection workers.
    """

    def __init__(
        self, capacity: int = MAX_ROUTES, not_found: Optional[Handler] = None
    ) -> None:
        self._capacity = capacity
        self._routes: list[Route] = []
        self._fallback = (
            as_handler(not_found) if not_found is not None else NotFoundHandler()
        )
        self._frozen = False

    @property
    def routes(self) -> tuple[Route, ...]:
        return tuple(self._routes)

    @property
    def fallback(self) -> Handler:
        return self._fallback

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def __len__(self) -> int:
        return len(self._routes)

    def register(self, path: str, handler) -> None:
        """Append a route; fails loudly once the table is full or frozen."""
        if self._frozen:
            raise RuntimeError("Router is frozen; register routes before serving")
        if len(self._routes) >= self._capacity:
            raise CapacityExceeded(
                f"Route table is full ({self._capacity}); cannot register {path!r}"
            )
        if any(route.path == path for route in self._routes):
            ROUTER_LOGGER.warning(
                "Duplicate route registered; first registration wins",
                extra={"event": "route_duplicate", "route": path},
            )
        self._routes.append(Route(path, as_handler(handler)))
        if ROUTER_LOGGER.logger.isEnabledFor(logging.DEBUG):
            ROUTER_LOGGER.debug(
                "Route registered",
                extra={
                    "event": "route_registered",
                    "route": path,
                    "route_count": len(self._routes),
                },
            )

    def freeze(self) -> None:
        self._frozen = True

    def match(self, uri: str) -> Optional[Handler]:
        """Return the handler of the first route whose path equals uri."""
        for route in self._routes:
            if route.path == uri:
                return route.handler
        return None

    def dispatch(self, request: HttpRequest) -> HttpResponse:
        """Route the request to its handler and return the response."""
        handler = self.match(request.uri)
        if handler is None:
            return self._fallback.handle(request)
        if ROUTER_LOGGER.logger.isEnabledFor(logging.DEBUG):
            ROUTER_LOGGER.debug(
                "Route matched",
                extra={"event": "route_matched", "route": request.uri},
            )
        return handler.handle(request)
