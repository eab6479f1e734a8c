"""Handler capability shared by every routed endpoint."""

from typing import Callable, Protocol, runtime_checkable

from microserve.domain.http_types import HttpRequest, HttpResponse


@runtime_checkable
class Handler(Protocol):
    """Anything that turns a request into a response."""

    def handle(self, request: HttpRequest) -> HttpResponse: ...


class FunctionHandler:
    """Adapts a plain function to the Handler interface."""

    def __init__(self, func: Callable[[HttpRequest], HttpResponse]) -> None:
        self._func = func

    def handle(self, request: HttpRequest) -> HttpResponse:
        return self._func(request)

    def __repr__(self) -> str:
        name = getattr(self._func, "__qualname__", repr(self._func))
        return f"FunctionHandler({name})"


def as_handler(candidate) -> Handler:
    """Return candidate as a Handler, wrapping bare callables."""
    if isinstance(candidate, Handler):
        return candidate
    if callable(candidate):
        return FunctionHandler(candidate)
    raise TypeError(f"{candidate!r} is neither a handler nor callable")
