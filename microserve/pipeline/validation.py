"""Request validation performed before routing."""

from typing import Iterable, Optional

from microserve.domain.http_types import HttpRequest, HttpResponse
from microserve.domain.response_builders import method_not_allowed_response

ALLOWED_METHODS = frozenset({"GET"})


def enforce_allowed_method(
    request: HttpRequest, allowed_methods: Iterable[str] = ALLOWED_METHODS
) -> Optional[HttpResponse]:
    """Return a 405 response when the method is outside the allowlist."""
    allowed = set(allowed_methods)
    if request.method in allowed:
        return None
    return method_not_allowed_response(allowed)
