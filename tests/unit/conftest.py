"""Shared fixtures for unit tests."""

import logging

import pytest

from microserve.domain.http_types import HeaderList, HttpRequest


@pytest.fixture(autouse=True)
def enable_log_propagation():
    """Ensure logs propagate to root so caplog can catch them."""
    logger = logging.getLogger("microserve")
    old_propagate = logger.propagate
    old_level = logger.level
    old_handlers = list(logger.handlers)
    logger.propagate = True
    yield
    for handler in logger.handlers:
        if handler not in old_handlers:
            handler.close()
    logger.handlers[:] = old_handlers
    logger.setLevel(old_level)
    logger.propagate = old_propagate


@pytest.fixture(name="make_request")
def make_request_fixture():
    """Factory building GET requests with sane defaults."""

    def _make(uri="/", method="GET", headers=None, body=None, version="HTTP/1.1"):
        return HttpRequest(method, uri, version, HeaderList(headers or []), body)

    return _make
