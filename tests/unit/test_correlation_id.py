"""Unit tests for correlation ID context handling and the logger adapter."""

import logging
import threading
import uuid

import pytest

from microserve.domain.correlation_id import (
    CorrelationLoggerAdapter,
    clear_correlation_id,
    generate_correlation_id,
    get_correlation_id,
    set_correlation_id,
)


@pytest.fixture(autouse=True)
def reset_correlation_id():
    """Start and finish every test without a correlation ID."""
    clear_correlation_id()
    yield
    clear_correlation_id()


@pytest.fixture(name="logger_adapter")
def logger_adapter_fixture():
    """Adapter over a component logger."""
    return CorrelationLoggerAdapter(logging.getLogger("microserve.pipeline.router"), {})


def test_generate_correlation_id_returns_unique_uuids():
    """Generated IDs are distinct UUID4 strings."""
    first, second = generate_correlation_id(), generate_correlation_id()
    assert uuid.UUID(first).version == 4
    assert first != second


def test_set_get_and_clear():
    """Setters reflect via the getter until cleared."""
    assert get_correlation_id() is None
    set_correlation_id("abc")
    assert get_correlation_id() == "abc"
    clear_correlation_id()
    assert get_correlation_id() is None


def test_correlation_id_isolated_between_threads():
    """Each worker thread sees only its own ID."""
    results = {}

    def worker(worker_id: str):
        set_correlation_id(f"worker-{worker_id}")
        results[worker_id] = get_correlation_id()

    threads = [threading.Thread(target=worker, args=(str(i),)) for i in range(5)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert results == {str(i): f"worker-{i}" for i in range(5)}
    assert get_correlation_id() is None


def test_adapter_injects_correlation_id_and_component(logger_adapter):
    """The adapter tags records with the ID and the logger's component."""
    set_correlation_id("cid-1")
    _, kwargs = logger_adapter.process("msg", {})
    assert kwargs["extra"]["correlation_id"] == "cid-1"
    assert kwargs["extra"]["component"] == "pipeline.router"


def test_adapter_defaults_correlation_id_when_missing(logger_adapter):
    """Without a context ID the placeholder '-' is used."""
    _, kwargs = logger_adapter.process("msg", {})
    assert kwargs["extra"]["correlation_id"] == "-"


def test_adapter_does_not_modify_caller_extra(logger_adapter):
    """The caller's extra dict is copied, not mutated."""
    original = {"route": "/hello"}
    _, kwargs = logger_adapter.process("msg", {"extra": original})
    assert kwargs["extra"]["route"] == "/hello"
    assert original == {"route": "/hello"}


def test_adapter_keeps_foreign_logger_names():
    """Loggers outside the project tree report their full name."""
    adapter = CorrelationLoggerAdapter(logging.getLogger("other.lib"), {})
    _, kwargs = adapter.process("msg", {})
    assert kwargs["extra"]["component"] == "other.lib"
