"""Unit tests for sensitive data redaction in structured logs."""

import pytest

from microserve.bootstrap.logging_setup import redact_sensitive


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("/login?token=abc123", "/login?token=[REDACTED]"),
        ("/api?api_key=secret&page=2", "/api?api_key=[REDACTED]&page=2"),
        ("/cb?state=1&access_token=xyz#top", "/cb?state=1&access_token=[REDACTED]#top"),
        ("/reset?password=hunter2", "/reset?password=[REDACTED]"),
        ("/s3?Signature=xyz789", "/s3?Signature=[REDACTED]"),
        ("/files/0123456789abcdef0123456789abcdef", "/files/[REDACTED]"),
    ],
)
def test_credentials_in_request_targets_are_masked(value, expected):
    """Credential query values and long hex tokens are masked in place."""
    assert redact_sensitive(value) == expected


@pytest.mark.parametrize(
    "value",
    ["/hello", "/static/style.css", "/search?q=tokens", "127.0.0.1:5050", "text/html"],
)
def test_ordinary_values_pass_through(value):
    """Routine routes, addresses and MIME types are logged as-is."""
    assert redact_sensitive(value) == value


def test_empty_values_are_returned_unchanged():
    """Empty strings and None are passed through."""
    assert redact_sensitive("") == ""
    assert redact_sensitive(None) is None


def test_redaction_is_case_insensitive():
    """Upper-case parameter names are still caught."""
    assert redact_sensitive("/x?TOKEN=abc") == "/x?TOKEN=[REDACTED]"
    assert redact_sensitive("/x?Session=abc") == "/x?Session=[REDACTED]"
