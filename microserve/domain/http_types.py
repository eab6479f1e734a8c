"""Shared HTTP message types and their size limits."""

from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional, Tuple, Union

MAX_HEADERS = 50
MAX_HEADER_SIZE = 256
MAX_METHOD_SIZE = 16
MAX_URI_SIZE = 1024
MAX_VERSION_SIZE = 16

# Largest head the grammar accepts: request line, every header at full size,
# and the terminating blank line.
MAX_REQUEST_LINE_SIZE = MAX_METHOD_SIZE + MAX_URI_SIZE + MAX_VERSION_SIZE + 4
MAX_HEAD_SIZE = MAX_REQUEST_LINE_SIZE + MAX_HEADERS * (2 * MAX_HEADER_SIZE + 4) + 2

HEADER_ENCODING = "iso-8859-1"


class CapacityExceeded(Exception):
    """Raised when a bounded collection or field would overflow its limit."""


def field_size(value: str) -> int:
    """Return the on-wire byte size of a header-block field.

    Raises ValueError for text that has no ISO-8859-1 encoding.
    """
    try:
        return len(value.encode(HEADER_ENCODING))
    except UnicodeEncodeError as exc:
        raise ValueError(
            f"Header text {value[:32]!r} is not representable in {HEADER_ENCODING}"
        ) from exc


class HeaderList:
    """Ordered header pairs with duplicate keys kept and a fixed capacity."""

    def __init__(
        self,
        pairs: Optional[Iterable[Tuple[str, str]]] = None,
        capacity: int = MAX_HEADERS,
    ) -> None:
        self._capacity = capacity
        self._pairs: list[Tuple[str, str]] = []
        for key, value in pairs or ():
            self.add(key, value)

    def add(self, key: str, value: str) -> None:
        """Append a header, rejecting anything that violates the limits."""
        if not key:
            raise ValueError("Header name must not be empty")
        if any(char in text for text in (key, value) for char in "\r\n"):
            raise ValueError("Header fields must not contain line breaks")
        if len(self._pairs) >= self._capacity:
            raise CapacityExceeded(f"More than {self._capacity} headers")
        if field_size(key) > MAX_HEADER_SIZE or field_size(value) > MAX_HEADER_SIZE:
            raise CapacityExceeded(
                f"Header field longer than {MAX_HEADER_SIZE} bytes: {key[:32]!r}"
            )
        self._pairs.append((key, value))

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Return the first value whose key matches name case-insensitively."""
        wanted = name.lower()
        for key, value in self._pairs:
            if key.lower() == wanted:
                return value
        return default

    def get_all(self, name: str) -> list[str]:
        wanted = name.lower()
        return [value for key, value in self._pairs if key.lower() == wanted]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.get(name) is not None

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        return iter(self._pairs)

    def __len__(self) -> int:
        return len(self._pairs)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, HeaderList):
            return self._pairs == other._pairs
        if isinstance(other, list):
            return self._pairs == [tuple(pair) for pair in other]
        return NotImplemented

    def __repr__(self) -> str:
        return f"HeaderList({self._pairs!r})"


@dataclass
class HttpRequest:
    """Represents a parsed HTTP request.

    ``body`` is None when the request carried no body; an empty bytes
    object is an explicit zero-length body.
    """

    method: str = ""
    uri: str = ""
    version: str = ""
    headers: HeaderList = field(default_factory=HeaderList)
    body: Optional[bytes] = None

    @property
    def has_body(self) -> bool:
        return self.body is not None

    @property
    def body_length(self) -> int:
        return len(self.body) if self.body is not None else 0

    def release(self) -> None:
        """Drop the owned body buffer. Safe to call more than once."""
        self.body = None


@dataclass
class HttpResponse:
    """Represents an HTTP response to be sent to a client."""

    status_code: int = 200
    headers: HeaderList = field(default_factory=HeaderList)
    body: Optional[bytes] = None

    def add_header(self, key: str, value: str) -> None:
        """Store a header; Content-Length is derived at serialization time."""
        if key.lower() == "content-length":
            raise ValueError("Content-Length is derived from the body")
        self.headers.add(key, value)

    def set_body(self, data: Union[bytes, str]) -> None:
        self.body = data.encode() if isinstance(data, str) else bytes(data)

    @property
    def body_length(self) -> int:
        return len(self.body) if self.body is not None else 0

    def release(self) -> None:
        """Drop the owned body buffer. Safe to call more than once."""
        self.body = None
