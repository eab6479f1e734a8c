"""Document-root file resolution with traversal checks and MIME inference."""

import logging
import os
import stat
from dataclasses import dataclass

from microserve.domain.correlation_id import CorrelationLoggerAdapter

RESOLVER_LOGGER = CorrelationLoggerAdapter(
    logging.getLogger("microserve.domain.static_files"), {}
)

DEFAULT_DOCUMENT = "/index.html"
DEFAULT_MIME_TYPE = "application/octet-stream"

MIME_TYPES = {
    ".html": "text/html",
    ".htm": "text/html",
    ".css": "text/css",
    ".js": "application/javascript",
    ".json": "application/json",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".txt": "text/plain",
    ".pdf": "application/pdf",
}


class ResolveError(Exception):
    """Base class for static resource resolution failures."""


class UnsafePath(ResolveError):
    """Raised when a URI could escape the document root."""


class NotFound(ResolveError):
    """Raised when the candidate path is missing or not a regular file."""


class ReadError(ResolveError):
    """Raised when an existing file cannot be read completely."""


@dataclass(frozen=True)
class StaticResource:
    """File contents loaded from the document root."""

    path: str
    content: bytes
    mime_type: str


def guess_mime_type(filename: str) -> str:
    """Map the last extension of filename to a MIME type."""
    basename = filename.rsplit("/", 1)[-1]
    _, dot, extension = basename.rpartition(".")
    if not dot:
        return DEFAULT_MIME_TYPE
    return MIME_TYPES.get(f".{extension.lower()}", DEFAULT_MIME_TYPE)


def is_safe_path(uri: str) -> bool:
    """Reject parent references, doubled slashes and NUL bytes."""
    return ".." not in uri and "//" not in uri and "\x00" not in uri


def default_document(uri: str) -> str:
    return DEFAULT_DOCUMENT if uri == "/" else uri


class StaticResourceResolver:
    """Resolves request URIs to files below a document root.

    Paths are formed by plain concatenation of the root and the URI after
    the safety check; nothing is canonicalized and nothing is cached, so
    every call stats and reads the file again.
    """

    def __init__(self, document_root: str) -> None:
        self._document_root = document_root.rstrip("/")

    @property
    def document_root(self) -> str:
        return self._document_root or "/"

    def build_path(self, uri: str) -> str:
        """Return the filesystem path for uri or raise UnsafePath."""
        if not is_safe_path(uri):
            RESOLVER_LOGGER.warning(
                "Unsafe path rejected",
                extra={"event": "unsafe_path", "route": uri},
            )
            raise UnsafePath(uri)
        return f"{self._document_root}{default_document(uri)}"

    def resolve(self, uri: str) -> StaticResource:
        """Load the file behind uri along with its MIME type."""
        path = self.build_path(uri)
        try:
            file_stat = os.stat(path)
        except OSError as exc:
            raise NotFound(path) from exc
        if not stat.S_ISREG(file_stat.st_mode):
            raise NotFound(path)

        content = _read_exactly(path, file_stat.st_size)
        resource = StaticResource(path, content, guess_mime_type(path))
        if RESOLVER_LOGGER.logger.isEnabledFor(logging.DEBUG):
            RESOLVER_LOGGER.debug(
                "Static resource loaded",
                extra={
                    "event": "static_resource_loaded",
                    "path": path,
                    "mime_type": resource.mime_type,
                    "bytes_out": len(content),
                },
            )
        return resource


def _read_exactly(path: str, size: int) -> bytes:
    try:
        with open(path, "rb") as file_handle:
            content = file_handle.read(size)
    except OSError as exc:
        raise ReadError(path) from exc
    if len(content) != size:
        raise ReadError(f"{path}: read {len(content)} of {size} bytes")
    return content
